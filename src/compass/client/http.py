"""HTTP adapter for a tRPC-style compliance API."""

from __future__ import annotations

import json
import os
from typing import Any, Callable, Optional, TypeVar

import httpx

from ..models.samm import OverallScore, Practice, StreamAssessment, StreamQuestion
from ..models.store import MutationResult, PlanResult
from ..utils.sanitize import sanitize_error
from .base import StoreError

T = TypeVar("T")


class HttpStore:
    """Talks to ``{endpoint}/{router}.{procedure}``.

    Queries are GET requests with a JSON ``input`` parameter; mutations POST
    the input as the JSON body.
    """

    name = "http"

    def __init__(
        self,
        backend_config: dict,
        common_config: dict,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = backend_config
        self.common = common_config
        self.endpoint = (backend_config.get("endpoint") or "").rstrip("/")
        self.router = backend_config.get("router", "sammV2")
        self.timeout = common_config.get("timeout_seconds", 30)
        self.transport = transport

    def _get_token(self) -> Optional[str]:
        env_var = self.config.get("api_key_env", "COMPASS_API_TOKEN")
        return os.environ.get(env_var)

    def _headers(self) -> dict[str, str]:
        headers = {"content-type": "application/json"}
        token = self._get_token()
        if token:
            headers["authorization"] = f"Bearer {token}"
        return headers

    def _url(self, procedure: str) -> str:
        if not self.endpoint:
            raise StoreError("No store endpoint configured (store.http.endpoint)")
        return f"{self.endpoint}/{self.router}.{procedure}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout, headers=self._headers(), transport=self.transport
        )

    @staticmethod
    def _unwrap(data: Any) -> Any:
        # tRPC wraps payloads as {"result": {"data": ...}}, optionally {"json": ...}
        if isinstance(data, dict) and "result" in data:
            result = data["result"]
            data = result.get("data") if isinstance(result, dict) else None
            if isinstance(data, dict) and set(data) == {"json"}:
                data = data["json"]
        return data

    def _error(self, exc: Exception) -> str:
        if isinstance(exc, httpx.HTTPStatusError):
            body = exc.response.text
            message = f"{exc.response.status_code} | {body}"
        else:
            message = str(exc) or type(exc).__name__
        return sanitize_error(message, secrets=[self._get_token() or ""])

    async def _query(self, procedure: str, payload: dict, parse: Callable[[Any], T]) -> T:
        """GET a procedure and parse its payload.

        Transport errors, non-JSON bodies and records that fail validation all
        surface as ``StoreError``.
        """
        url = self._url(procedure)
        try:
            async with self._client() as client:
                response = await client.get(url, params={"input": json.dumps(payload)})
                response.raise_for_status()
                return parse(self._unwrap(response.json()))
        except (httpx.HTTPError, ValueError, TypeError) as e:
            raise StoreError(f"{procedure} failed: {self._error(e)}") from e

    async def _mutate(self, procedure: str, payload: dict) -> Any:
        async with self._client() as client:
            response = await client.post(self._url(procedure), json=payload)
            response.raise_for_status()
            return self._unwrap(response.json())

    async def get_practices(self, client_id: Optional[int]) -> list[Practice]:
        return await self._query(
            "getPractices", {"clientId": client_id},
            lambda data: [Practice.model_validate(p) for p in data or []],
        )

    async def get_assessments(self, client_id: Optional[int]) -> list[StreamAssessment]:
        return await self._query(
            "getAssessments", {"clientId": client_id},
            lambda data: [StreamAssessment.model_validate(a) for a in data or []],
        )

    async def calculate_overall_score(self, client_id: Optional[int]) -> OverallScore:
        return await self._query(
            "calculateOverallScore", {"clientId": client_id},
            lambda data: OverallScore.model_validate(data or {}),
        )

    async def get_stream_questions(self, practice_id: str, stream_id: str) -> list[StreamQuestion]:
        return await self._query(
            "getStreamQuestions", {"practiceId": practice_id, "streamId": stream_id},
            lambda data: [StreamQuestion.model_validate(q) for q in data or []],
        )

    async def update_stream_assessment(self, payload: dict) -> MutationResult:
        try:
            data = await self._mutate("updateStreamAssessment", payload)
            return MutationResult.model_validate(data or {"success": True})
        except (httpx.HTTPError, StoreError, ValueError) as e:
            return MutationResult(success=False, error=self._error(e))

    async def generate_improvement_plan(self, client_id: Optional[int]) -> PlanResult:
        try:
            data = await self._mutate("generateImprovementPlan", {"clientId": client_id})
            return PlanResult.model_validate(data or {"success": True})
        except (httpx.HTTPError, StoreError, ValueError) as e:
            return PlanResult(success=False, error=self._error(e))
