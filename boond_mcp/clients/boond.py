"""BoondManager REST API client with response caching."""

import logging
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from boond_mcp.clients.cache import LRUCache
from boond_mcp.clients.resilience import (
    CircuitBreaker,
    PermanentAPIError,
    TransientAPIError,
    classify_response,
    resilient_request,
)
from boond_mcp.models.boond import (
    Candidate,
    CandidateSearchResponse,
    Company,
    CompanySearchResponse,
    CreateCandidate,
    SearchParams,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://ui.boondmanager.com/api/1.0"

# The API rejects pages larger than this
MAX_PAGE_SIZE = 100


def _cache_key(path: str, params: dict[str, Any] | None) -> str:
    if not params:
        return path
    return f"{path}?{urlencode(sorted(params.items()))}"


def _search_query(params: SearchParams) -> dict[str, Any]:
    query: dict[str, Any] = {
        "page": params.page,
        "limit": min(params.limit, MAX_PAGE_SIZE),
    }
    if params.query:
        query["query"] = params.query
    return query


class BoondClient:
    """Async client for the BoondManager API.

    GET responses are kept in *cache* (when given) so repeated lookups of the
    same entity or search page within the cache TTL skip the network. Writes
    invalidate the cached detail view of the entity they touch.

    Args:
        api_token: BoondManager API token, sent as ``X-Token``.
        base_url: API root, without trailing slash.
        timeout: Request timeout in seconds.
        cache: Optional response cache.
        breaker: Circuit breaker guarding the upstream service.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        cache: LRUCache[str, Any] | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache = cache
        self.breaker = breaker or CircuitBreaker("boond", fail_max=5, reset_timeout=60.0)

    # ── Transport ────────────────────────────────────────────────────────────

    @resilient_request
    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Perform one HTTP request and return the decoded JSON body."""
        headers = {
            "Content-Type": "application/json",
            "X-Token": self.api_token,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    params=params,
                    json=body,
                    headers=headers,
                )
        except httpx.TimeoutException as exc:
            raise TransientAPIError(f"Request timeout after {self.timeout}s") from exc
        except httpx.TransportError as exc:
            raise TransientAPIError(f"Network error: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "Boond %s %s failed (HTTP %d): %s",
                method, path, response.status_code, response.text,
            )
        classify_response(response)

        try:
            return response.json()
        except ValueError as exc:
            raise PermanentAPIError(
                "Invalid response format: expected JSON", response.status_code
            ) from exc

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        return await self.breaker.call_async(self._send(method, path, params, body))

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        key = _cache_key(path, params)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                return cached

        data = await self._request("GET", path, params=params)
        if self.cache is not None:
            self.cache.set(key, data)
        return data

    def _invalidate(self, path: str) -> None:
        if self.cache is not None:
            self.cache.delete(path)

    # ── Candidates ───────────────────────────────────────────────────────────

    async def search_candidates(self, params: SearchParams) -> CandidateSearchResponse:
        data = await self._get("/candidates", _search_query(params))
        return CandidateSearchResponse.model_validate(data)

    async def get_candidate(self, candidate_id: str) -> Candidate:
        data = await self._get(f"/candidates/{quote(candidate_id, safe='')}")
        return Candidate.model_validate(data)

    async def create_candidate(self, candidate: CreateCandidate) -> Candidate:
        body = candidate.model_dump(by_alias=True, exclude_none=True, mode="json")
        data = await self._request("POST", "/candidates", body=body)
        return Candidate.model_validate(data)

    async def update_candidate(self, candidate_id: str, changes: dict[str, Any]) -> Candidate:
        path = f"/candidates/{quote(candidate_id, safe='')}"
        data = await self._request("PUT", path, body=changes)
        self._invalidate(path)
        return Candidate.model_validate(data)

    # ── Companies ────────────────────────────────────────────────────────────

    async def search_companies(self, params: SearchParams) -> CompanySearchResponse:
        data = await self._get("/companies", _search_query(params))
        return CompanySearchResponse.model_validate(data)

    async def get_company(self, company_id: str) -> Company:
        data = await self._get(f"/companies/{quote(company_id, safe='')}")
        return Company.model_validate(data)
