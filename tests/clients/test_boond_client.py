"""Tests for the BoondManager API client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from tenacity import wait_none

from boond_mcp.clients.boond import BoondClient, _cache_key
from boond_mcp.clients.cache import LRUCache
from boond_mcp.clients.resilience import (
    AuthError,
    CircuitBreaker,
    CircuitOpenError,
    CircuitState,
    NotFoundError,
    PermanentAPIError,
    TransientAPIError,
)
from boond_mcp.models.boond import CreateCandidate, SearchParams
from boond_mcp.models.enums import CandidateStatus, CompanyType

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _candidate(**overrides) -> dict:
    data = {
        "id": "C1",
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "status": "active",
        "city": "London",
    }
    data.update(overrides)
    return data


def _mock_httpx_client(*, response: MagicMock) -> AsyncMock:
    """Build a mock httpx.AsyncClient context manager wired to *response*."""
    mock_client = AsyncMock()
    mock_client.request.return_value = response
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


def _make_response(*, status_code: int = 200, json_data=None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_data if json_data is not None else {}
    resp.text = text
    return resp


@pytest.fixture
def no_retry_wait(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(BoondClient._send.retry, "wait", wait_none())


# ===================================================================
# Requests
# ===================================================================


class TestRequestShape:
    async def test_sends_token_and_query(self):
        client = BoondClient("secret", base_url="https://boond.test/api/")
        response = _make_response(json_data={"data": [], "pagination": {"total": 0}})
        mock_client = _mock_httpx_client(response=response)

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            await client.search_candidates(SearchParams(query="ada", page=2, limit=5))

        args, kwargs = mock_client.request.call_args
        assert args == ("GET", "https://boond.test/api/candidates")
        assert kwargs["headers"]["X-Token"] == "secret"
        assert kwargs["params"] == {"page": 2, "limit": 5, "query": "ada"}
        assert kwargs["json"] is None

    async def test_id_is_url_quoted(self):
        client = BoondClient("t")
        mock_client = _mock_httpx_client(response=_make_response(json_data=_candidate()))

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            await client.get_candidate("a/b c")

        url = mock_client.request.call_args.args[1]
        assert url.endswith("/candidates/a%2Fb%20c")

    async def test_create_posts_camel_case_body(self):
        client = BoondClient("t")
        mock_client = _mock_httpx_client(response=_make_response(json_data=_candidate()))
        payload = CreateCandidate(first_name="Ada", last_name="Lovelace", email="ada@example.com")

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            candidate = await client.create_candidate(payload)

        args, kwargs = mock_client.request.call_args
        assert args[0] == "POST"
        assert kwargs["json"] == {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "status": "active",
        }
        assert candidate.first_name == "Ada"


class TestResponseParsing:
    async def test_search_candidates_parses_models(self):
        client = BoondClient("t")
        body = {
            "data": [_candidate(), _candidate(id="C2", firstName="Grace", status="inactive")],
            "pagination": {"page": 1, "limit": 20, "total": 2},
        }
        mock_client = _mock_httpx_client(response=_make_response(json_data=body))

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            result = await client.search_candidates(SearchParams())

        assert [c.id for c in result.data] == ["C1", "C2"]
        assert result.data[1].status == CandidateStatus.INACTIVE
        assert result.pagination.total == 2

    async def test_get_company(self):
        client = BoondClient("t")
        body = {"id": "CO1", "name": "Acme", "type": "client", "contacts": ["Bob"]}
        mock_client = _mock_httpx_client(response=_make_response(json_data=body))

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            company = await client.get_company("CO1")

        assert company.name == "Acme"
        assert company.type == CompanyType.CLIENT
        assert company.contacts == ["Bob"]

    async def test_non_json_body_is_permanent_error(self):
        client = BoondClient("t")
        response = _make_response(text="<html>")
        response.json.side_effect = ValueError("not json")
        mock_client = _mock_httpx_client(response=response)

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(PermanentAPIError, match="expected JSON"):
                await client.get_candidate("C1")


# ===================================================================
# Errors and retries
# ===================================================================


class TestErrors:
    async def test_404_raises_not_found(self):
        client = BoondClient("t")
        mock_client = _mock_httpx_client(response=_make_response(status_code=404))

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(NotFoundError):
                await client.get_candidate("missing")
        assert mock_client.request.await_count == 1

    async def test_401_raises_auth_error(self):
        client = BoondClient("bad")
        mock_client = _mock_httpx_client(response=_make_response(status_code=401))

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(AuthError):
                await client.get_company("CO1")

    async def test_503_is_retried_three_times(self, no_retry_wait):
        client = BoondClient("t")
        mock_client = _mock_httpx_client(response=_make_response(status_code=503))

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(TransientAPIError):
                await client.get_candidate("C1")
        assert mock_client.request.await_count == 3

    async def test_timeout_becomes_transient(self, no_retry_wait):
        client = BoondClient("t", timeout=5.0)
        mock_client = _mock_httpx_client(response=_make_response())
        mock_client.request.side_effect = httpx.ReadTimeout("slow")

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(TransientAPIError, match="timeout after 5.0s"):
                await client.get_candidate("C1")

    async def test_open_circuit_skips_network(self):
        breaker = CircuitBreaker("boond-test", fail_max=1, reset_timeout=60.0)
        breaker._state = CircuitState.OPEN
        breaker._last_failure_time = float("inf")
        client = BoondClient("t", breaker=breaker)
        mock_client = _mock_httpx_client(response=_make_response(json_data=_candidate()))

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(CircuitOpenError):
                await client.get_candidate("C1")
        mock_client.request.assert_not_called()


# ===================================================================
# Caching
# ===================================================================


class TestCaching:
    def test_cache_key_sorts_params(self):
        assert _cache_key("/candidates", {"page": 1, "limit": 5}) == "/candidates?limit=5&page=1"
        assert _cache_key("/candidates/C1", None) == "/candidates/C1"

    async def test_repeated_get_served_from_cache(self):
        cache = LRUCache(10)
        client = BoondClient("t", cache=cache)
        mock_client = _mock_httpx_client(response=_make_response(json_data=_candidate()))

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            first = await client.get_candidate("C1")
            second = await client.get_candidate("C1")

        assert first == second
        assert mock_client.request.await_count == 1
        stats = cache.get_stats()
        assert stats.hits == 1
        assert stats.misses == 1

    async def test_errors_are_not_cached(self):
        cache = LRUCache(10)
        client = BoondClient("t", cache=cache)
        mock_client = _mock_httpx_client(response=_make_response(status_code=404))

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(NotFoundError):
                await client.get_candidate("C1")

        assert cache.get_size() == 0

    async def test_update_invalidates_detail_entry(self):
        cache = LRUCache(10)
        client = BoondClient("t", cache=cache)
        mock_client = _mock_httpx_client(response=_make_response(json_data=_candidate()))

        with patch("boond_mcp.clients.boond.httpx.AsyncClient", return_value=mock_client):
            await client.get_candidate("C1")
            assert cache.has("/candidates/C1")
            mock_client.request.return_value = _make_response(
                json_data=_candidate(city="Paris")
            )
            updated = await client.update_candidate("C1", {"city": "Paris"})

        assert updated.city == "Paris"
        assert not cache.has("/candidates/C1")
        assert mock_client.request.call_args.args[0] == "PUT"
        assert mock_client.request.call_args.kwargs["json"] == {"city": "Paris"}
