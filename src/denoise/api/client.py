"""Async HTTP client for the deNoise API."""

import logging
from typing import Any

import httpx

from ..errors import ApiError, ProfileNotFoundError, ProfileWriteError, SessionPurgeError
from .models import (
    NEWS_RANGES,
    NewsItem,
    PodcastResult,
    ProfileRecord,
    RagResult,
    ReportResult,
    UserInstructions,
)

logger = logging.getLogger(__name__)


class DenoiseClient:
    """Thin wrapper over httpx.AsyncClient for the deNoise endpoints.

    Every method raises a subclass of ApiError on failure. Transport
    problems (connection refused, timeouts) are reported with
    ``transient=True`` so callers can tell an outage from a rejection.

    Example:
        async with DenoiseClient("http://localhost:8000") as api:
            await api.clear_chat_session("YWxpY2VAZXhhbXBsZS5j")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "DenoiseClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: type[ApiError] = ApiError,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise error_cls(f"{method} {path} timed out: {e}", transient=True) from e
        except httpx.TransportError as e:
            raise error_cls(f"{method} {path} failed: {e}", transient=True) from e

        if not response.is_success:
            raise error_cls(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response, error_cls: type[ApiError] = ApiError) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise error_cls(
                f"Invalid JSON from {response.request.url}",
                status_code=response.status_code,
            ) from e

    # Profile

    async def get_user_instructions(self, user_id: str) -> UserInstructions:
        """Fetch the stored profile for a user.

        Raises:
            ProfileNotFoundError: The server has no profile for this user.
            ApiError: Any other failure.
        """
        path = f"/api/user/{user_id}/instructions"
        try:
            response = await self._request("GET", path)
        except ApiError as e:
            if e.status_code == 404:
                raise ProfileNotFoundError(
                    f"No profile for user {user_id}", status_code=404
                ) from e
            raise

        data = self._json(response)
        if not isinstance(data, dict):
            raise ApiError(f"Unexpected profile payload for user {user_id}")
        return UserInstructions.from_dict(data, user_id)

    async def sync_user_profile(self, record: ProfileRecord) -> None:
        """Upsert the full profile record."""
        await self._request(
            "POST",
            "/api/user/profile",
            error_cls=ProfileWriteError,
            json=record.to_dict(),
        )

    # Session memory

    async def clear_chat_session(self, user_id: str) -> dict[str, Any]:
        """Purge the server-side conversation memory for a user."""
        response = await self._request(
            "POST",
            "/api/chat/clear",
            error_cls=SessionPurgeError,
            json={"user_id": user_id},
        )
        if not response.content:
            return {}
        data = self._json(response, SessionPurgeError)
        return data if isinstance(data, dict) else {}

    # News, chat, report and podcast generation

    async def fetch_news(self, range: str, instructions: str) -> list[NewsItem]:
        if range not in NEWS_RANGES:
            raise ValueError(f"range must be one of {', '.join(NEWS_RANGES)}")

        response = await self._request(
            "GET",
            "/api/news",
            params={"range": range, "instructions": instructions},
        )
        data = self._json(response)
        if not isinstance(data, list):
            raise ApiError("Unexpected news payload")
        return [NewsItem.from_dict(item) for item in data]

    async def run_rag_pipeline(
        self, user_id: str, message: str, instructions: str = ""
    ) -> RagResult:
        response = await self._request(
            "POST",
            "/api/chat",
            json={"user_id": user_id, "message": message, "instructions": instructions},
        )
        return RagResult.from_dict(self._json(response))

    async def generate_report(
        self, user_id: str, range: str, instructions: str
    ) -> ReportResult:
        if range not in NEWS_RANGES:
            raise ValueError(f"range must be one of {', '.join(NEWS_RANGES)}")

        response = await self._request(
            "POST",
            "/api/report",
            json={"user_id": user_id, "range": range, "instructions": instructions},
        )
        return ReportResult.from_dict(self._json(response))

    async def generate_podcast(
        self,
        user_id: str,
        topics: str,
        time_range: str,
        structure: str,
    ) -> PodcastResult:
        response = await self._request(
            "POST",
            "/api/podcast",
            json={
                "user_id": user_id,
                "topics": topics,
                "time_range": time_range,
                "structure": structure,
            },
        )
        result = PodcastResult.from_dict(self._json(response))
        if not result.audio_url:
            raise ApiError("Podcast response did not include an audio URL")
        return result
