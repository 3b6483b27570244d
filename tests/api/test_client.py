"""Tests for DenoiseClient request/response handling."""

import httpx
import pytest

from denoise.api import DenoiseClient, ProfileRecord, Source
from denoise.errors import ApiError, ProfileNotFoundError, ProfileWriteError, SessionPurgeError

BASE_URL = "http://denoise.test"


@pytest.mark.asyncio
class TestProfileEndpoints:
    async def test_get_instructions(self, api, server):
        server.profiles["u1"] = {"display_name": "Ann", "system_instructions": "Brief"}

        result = await api.get_user_instructions("u1")

        assert result.user_id == "u1"
        assert result.display_name == "Ann"
        assert result.instructions == "Brief"
        assert server.calls[-1][:2] == ("GET", "/api/user/u1/instructions")

    async def test_get_instructions_404(self, api):
        with pytest.raises(ProfileNotFoundError) as exc_info:
            await api.get_user_instructions("missing")
        assert exc_info.value.status_code == 404

    async def test_get_instructions_null_fields(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"user_id": "u1", "instructions": None})

        api = DenoiseClient(BASE_URL, transport=httpx.MockTransport(handler))
        result = await api.get_user_instructions("u1")
        assert result.instructions == ""
        assert result.display_name == ""
        await api.close()

    async def test_get_instructions_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        api = DenoiseClient(BASE_URL, transport=httpx.MockTransport(handler))
        with pytest.raises(ApiError):
            await api.get_user_instructions("u1")
        await api.close()

    async def test_sync_profile_posts_record(self, api, server):
        await api.sync_user_profile(ProfileRecord("u1", "a@x.io", "Ann", "Brief"))

        method, path, body = server.calls[-1]
        assert (method, path) == ("POST", "/api/user/profile")
        assert body == {
            "user_id": "u1",
            "email": "a@x.io",
            "display_name": "Ann",
            "system_instructions": "Brief",
        }

    async def test_sync_profile_non_2xx(self, api, server):
        server.status["/api/user/profile"] = 500
        with pytest.raises(ProfileWriteError) as exc_info:
            await api.sync_user_profile(ProfileRecord("u1", "a@x.io"))
        assert exc_info.value.transient is False


@pytest.mark.asyncio
class TestClearChatSession:
    async def test_posts_user_id(self, api, server):
        result = await api.clear_chat_session("u1")

        assert result == {"status": "success", "message": "cleared"}
        assert server.purged_ids() == ["u1"]

    async def test_failure(self, api, server):
        server.status["/api/chat/clear"] = 503
        with pytest.raises(SessionPurgeError):
            await api.clear_chat_session("u1")

    async def test_outage_is_transient(self, api, server):
        server.down.add("/api/chat/clear")
        with pytest.raises(SessionPurgeError) as exc_info:
            await api.clear_chat_session("u1")
        assert exc_info.value.transient is True
        assert exc_info.value.status_code is None


@pytest.mark.asyncio
class TestGeneration:
    async def test_fetch_news(self, api, server):
        news = await api.fetch_news("weekly", "AI startups")

        assert news[0].title == "Funding"
        method, path, _ = server.calls[-1]
        assert (method, path) == ("GET", "/api/news")

    async def test_fetch_news_rejects_unknown_range(self, api, server):
        with pytest.raises(ValueError):
            await api.fetch_news("yearly", "")
        assert server.calls == []

    async def test_rag_pipeline(self, api, server):
        result = await api.run_rag_pipeline("u1", "funding", "Brief")

        assert result.answer == "About funding"
        assert result.sources == [Source("Seed round", "A startup raised...", "2024-01-01")]
        assert server.calls[-1][2] == {"user_id": "u1", "message": "funding", "instructions": "Brief"}

    async def test_report(self, api):
        report = await api.generate_report("u1", "daily", "Topics: AI")
        assert report.content == "# Weekly report"
        assert report.generated_at == "2024-01-01T00:00:00Z"

    async def test_podcast(self, api, server):
        podcast = await api.generate_podcast("u1", "AI", "monthly", "interview_style")
        assert podcast.audio_url == "https://cdn.test/episode.mp3"
        assert server.calls[-1][2]["time_range"] == "monthly"

    async def test_podcast_without_audio(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"script": "only text"})

        api = DenoiseClient(BASE_URL, transport=httpx.MockTransport(handler))
        with pytest.raises(ApiError):
            await api.generate_podcast("u1", "AI", "monthly", "solo")
        await api.close()

    async def test_server_error(self, api, server):
        server.status["/api/chat"] = 502
        with pytest.raises(ApiError) as exc_info:
            await api.run_rag_pipeline("u1", "hi")
        assert exc_info.value.status_code == 502
