"""Shared fixtures: an in-memory deNoise API behind httpx.MockTransport."""

import asyncio
import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from denoise.api import DenoiseClient
from denoise.logging import configure_logger

BASE_URL = "http://denoise.test"


class FakeServer:
    """Records every request and serves the deNoise endpoints from dicts."""

    def __init__(self) -> None:
        self.profiles: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str, Any]] = []
        self.status: dict[str, int] = {}  # path -> forced status code
        self.down: set[str] = set()  # paths that fail with a connect error
        self.gates: dict[str, asyncio.Event] = {}  # paths held until the event is set

    def hold(self, path: str) -> asyncio.Event:
        """Hold responses on a path until the returned event is set."""
        gate = self.gates[path] = asyncio.Event()
        return gate

    async def wait_for_request(self, path: str) -> None:
        while not self.requests_to(path):
            await asyncio.sleep(0)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else dict(request.url.params) or None
        self.calls.append((request.method, path, body))

        if path in self.gates:
            await self.gates[path].wait()

        if path in self.down:
            raise httpx.ConnectError("connection refused", request=request)
        if path in self.status:
            return httpx.Response(self.status[path], json={"detail": "forced"})

        if request.method == "GET" and path.startswith("/api/user/"):
            user_id = path.split("/")[3]
            profile = self.profiles.get(user_id)
            if profile is None:
                return httpx.Response(404, json={"detail": "User not found"})
            return httpx.Response(
                200,
                json={
                    "user_id": user_id,
                    "instructions": profile["system_instructions"],
                    "display_name": profile["display_name"],
                },
            )

        if path == "/api/user/profile":
            self.profiles[body["user_id"]] = dict(body)
            return httpx.Response(200)

        if path == "/api/chat/clear":
            return httpx.Response(200, json={"status": "success", "message": "cleared"})

        if path == "/api/chat":
            return httpx.Response(
                200,
                json={
                    "answer": f"About {body['message']}",
                    "sources": [
                        {"title": "Seed round", "snippet": "A startup raised...", "date": "2024-01-01"}
                    ],
                },
            )

        if path == "/api/report":
            return httpx.Response(
                200, json={"content": "# Weekly report", "generatedAt": "2024-01-01T00:00:00Z"}
            )

        if path == "/api/podcast":
            return httpx.Response(
                200, json={"audio_url": "https://cdn.test/episode.mp3", "script": "Hello"}
            )

        if path == "/api/news":
            return httpx.Response(
                200,
                json=[{"id": "1", "title": "Funding", "text": "Body", "date": "2024-01-01"}],
            )

        return httpx.Response(404)

    def requests_to(self, path: str) -> list[tuple[str, str, Any]]:
        return [call for call in self.calls if call[1] == path]

    def purged_ids(self) -> list[str]:
        return [body["user_id"] for _, _, body in self.requests_to("/api/chat/clear")]


@pytest.fixture(autouse=True)
def event_log(tmp_path: Path):
    """Send the JSONL event log to a temporary directory."""
    return configure_logger(log_dir=tmp_path / "logs")


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def api(server: FakeServer) -> DenoiseClient:
    return DenoiseClient(BASE_URL, transport=httpx.MockTransport(server.handler))
