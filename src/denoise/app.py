"""Application context shared by every front end.

DenoiseApp is the single object a page (or the CLI) talks to: it exposes
the current user, the auth actions, profile editing and the transient
chat/report/podcast state, and keeps the session boundary controller
subscribed to identity changes.
"""

import logging
from typing import Callable

from .api import DenoiseClient, NewsItem
from .config import ClientConfig
from .errors import AuthError, ProfileWriteError
from .identity import AuthResult, Identity, IdentityResolver, IdentityStorage
from .logging import get_logger
from .profile import ProfileReconciler
from .session import GlobalState, Message, PodcastData, ReportData, SessionBoundaryController

logger = logging.getLogger(__name__)

DEFAULT_PODCAST_STRUCTURE = "interview_style"


def combine_instructions(topics: str, structure: str, profile_instructions: str = "") -> str:
    """Build the instruction text sent with report and podcast requests."""
    combined = f"Topics: {topics}\n\nStructure: {structure}"
    if profile_instructions:
        combined = f"{profile_instructions}\n\n{combined}"
    return combined


class DenoiseApp:
    """Wires the resolver, reconciler, boundary controller and state."""

    def __init__(
        self,
        api: DenoiseClient,
        storage: IdentityStorage | None = None,
        state: GlobalState | None = None,
    ) -> None:
        self.api = api
        self.state = state or GlobalState()
        self.reconciler = ProfileReconciler(api)
        self.resolver = IdentityResolver(self.reconciler, storage)
        self.boundary = SessionBoundaryController(self.api.clear_chat_session, self.state)
        self._unsubscribe: Callable[[], None] | None = None

    @classmethod
    def from_config(cls, config: ClientConfig) -> "DenoiseApp":
        api = DenoiseClient(config.base_url, timeout=config.timeout)
        return cls(api, storage=IdentityStorage(config.storage_path))

    @property
    def user(self) -> Identity | None:
        return self.resolver.current()

    @property
    def loading(self) -> bool:
        return self.resolver.loading

    async def start(self) -> Identity | None:
        """Subscribe the boundary controller and restore the persisted user."""
        if self._unsubscribe is None:
            self._unsubscribe = self.resolver.subscribe(self.boundary.observe)
        return self.resolver.load()

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.boundary.wait_pending()
        await self.api.close()

    # Auth

    async def sign_in(self, email: str) -> AuthResult:
        return await self.resolver.sign_in(email)

    async def sign_up(self, email: str) -> AuthResult:
        return await self.resolver.sign_up(email)

    def sign_out(self) -> None:
        self.resolver.sign_out()

    def _require_user(self) -> Identity:
        user = self.resolver.current()
        if user is None:
            raise AuthError("Sign in first")
        return user

    # Profile

    async def update_profile(
        self,
        display_name: str | None = None,
        system_instructions: str | None = None,
    ) -> Identity:
        """Save profile fields locally, then push the full record.

        The local update is kept even if the remote write fails.

        Raises:
            AuthError: Nobody is signed in.
            ProfileWriteError: The remote write failed; retry later.
        """
        user = self._require_user()
        fields = {}
        if display_name is not None:
            fields["display_name"] = display_name
        if system_instructions is not None:
            fields["system_instructions"] = system_instructions

        updated = self.resolver.update_local(**fields) or user
        try:
            await self.reconciler.update_profile(
                updated.id,
                updated.email,
                updated.display_name,
                updated.system_instructions,
            )
        except ProfileWriteError as e:
            logger.warning("Profile save failed for %s: %s", updated.id, e)
            raise
        return updated

    # News, chat, report and podcast

    def _still_current(self, generation: int, user: Identity, kind: str) -> bool:
        """False once the session a request was made in has ended."""
        if self.boundary.generation == generation and self.resolver.current() == user:
            return True
        get_logger().log("stale_result_dropped", user_id=user.id, kind=kind)
        return False

    async def fetch_news(self, range: str, topics: str = "") -> list[NewsItem]:
        """Fetch curated news for the signed-in user. Nothing is stored."""
        user = self._require_user()
        instructions = topics.strip()
        if user.system_instructions:
            instructions = f"{user.system_instructions}\n\n{instructions}".strip()
        return await self.api.fetch_news(range, instructions)

    async def send_message(self, text: str) -> Message | None:
        """Send a chat message and append the assistant's reply.

        Blank input is ignored. If the request fails the user message stays
        in the transcript and the ApiError propagates. A reply that arrives
        after a session boundary is dropped and None is returned.
        """
        text = text.strip()
        if not text:
            return None

        user = self._require_user()
        generation = self.boundary.generation
        self.state.append_message(Message(role="user", content=text))
        result = await self.api.run_rag_pipeline(user.id, text, user.system_instructions)

        if not self._still_current(generation, user, "reply"):
            return None

        reply = Message(role="assistant", content=result.answer, sources=result.sources)
        self.state.append_message(reply)
        return reply

    async def generate_report(self, range: str, topics: str, structure: str = "") -> ReportData:
        user = self._require_user()
        generation = self.boundary.generation
        instructions = combine_instructions(topics, structure, user.system_instructions)
        result = await self.api.generate_report(user.id, range, instructions)

        report = ReportData(content=result.content, generated_at=result.generated_at)
        if self._still_current(generation, user, "report"):
            self.state.set_report_data(report)
        return report

    async def generate_podcast(
        self,
        topics: str,
        time_window: str = "monthly",
        structure: str = "",
    ) -> PodcastData:
        user = self._require_user()
        topics = topics.strip()
        if not topics:
            raise ValueError("Please enter topics to generate a podcast")

        structure = structure.strip() or DEFAULT_PODCAST_STRUCTURE
        if user.system_instructions:
            topics = f"{user.system_instructions}\n\n{topics}"

        generation = self.boundary.generation
        result = await self.api.generate_podcast(user.id, topics, time_window, structure)

        podcast = PodcastData(audio_url=result.audio_url)
        if self._still_current(generation, user, "podcast"):
            self.state.set_podcast_data(podcast)
        return podcast
