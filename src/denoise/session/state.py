"""Transient per-session UI state: chat transcript, report and podcast."""

from dataclasses import dataclass, field
from typing import Literal

from ..api.models import Source

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class Message:
    role: Role
    content: str
    sources: list[Source] | None = None


@dataclass(frozen=True)
class ReportData:
    content: str
    generated_at: str


@dataclass(frozen=True)
class PodcastData:
    audio_url: str | None = None


@dataclass
class GlobalState:
    """Holds the three state slices shared by every page.

    Nothing here is persisted. Any page may read or replace a slice;
    the session boundary controller empties all of them at once.
    """

    chat_history: list[Message] = field(default_factory=list)
    report_data: ReportData | None = None
    podcast_data: PodcastData = field(default_factory=PodcastData)

    def set_chat_history(self, messages: list[Message]) -> None:
        self.chat_history = list(messages)

    def append_message(self, message: Message) -> None:
        self.chat_history.append(message)

    def set_report_data(self, report: ReportData | None) -> None:
        self.report_data = report

    def set_podcast_data(self, podcast: PodcastData) -> None:
        self.podcast_data = podcast

    def reset(self) -> None:
        self.chat_history = []
        self.report_data = None
        self.podcast_data = PodcastData()

    def is_empty(self) -> bool:
        return (
            not self.chat_history
            and self.report_data is None
            and self.podcast_data.audio_url is None
        )
