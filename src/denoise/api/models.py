"""Payload types exchanged with the deNoise API."""

from dataclasses import dataclass
from typing import Any

NEWS_RANGES = ("daily", "weekly", "monthly")


@dataclass(frozen=True)
class ProfileRecord:
    """The remote profile record, one per user."""

    user_id: str
    email: str
    display_name: str = ""
    system_instructions: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "display_name": self.display_name,
            "system_instructions": self.system_instructions,
        }


@dataclass(frozen=True)
class UserInstructions:
    """Response of GET /api/user/{id}/instructions."""

    user_id: str
    instructions: str = ""
    display_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any], user_id: str) -> "UserInstructions":
        return cls(
            user_id=data.get("user_id") or user_id,
            instructions=data.get("instructions") or "",
            display_name=data.get("display_name") or "",
        )


@dataclass(frozen=True)
class NewsItem:
    id: str
    title: str
    text: str
    date: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NewsItem":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            text=data.get("text", ""),
            date=data.get("date", ""),
        )


@dataclass(frozen=True)
class Source:
    """A news article cited by an assistant answer."""

    title: str
    snippet: str
    date: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Source":
        return cls(
            title=data.get("title", ""),
            snippet=data.get("snippet", ""),
            date=data.get("date", ""),
        )


@dataclass(frozen=True)
class RagResult:
    """Answer from the chat pipeline."""

    answer: str
    sources: list[Source] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RagResult":
        sources = data.get("sources")
        return cls(
            answer=data.get("answer", ""),
            sources=[Source.from_dict(s) for s in sources] if sources else None,
        )


@dataclass(frozen=True)
class ReportResult:
    content: str
    generated_at: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReportResult":
        return cls(
            content=data.get("content", ""),
            generated_at=data.get("generatedAt") or data.get("generated_at", ""),
        )


@dataclass(frozen=True)
class PodcastResult:
    audio_url: str
    script: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PodcastResult":
        return cls(
            audio_url=data.get("audio_url") or data.get("audioUrl", ""),
            script=data.get("script", ""),
        )
