"""Client for the remote deNoise HTTP API."""

from .client import DenoiseClient
from .models import (
    NEWS_RANGES,
    NewsItem,
    PodcastResult,
    ProfileRecord,
    RagResult,
    ReportResult,
    Source,
    UserInstructions,
)

__all__ = [
    "DenoiseClient",
    "NEWS_RANGES",
    "NewsItem",
    "PodcastResult",
    "ProfileRecord",
    "RagResult",
    "ReportResult",
    "Source",
    "UserInstructions",
]
