"""Durable local storage for the signed-in identity."""

import json
import logging
from pathlib import Path

from .models import Identity

logger = logging.getLogger(__name__)

STORAGE_KEY = "denoise_user"


class IdentityStorage:
    """Keeps one JSON-encoded Identity in a file named after STORAGE_KEY.

    Unreadable or malformed content is treated as absent and removed.
    """

    def __init__(self, path: Path | None = None) -> None:
        if path is None:
            path = Path.home() / ".denoise" / f"{STORAGE_KEY}.json"
        self.path = path

    def load(self) -> Identity | None:
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return Identity.from_dict(json.load(f))
        except (json.JSONDecodeError, UnicodeDecodeError, KeyError, TypeError) as e:
            logger.warning("Discarding corrupt identity record at %s: %s", self.path, e)
            self.clear()
            return None

    def save(self, identity: Identity) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(identity.to_dict(), f, indent=2)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
