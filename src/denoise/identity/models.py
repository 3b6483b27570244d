"""Identity value type."""

from dataclasses import asdict, dataclass, replace
from typing import Any


@dataclass(frozen=True, eq=False)
class Identity:
    """The signed-in user as known locally.

    Identities compare equal when their ids match; the display name and
    instructions are cached profile values, not part of the identity.
    """

    id: str
    email: str
    display_name: str = ""
    system_instructions: str = ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Identity):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def with_profile(self, **fields: str) -> "Identity":
        """Return a copy with display_name/system_instructions replaced."""
        unknown = set(fields) - {"display_name", "system_instructions"}
        if unknown:
            raise TypeError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        return replace(self, **fields)

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Identity":
        """Build from persisted JSON; raises KeyError/TypeError on bad shape."""
        if not isinstance(data, dict):
            raise TypeError("identity record must be an object")

        identity_id = data["id"]
        email = data["email"]
        if not isinstance(identity_id, str) or not identity_id or not isinstance(email, str):
            raise TypeError("identity id and email must be strings")

        return cls(
            id=identity_id,
            email=email,
            display_name=data.get("display_name") or "",
            system_instructions=data.get("system_instructions") or "",
        )
