"""
models/identity.py
------------------
The authenticated caller, as supplied by the session provider.
"""

from dataclasses import dataclass
from typing import Optional

from utils.identifiers import normalize_id


@dataclass(frozen=True)
class Identity:
    """
    Attributes:
        id: User id (normalized; session providers often hand it over as a string).
        role: Opaque role string; only compared against the admin marker.
        email: Optional e-mail, used for the admin e-mail allow-list.
    """
    id: int
    role: str = "user"
    email: Optional[str] = None

    @classmethod
    def from_session(cls, user: dict) -> "Identity":
        """Build from a session payload like {'id': '12', 'role': 'admin', 'email': ...}."""
        return cls(
            id=normalize_id(user.get("id")),
            role=str(user.get("role") or "user"),
            email=user.get("email"),
        )
