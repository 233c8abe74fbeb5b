"""
User session handling for Labor Scout.

The signed-in user is an explicit Session object handed to whatever needs
identity. SessionStore persists it as JSON; load/save/clear are called at
app start, login and logout.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .geo import Coordinate, Location

logger = logging.getLogger(__name__)


class UserRole(Enum):
    """Which side of the marketplace a user is on."""
    LABORER = "laborer"
    EMPLOYER = "employer"


def new_user_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Session:
    """The signed-in user."""
    user_id: str
    name: str
    role: UserRole
    location: Optional[Location] = None

    @property
    def is_employer(self) -> bool:
        return self.role == UserRole.EMPLOYER

    def to_dict(self) -> dict:
        data = {
            "user_id": self.user_id,
            "name": self.name,
            "role": self.role.value,
            "location": None,
        }
        if self.location is not None:
            data["location"] = {
                "latitude": self.location.latitude,
                "longitude": self.location.longitude,
                "address": self.location.address,
            }
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        location = None
        loc_data = data.get("location")
        if loc_data:
            location = Location(
                coordinate=Coordinate(loc_data["latitude"], loc_data["longitude"]),
                address=loc_data.get("address", ""),
            )
        return cls(
            user_id=data["user_id"],
            name=data["name"],
            role=UserRole(data["role"]),
            location=location,
        )


class SessionStore:
    """Persists a Session to a JSON file."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> Optional[Session]:
        """
        Load the saved session.

        Returns:
            The Session, or None if nobody is signed in or the file is unreadable.
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r") as f:
                return Session.from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None

    def save(self, session: Session) -> None:
        with open(self.path, "w") as f:
            json.dump(session.to_dict(), f, indent=2)
        logger.debug(f"Session saved for user {session.user_id}")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.debug("Session cleared")
