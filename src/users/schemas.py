"""Data models for the users module."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AccessRole(str, Enum):
    """What a presented user token allows."""

    OWNER = "owner"
    READ = "read"


@dataclass
class User:
    """A feed owner and the two tokens that act on their data."""

    user_id: str
    owner_token: str
    read_token: str
    created_at: datetime | None = None
