"""Users and their owner/read tokens."""

from src.users.repository import UsersRepository
from src.users.schemas import AccessRole, User

__all__ = ["AccessRole", "User", "UsersRepository"]
