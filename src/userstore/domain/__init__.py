from .user import User, UserPatch
from .repository import UserRepositoryPort

__all__ = ["User", "UserPatch", "UserRepositoryPort"]
