from .user import User
from .store import StoredValue

__all__ = ["User", "StoredValue"]
