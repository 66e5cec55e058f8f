"""
=============================================================================
USER RECORD STORE
=============================================================================

The single owner of user records and of id assignment.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          UserStore                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   _users   [ User(1, ...), User(3, ...), User(4, ...) ]             │
    │              insertion order, never sorted                          │
    │                                                                      │
    │   _next_id  5      starts at 1, +1 per create, never reused         │
    │                                                                      │
    │   _lock    one threading.Lock around every operation                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    create(name, email)          → User       append, always succeeds
    list_all()                   → [User]     insertion order
    find_by_id(id)               → User       or UserNotFound
    update_by_id(id, name, email)→ User       or UserNotFound, id untouched
    delete_by_id(id)             → None       missing id is a no-op

Records handed out are copies taken under the lock. Callers can serialize
or keep them without racing a concurrent update, and nobody but the store
holds a live record.

Ids arrive from URL path segments as text. parse_user_id() turns them into
integers the way a loose numeric comparison would: "7", " 7 ", "7.0" and
"7e0" all mean 7. Text that is not a whole number names no record.

Nothing is validated: name and email are stored exactly as given, None
included.

=============================================================================
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Union
import logging
import math
import re
import threading


logger = logging.getLogger(__name__)

# Plain ASCII decimal only: no digit-group underscores, no Unicode digits.
NUMERIC_ID = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)

UserId = Union[int, str]


class StoreError(Exception):
    """Base class for record store errors."""


class UserNotFound(StoreError):
    """No record has the requested id."""

    def __init__(self, user_id: Any):
        super().__init__(f"User not found: {user_id!r}")
        self.user_id = user_id


@dataclass
class User:
    """
    A user record.

    ``id`` is assigned by the store. ``name`` and ``email`` are whatever
    the client sent, possibly None.
    """

    id: int
    name: Any = None
    email: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape: {"id": ..., "name": ..., "email": ...}."""
        return {"id": self.id, "name": self.name, "email": self.email}


def parse_user_id(raw: Any) -> Optional[int]:
    """
    Coerce an externally supplied id to an integer.

    Returns None when the value cannot equal any stored id. Only decimal
    spellings count; hex, octal and binary literals such as "0x1" are
    not found rather than coerced.

        >>> parse_user_id("42")
        42
        >>> parse_user_id("42.0")
        42
        >>> parse_user_id("abc") is None
        True
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if not NUMERIC_ID.fullmatch(text):
        return None

    try:
        return int(text)
    except ValueError:
        pass

    try:
        number = float(text)
    except ValueError:
        return None
    if math.isfinite(number) and number.is_integer():
        return int(number)
    return None


class UserStore:
    """
    In-memory, thread-safe collection of User records.

    Usage:
        store = UserStore()
        john = store.create("John", "john@x.com")     # User(id=1, ...)
        store.find_by_id("1")                          # same record
        store.delete_by_id(1)
        store.delete_by_id(1)                          # still fine
    """

    def __init__(self):
        self._users: List[User] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    @property
    def next_id(self) -> int:
        """The id the next create() will assign."""
        with self._lock:
            return self._next_id

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def create(self, name: Any, email: Any) -> User:
        """Append a new record with the next id."""
        with self._lock:
            user = User(id=self._next_id, name=name, email=email)
            self._next_id += 1
            self._users.append(user)
            logger.debug(f"Created user {user.id}")
            return replace(user)

    def list_all(self) -> List[User]:
        """Every record, oldest first."""
        with self._lock:
            return [replace(user) for user in self._users]

    def find_by_id(self, user_id: UserId) -> User:
        """
        Look a record up by id.

        Raises:
            UserNotFound: If no record has this id.
        """
        with self._lock:
            return replace(self._locate(user_id))

    def update_by_id(self, user_id: UserId, name: Any, email: Any) -> User:
        """
        Overwrite name and email of an existing record.

        Raises:
            UserNotFound: If no record has this id. Nothing is created.
        """
        with self._lock:
            user = self._locate(user_id)
            user.name = name
            user.email = email
            logger.debug(f"Updated user {user.id}")
            return replace(user)

    def delete_by_id(self, user_id: UserId) -> None:
        """Remove the record with this id, if there is one."""
        key = parse_user_id(user_id)
        with self._lock:
            before = len(self._users)
            self._users = [user for user in self._users if user.id != key]
            if len(self._users) != before:
                logger.debug(f"Deleted user {key}")

    def _locate(self, user_id: UserId) -> User:
        # Caller holds self._lock.
        key = parse_user_id(user_id)
        if key is not None:
            for user in self._users:
                if user.id == key:
                    return user
        raise UserNotFound(user_id)
