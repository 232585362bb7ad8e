"""
Repository Module

Generic in-memory keyed store for entities with an id. Records keep the
position of their first insertion; readers get tuple snapshots so no caller
ever holds a live alias of the backing dict.
"""

import threading
from typing import Dict, Generic, Optional, Protocol, Tuple, TypeVar


class Identifiable(Protocol):
    """Anything with a string id"""

    @property
    def id(self) -> str: ...


T = TypeVar("T", bound=Identifiable)


class Repository(Generic[T]):
    """
    Insertion-ordered store keyed by entity id

    There is no delete: customers and accounts live for the lifetime of the
    bank. One lock serialises writers against readers.
    """

    def __init__(self, name: str = "entities"):
        self.name = name
        self._data: Dict[str, T] = {}
        self._lock = threading.RLock()

    def save(self, entity: T) -> T:
        """Insert or replace by id"""
        with self._lock:
            self._data[entity.id] = entity
        return entity

    def find(self, entity_id: str) -> Optional[T]:
        with self._lock:
            return self._data.get(entity_id)

    def exists(self, entity_id: str) -> bool:
        with self._lock:
            return entity_id in self._data

    def all(self) -> Tuple[T, ...]:
        """Snapshot of every entity in insertion order"""
        with self._lock:
            return tuple(self._data.values())

    def ids(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._data)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, entity_id: object) -> bool:
        return isinstance(entity_id, str) and self.exists(entity_id)
