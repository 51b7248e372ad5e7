"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping, Optional


class Database(ABC):
    """Abstract key-value persistence interface for pennywise.

    Each key holds one collection serialized as JSON text. Implementations
    raise ``StorageError`` when a read or write fails.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def has_key(self, key: str) -> bool:
        """Return True if a value has been stored under key."""
        pass

    @abstractmethod
    def get_value(self, key: str) -> Optional[str]:
        """Get the JSON text stored under key, or None if absent."""
        pass

    @abstractmethod
    def set_values(self, values: Mapping[str, str]) -> None:
        """Store every key/value pair of the mapping in a single commit."""
        pass

    @abstractmethod
    def delete_keys(self, keys: Iterable[str]) -> None:
        """Remove the given keys; missing keys are ignored."""
        pass

    def set_value(self, key: str, value: str) -> None:
        """Store a single key."""
        self.set_values({key: value})
