from abc import ABC, abstractmethod
from typing import Any

import orjson


class Serializer(ABC):
    """Abstract base class for data serialization."""

    @abstractmethod
    def serialize(self, data: Any) -> bytes:
        """Serializes data into bytes."""
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Deserializes bytes into data."""
        pass


class JsonSerializer(Serializer):
    """Serializer implementation using orjson for JSON serialization."""

    def serialize(self, data: Any) -> bytes:
        """Serializes data to JSON bytes using orjson."""
        return orjson.dumps(data)

    def deserialize(self, data: bytes) -> Any:
        """Deserializes JSON bytes to data using orjson."""
        return orjson.loads(data)
