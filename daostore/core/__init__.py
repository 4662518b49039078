from .logging import configure_logging
from .serialization import JsonSerializer, Serializer

__all__ = ["JsonSerializer", "Serializer", "configure_logging"]
