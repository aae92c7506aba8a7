"""Protocol module - Serialization for cache keys and values."""

from redcache_core.protocol.serializer import (
    Serializer,
    StringSerializer,
    JSONSerializer,
    PickleSerializer,
    MsgPackSerializer,
    SerializationPair,
)

__all__ = [
    "Serializer",
    "StringSerializer",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    "SerializationPair",
]
