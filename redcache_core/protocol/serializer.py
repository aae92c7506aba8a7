"""RedCache Serializer - Key and Value Serialization.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
import pickle
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import msgpack

logger = logging.getLogger(__name__)


class Serializer(ABC):
    """Abstract serializer for cache keys and values."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Get format name."""
        pass

    @abstractmethod
    def serialize(self, value: Any) -> bytes:
        """Serialize value to bytes.

        Args:
            value: Value to serialize

        Returns:
            Serialized bytes
        """
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes to value.

        Args:
            data: Serialized bytes

        Returns:
            Deserialized value
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class StringSerializer(Serializer):
    """Plain text keys and values."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    @property
    def format_name(self) -> str:
        return "string"

    def serialize(self, value: Any) -> bytes:
        if isinstance(value, bytes):
            return value
        return str(value).encode(self.encoding)

    def deserialize(self, data: bytes) -> Any:
        return data.decode(self.encoding)


class JSONSerializer(Serializer):
    """JSON serializer.

    Good for human-readable data and interoperability.
    Limited to JSON-compatible types.
    """

    @property
    def format_name(self) -> str:
        return "json"

    def serialize(self, value: Any) -> bytes:
        return json.dumps(value, default=str).encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class PickleSerializer(Serializer):
    """Pickle serializer.

    Supports any Python object.
    Not safe for untrusted data.
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        """Initialize pickle serializer.

        Args:
            protocol: Pickle protocol version
        """
        self.protocol = protocol

    @property
    def format_name(self) -> str:
        return "pickle"

    def serialize(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=self.protocol)

    def deserialize(self, data: bytes) -> Any:
        return pickle.loads(data)


class MsgPackSerializer(Serializer):
    """MessagePack serializer.

    Compact binary format, faster than JSON.
    """

    @property
    def format_name(self) -> str:
        return "msgpack"

    def serialize(self, value: Any) -> bytes:
        return msgpack.packb(value, use_bin_type=True)

    def deserialize(self, data: bytes) -> Any:
        return msgpack.unpackb(data, raw=False)


@dataclass(frozen=True)
class SerializationPair:
    """Writer and reader used together for one side of a cache entry.

    Attributes:
        writer: Serializer turning values into bytes
        reader: Serializer turning bytes back into values
    """

    writer: Serializer
    reader: Serializer

    @classmethod
    def from_serializer(cls, serializer: Serializer) -> "SerializationPair":
        """Pair using one serializer both ways."""
        return cls(writer=serializer, reader=serializer)

    def write(self, value: Any) -> bytes:
        return self.writer.serialize(value)

    def read(self, data: Optional[bytes]) -> Any:
        if data is None:
            return None
        return self.reader.deserialize(data)


__all__ = [
    "Serializer",
    "StringSerializer",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    "SerializationPair",
]
