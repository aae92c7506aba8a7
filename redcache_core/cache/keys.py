"""RedCache Keys - Cache Key Conversion.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import threading
import uuid
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict

from redcache_core.exceptions import KeyConversionError

Converter = Callable[[Any], str]


def _has_own_string_form(key_type: type) -> bool:
    """True if the type defines __str__ or __repr__ beyond object's."""
    return key_type.__str__ is not object.__str__ or key_type.__repr__ is not object.__repr__


class KeyConverter:
    """Turns cache keys into strings.

    Converters are looked up along the key type's MRO, so registering a base
    class covers its subclasses. Types without a converter fall back to
    str() when they define their own __str__ or __repr__.

    Example:
        converter = KeyConverter.default()
        converter.register(User, lambda user: f"user-{user.id}")
        converter.convert(("a", 1))  # "SimpleKey [a,1]"
    """

    def __init__(self):
        self._converters: Dict[type, Converter] = {}
        self._lock = threading.Lock()

    @classmethod
    def default(cls) -> "KeyConverter":
        """Converter with the built-in key types registered."""
        converter = cls()
        converter.register(str, lambda key: key)
        converter.register(bytes, lambda key: key.decode("utf-8"))
        for key_type in (int, float, Decimal, uuid.UUID, Enum):
            converter.register(key_type, str)
        converter.register(tuple, converter._simple_key)
        return converter

    def copy(self) -> "KeyConverter":
        """Independent converter with the same registrations."""
        clone = type(self)()
        with self._lock:
            for key_type, converter in self._converters.items():
                # Converters bound to this instance must recurse into the clone.
                if getattr(converter, "__self__", None) is self:
                    converter = getattr(clone, converter.__name__)
                clone._converters[key_type] = converter
        return clone

    def register(self, key_type: type, converter: Converter) -> "KeyConverter":
        """Register a converter for key_type.

        Returns:
            Self for chaining
        """
        with self._lock:
            self._converters[key_type] = converter
        return self

    def can_convert(self, key_type: type) -> bool:
        """Check if keys of key_type can be converted."""
        return self._find(key_type) is not None or _has_own_string_form(key_type)

    def convert(self, key: Any) -> str:
        """Convert key to its string form.

        Raises:
            KeyConversionError: If the key type has no usable string form
        """
        converter = self._find(type(key))
        if converter is not None:
            try:
                return converter(key)
            except UnicodeDecodeError as e:
                raise KeyConversionError(type(key)) from e

        if _has_own_string_form(type(key)):
            return str(key)

        raise KeyConversionError(type(key))

    def _find(self, key_type: type):
        for klass in key_type.__mro__:
            converter = self._converters.get(klass)
            if converter is not None:
                return converter
        return None

    def _simple_key(self, key: tuple) -> str:
        """Composite keys of several arguments."""
        return "SimpleKey [" + ",".join(self.convert(part) for part in key) + "]"


__all__ = ["KeyConverter", "Converter"]
