"""Deferred, type-erased response serialization.

A handler knows the concrete type of its response value but not the
format the caller asked for; the middleware knows the format but not
the type. :class:`ErasedPayload` bridges the two: it is built from a
typed value at handler-return time and exposes a single capability,
"serialize yourself with this codec", which the middleware invokes
after the handler has finished.
"""

import logging
from functools import lru_cache
from typing import Any, Generic, Optional, Protocol, TypeVar

from pydantic import PydanticUserError, TypeAdapter
from pydantic_core import PydanticSerializationError

from .codecs import Codec
from .exceptions import CodecError, EncodeFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SerializeCapability(Protocol):
    """Anything that can write itself out through a codec."""

    def serialize_into(self, codec: Codec) -> bytes: ...


@lru_cache(maxsize=256)
def adapter_for(tp: Any) -> TypeAdapter:
    """Return a cached pydantic adapter for a type."""
    return TypeAdapter(tp)


class TypedSerializer(Generic[T]):
    """Serialize capability for a value of a known type.

    :param value: The typed response value
    :param tp: Type used to lower the value, defaults to ``type(value)``
    """

    __slots__ = ("_value", "_type")

    def __init__(self, value: T, tp: Optional[Any] = None):
        self._value = value
        self._type = tp if tp is not None else type(value)

    def serialize_into(self, codec: Codec) -> bytes:
        # the adapter is built here so schema errors surface as encode failures
        try:
            adapter = adapter_for(self._type)
            lowered = adapter.dump_python(self._value, mode=codec.dump_mode)
        except (
            PydanticUserError,
            PydanticSerializationError,
            TypeError,
            ValueError,
        ) as e:
            raise EncodeFailure(codec.media_type, original_error=e) from e
        try:
            return codec.encode(lowered)
        except CodecError as e:
            raise EncodeFailure(codec.media_type, original_error=e) from e


class ErasedPayload:
    """Opaque handle around a serialize capability.

    The concrete type of the wrapped value is never exposed again. The
    handle may be copied around freely as response metadata but must be
    serialized at most once.

    :param capability: Object implementing ``serialize_into(codec)``
    :type capability: SerializeCapability
    """

    __slots__ = ("_capability", "_consumed")

    def __init__(self, capability: SerializeCapability):
        self._capability = capability
        self._consumed = False

    @classmethod
    def erase(cls, value: Any, tp: Optional[Any] = None) -> "ErasedPayload":
        """Wrap a typed value.

        :param value: Response value, anything pydantic can serialize
        :type value: Any
        :param tp: Optional explicit type, e.g. ``list[Item]``
        :type tp: Optional[Any]
        :return: A new handle owning the value
        :rtype: ErasedPayload
        """
        return cls(TypedSerializer(value, tp))

    @property
    def consumed(self) -> bool:
        return self._consumed

    def serialize(self, codec: Codec) -> bytes:
        """Serialize the wrapped value with the given codec.

        :param codec: Codec of the negotiated media type
        :type codec: Codec
        :return: Encoded body
        :rtype: bytes
        :raises EncodeFailure: If the value cannot be encoded
        :raises RuntimeError: If the payload was already serialized
        """
        if self._consumed:
            raise RuntimeError("ErasedPayload can only be serialized once")
        self._consumed = True
        return self._capability.serialize_into(codec)

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else "pending"
        return f"<ErasedPayload {state}>"
