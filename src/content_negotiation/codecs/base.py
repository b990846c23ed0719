"""Abstract codec interface.

A codec pairs an encode and a decode operation for one media type. It
works on plain builtins (dicts, lists, strings, numbers); turning typed
values into builtins and back is handled by pydantic in the erasure and
inbound layers.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Literal


class Codec(ABC):
    """Abstract base class for wire format codecs.

    Subclasses set :attr:`media_type` and raise
    :class:`~content_negotiation.exceptions.CodecError` on failure.
    """

    media_type: ClassVar[str]

    dump_mode: ClassVar[Literal["json", "python"]] = "json"
    """How pydantic should lower typed values before :meth:`encode`."""

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """Serialize a builtin value to bytes.

        :param value: Value made of builtins
        :type value: Any
        :return: Encoded bytes
        :rtype: bytes
        :raises CodecError: If the value cannot be represented
        """

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        """Deserialize bytes into builtins.

        :param data: Raw body bytes
        :type data: bytes
        :return: Decoded value
        :rtype: Any
        :raises CodecError: If the bytes are not valid for this format
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.media_type!r})"
