"""Media type registry.

The registry is the set of wire formats the process can speak plus the
one used as fallback. It is built once at startup, either directly from
codec instances or from :class:`~content_negotiation.config.NegotiationSettings`,
and is read-only afterwards so it can be shared across concurrent
requests without locking.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from ..codecs import BUILTIN_CODECS, Codec
from ..config import NegotiationSettings, get_settings
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

WILDCARD = "*/*"


def normalize_token(token: Optional[str]) -> str:
    """Trim and lower-case a media type token.

    :param token: Raw token, possibly ``None``
    :type token: Optional[str]
    :return: Normalized token, empty when absent
    :rtype: str
    """
    return (token or "").strip().lower()


@dataclass(frozen=True)
class MediaType:
    """A supported wire format identifier."""

    token: str

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class NegotiatedFormat:
    """The media type chosen for one request/response exchange."""

    media_type: MediaType
    codec: Codec

    @property
    def content_type(self) -> str:
        """Value for the response ``Content-Type`` header."""
        return self.media_type.token


class MediaTypeRegistry:
    """Read-only set of registered media types and their codecs.

    :param codecs: Codec instances to register; the first codec wins
                   when two declare the same media type
    :type codecs: Iterable[Codec]
    :param default: Media type used for absent headers and ``*/*``
    :type default: str
    :raises ConfigurationError: If no codec is given or the default is
                                not among them
    """

    def __init__(self, codecs: Iterable[Codec], default: str):
        self._codecs: Dict[str, Codec] = {}
        self._media_types: Dict[str, MediaType] = {}
        for codec in codecs:
            token = normalize_token(codec.media_type)
            if token in self._codecs:
                logger.warning("Duplicate codec for %s ignored", token)
                continue
            self._codecs[token] = codec
            self._media_types[token] = MediaType(token)

        if not self._codecs:
            raise ConfigurationError(
                "At least one media type must be registered", setting="formats"
            )

        default_token = normalize_token(default)
        if default_token not in self._media_types:
            raise ConfigurationError(
                f"Default media type {default_token!r} is not registered",
                setting="default_media_type",
            )
        self._default = self._media_types[default_token]

    @classmethod
    def from_settings(
        cls, settings: Optional[NegotiationSettings] = None
    ) -> "MediaTypeRegistry":
        """Build a registry from settings using the built-in codecs.

        :param settings: Settings to use, defaults to the process settings
        :type settings: Optional[NegotiationSettings]
        :return: A new registry
        :rtype: MediaTypeRegistry
        :raises ConfigurationError: If a format has no built-in codec
        """
        settings = settings or get_settings()
        codecs = []
        for token in settings.formats:
            codec_cls = BUILTIN_CODECS.get(token)
            if codec_cls is None:
                raise ConfigurationError(
                    f"No codec available for media type {token!r}",
                    setting="formats",
                )
            codecs.append(codec_cls())
        registry = cls(codecs, default=settings.default_media_type)
        logger.info(
            "Media type registry ready: %s (default %s)",
            ", ".join(str(m) for m in registry.media_types),
            registry.default,
        )
        return registry

    @property
    def default(self) -> MediaType:
        """The fallback media type."""
        return self._default

    @property
    def media_types(self) -> Tuple[MediaType, ...]:
        """Registered media types in registration order."""
        return tuple(self._media_types.values())

    def __contains__(self, token: object) -> bool:
        if isinstance(token, MediaType):
            token = token.token
        if not isinstance(token, str):
            return False
        return normalize_token(token) in self._media_types

    def __len__(self) -> int:
        return len(self._media_types)

    def lookup(self, token: Optional[str]) -> Optional[MediaType]:
        """Resolve a token by exact match, without wildcard support.

        :param token: Media type token
        :type token: Optional[str]
        :return: Registered media type or None
        :rtype: Optional[MediaType]
        """
        return self._media_types.get(normalize_token(token))

    def resolve(self, token: Optional[str]) -> Optional[MediaType]:
        """Resolve an Accept token: exact match, or ``*/*`` to the default.

        :param token: Media type token from an Accept header
        :type token: Optional[str]
        :return: Registered media type or None
        :rtype: Optional[MediaType]
        """
        if normalize_token(token) == WILDCARD:
            return self._default
        return self.lookup(token)

    def codec_for(self, media_type: MediaType) -> Codec:
        """Return the codec registered for a media type.

        :raises KeyError: If the media type is not registered
        """
        return self._codecs[media_type.token]

    def negotiated(self, media_type: MediaType) -> NegotiatedFormat:
        """Pair a registered media type with its codec."""
        return NegotiatedFormat(media_type=media_type, codec=self.codec_for(media_type))

    def __repr__(self) -> str:
        tokens = ", ".join(self._media_types)
        return f"MediaTypeRegistry([{tokens}], default={self._default.token!r})"


_default_registry: Optional[MediaTypeRegistry] = None


def get_default_registry() -> MediaTypeRegistry:
    """Return the process-wide registry, building it on first use.

    :return: Registry built from the process settings
    :rtype: MediaTypeRegistry
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = MediaTypeRegistry.from_settings()
    return _default_registry


def reset_default_registry() -> None:
    """Drop the cached process-wide registry and settings."""
    global _default_registry
    _default_registry = None
    get_settings.cache_clear()
