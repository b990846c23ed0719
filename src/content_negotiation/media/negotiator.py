"""Output format selection.

Applies parsed Accept candidates against a :class:`MediaTypeRegistry`
and picks exactly one media type, or none.
"""

import logging
from typing import Iterable, Optional

from ..utils.security import sanitize_header_value
from .accept import AcceptCandidate, parse_accept
from .types import MediaType, MediaTypeRegistry, NegotiatedFormat

logger = logging.getLogger(__name__)


def select_format(
    candidates: Iterable[AcceptCandidate], registry: MediaTypeRegistry
) -> Optional[MediaType]:
    """Pick the best registered media type among the candidates.

    Unregistered tokens are skipped; ``*/*`` resolves to the registry
    default. The highest quality wins and ties go to the earliest
    candidate, so the result is deterministic for a given input.

    :param candidates: Candidates, typically from :func:`parse_accept`
    :type candidates: Iterable[AcceptCandidate]
    :param registry: Registry to resolve tokens against
    :type registry: MediaTypeRegistry
    :return: Selected media type or None if nothing is acceptable
    :rtype: Optional[MediaType]
    """
    best: Optional[MediaType] = None
    best_quality = -1.0
    for candidate in candidates:
        resolved = registry.resolve(candidate.media_type)
        if resolved is None:
            continue
        if candidate.quality > best_quality:
            best = resolved
            best_quality = candidate.quality
    return best


def negotiate(
    accept: Optional[str], registry: MediaTypeRegistry
) -> Optional[NegotiatedFormat]:
    """Run parsing and selection for a raw Accept header.

    :param accept: Raw Accept header value or None
    :type accept: Optional[str]
    :param registry: Registry to resolve tokens against
    :type registry: MediaTypeRegistry
    :return: The negotiated format or None
    :rtype: Optional[NegotiatedFormat]
    """
    media_type = select_format(parse_accept(accept), registry)
    if media_type is None:
        logger.debug(
            "No acceptable format for Accept: %s", sanitize_header_value(accept)
        )
        return None
    logger.debug(
        "Negotiated %s for Accept: %s", media_type, sanitize_header_value(accept)
    )
    return registry.negotiated(media_type)
