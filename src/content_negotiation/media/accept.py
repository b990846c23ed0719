"""Accept header parsing.

Only exact media type tokens, the ``*/*`` wildcard and the ``q``
parameter are understood. Other parameters are ignored. Parsing never
fails: a malformed quality value only demotes its own entry.
"""

import math
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .types import WILDCARD, normalize_token

DEFAULT_QUALITY = 1.0
MALFORMED_QUALITY = 0.0


@dataclass(frozen=True)
class AcceptCandidate:
    """One entry of an Accept header.

    :param media_type: Normalized token, not yet checked against a registry
    :param quality: Weight in [0.0, 1.0]
    """

    media_type: str
    quality: float = DEFAULT_QUALITY

    @property
    def is_wildcard(self) -> bool:
        return self.media_type == WILDCARD


def parse_quality(params: str) -> float:
    """Extract the ``q`` weight from the parameter tail of an entry.

    :param params: Everything after the first ``;`` of an entry
    :type params: str
    :return: The weight, 1.0 when absent, 0.0 when malformed
    :rtype: float
    """
    for param in params.split(";"):
        param = param.strip()
        if not param.lower().startswith("q="):
            continue
        try:
            quality = float(param[2:].strip())
        except ValueError:
            return MALFORMED_QUALITY
        if math.isnan(quality):
            return MALFORMED_QUALITY
        return min(max(quality, 0.0), 1.0)
    return DEFAULT_QUALITY


def _parse_entry(segment: str) -> Optional[AcceptCandidate]:
    segment = segment.strip()
    if not segment:
        return None
    token, _, params = segment.partition(";")
    token = normalize_token(token)
    if not token:
        return None
    return AcceptCandidate(media_type=token, quality=parse_quality(params))


def parse_accept(header: Optional[str]) -> Iterator[AcceptCandidate]:
    """Parse an Accept header into candidates, best first.

    Candidates are ordered by descending quality; entries with equal
    quality keep their header order. An absent header yields a single
    ``*/*`` candidate at full weight.

    :param header: Raw header value or None
    :type header: Optional[str]
    :return: Iterator over the candidates
    :rtype: Iterator[AcceptCandidate]
    """
    if header is None:
        return iter([AcceptCandidate(media_type=WILDCARD)])

    candidates: List[AcceptCandidate] = []
    for segment in header.split(","):
        candidate = _parse_entry(segment)
        if candidate is not None:
            candidates.append(candidate)

    # sorted() is stable, so first-seen wins on equal weight
    return iter(sorted(candidates, key=lambda c: -c.quality))
