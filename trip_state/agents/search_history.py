"""Recent-search history tidying."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
import os

from pydantic import ValidationError

from trip_state.schemas import LocationRef, RecentSearchEntry

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_STATE_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

COORDINATE_PRECISION = 6

PointKey = Tuple[float, float, str]


@dataclass(frozen=True)
class RouteKey:
    """Origin/destination identity of a search, independent of modes and time."""

    origin: PointKey
    destination: PointKey


def _point_key(ref: LocationRef) -> PointKey:
    name = " ".join((ref.name or "").split()).casefold()
    # round() can yield -0.0; adding 0.0 normalises it so keys hash alike.
    return (
        round(ref.lat, COORDINATE_PRECISION) + 0.0,
        round(ref.lon, COORDINATE_PRECISION) + 0.0,
        name,
    )


def route_key(entry: RecentSearchEntry) -> RouteKey:
    return RouteKey(_point_key(entry.query.frm), _point_key(entry.query.to))


def _parse_entry(entry: Any) -> Optional[RecentSearchEntry]:
    if isinstance(entry, RecentSearchEntry):
        return entry
    try:
        return RecentSearchEntry.model_validate(entry)
    except ValidationError as exc:
        logger.debug("Skipping malformed recent search entry: %s", exc.errors())
        return None


def tidy_recent_searches(
    entries: Sequence[RecentSearchEntry | Dict[str, Any]],
    limit: int | None = None,
) -> List[RecentSearchEntry | Dict[str, Any]]:
    """Return recent searches most recent first, keeping one entry per route.

    ``entries`` are expected oldest first, as the profile stores them. Two
    searches between the same origin and destination are the same route even
    if their modes differ; only the latest survives. Entries that lack route
    data are dropped. The returned items are the caller's own objects.
    """
    parsed: List[Tuple[int, RecentSearchEntry, Any]] = []
    for index, raw in enumerate(entries or []):
        entry = _parse_entry(raw)
        if entry is not None:
            parsed.append((index, entry, raw))

    # Newest first; on equal timestamps the later input position wins.
    parsed.sort(key=lambda item: (item[1].timestamp, item[0]), reverse=True)

    seen: set[RouteKey] = set()
    survivors: List[Tuple[int, RecentSearchEntry, Any]] = []
    for item in parsed:
        key = route_key(item[1])
        if key in seen:
            continue
        seen.add(key)
        survivors.append(item)

    # Distinct routes sharing a timestamp are ordered by id so that tidying a
    # tidied list leaves it unchanged.
    survivors.sort(key=lambda item: (item[1].timestamp, item[1].id), reverse=True)
    if limit is not None:
        survivors = survivors[: max(0, limit)]
    tidied = [raw for _, _, raw in survivors]

    if len(tidied) < len(entries or []):
        logger.debug("Tidied %d recent searches down to %d", len(entries or []), len(tidied))
    return tidied
