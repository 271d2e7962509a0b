from typing import Any, Callable, Dict, Mapping, Optional

IconResolver = Callable[[str], Optional[Any]]

NEUTRAL_ICON = "question-circle"

_MODE_ICONS: Dict[str, str] = {
    "transit": "bus",
    "bus": "bus",
    "tram": "tram",
    "rail": "train",
    "subway": "subway",
    "ferry": "ferry",
    "gondola": "gondola",
    "flex": "on-demand",
    "walk": "walking",
    "bicycle": "bicycle",
    "bike": "bicycle",
    "scooter": "scooter",
    "car": "car",
    "car_park": "parking",
    "car_hail": "taxi",
    "rent": "bike-share",
    "wheelchair": "wheelchair",
}


class ModeIconResolver:
    """Resolve a mode or setting key to an icon identifier.

    Lookups are case-insensitive and never raise; a miss returns ``None`` so the
    caller can substitute ``NEUTRAL_ICON``.
    """

    def __init__(self, icons: Optional[Mapping[str, Any]] = None):
        table = dict(_MODE_ICONS)
        if icons:
            table.update({str(k).lower(): v for k, v in icons.items()})
        self._icons = table

    def __call__(self, key: str) -> Optional[Any]:
        if not key:
            return None
        return self._icons.get(str(key).lower())


def resolve_icon(resolver: Optional[IconResolver], key: Optional[str], logger=None) -> Any:
    """Call ``resolver`` for ``key`` and fall back to ``NEUTRAL_ICON`` on a miss or failure."""
    if resolver is None or not key:
        return NEUTRAL_ICON
    try:
        icon = resolver(key)
    except Exception:
        if logger is not None:
            logger.warning("Icon resolver failed for %s; using neutral icon", key, exc_info=True)
        return NEUTRAL_ICON
    return icon if icon is not None else NEUTRAL_ICON
