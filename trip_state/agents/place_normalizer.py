"""Conversion between persisted locations and in-memory places."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping

from trip_state.schemas import Location, Place


class PlaceIcon(str, Enum):
    HOME = "home"
    BRIEFCASE = "briefcase"
    MAP_MARKER = "map-marker"
    CUTLERY = "cutlery"
    SHOPPING_CART = "shopping-cart"
    GRADUATION_CAP = "graduation-cap"
    HEART = "heart"


FALLBACK_PLACE_ICON = PlaceIcon.MAP_MARKER

_TYPE_ICONS: Dict[str, PlaceIcon] = {
    "home": PlaceIcon.HOME,
    "work": PlaceIcon.BRIEFCASE,
    "dining": PlaceIcon.CUTLERY,
    "shopping": PlaceIcon.SHOPPING_CART,
    "school": PlaceIcon.GRADUATION_CAP,
}

_KNOWN_ICONS = frozenset(icon.value for icon in PlaceIcon)


def icon_for_type(place_type: str | None) -> PlaceIcon:
    return _TYPE_ICONS.get((place_type or "").lower(), FALLBACK_PLACE_ICON)


def is_known_icon(icon: Any) -> bool:
    return isinstance(icon, str) and icon in _KNOWN_ICONS


def _as_dict(record: Any) -> Dict[str, Any]:
    if hasattr(record, "model_dump"):
        return record.model_dump(mode="python")
    if isinstance(record, Mapping):
        return dict(record)
    raise TypeError("Unsupported record type for place conversion")


def convert_to_place(location: Location | Mapping[str, Any]) -> Place:
    """Return the in-memory place for a persisted location.

    The location ``id`` is dropped; callers keep identity as a mapping key.
    An icon outside ``PlaceIcon`` is replaced by the icon for the location type.
    Raises ``pydantic.ValidationError`` when ``name``, ``lat`` or ``lon`` is missing.
    """
    raw = _as_dict(location)
    raw["id"] = str(raw.get("id") or "")
    loc = Location.model_validate(raw)

    icon = loc.icon if is_known_icon(loc.icon) else icon_for_type(loc.type).value
    return Place(
        name=loc.name,
        address=loc.name,
        lat=loc.lat,
        lon=loc.lon,
        type=loc.type,
        icon=icon,
    )


def convert_to_legacy_location(place: Place | Mapping[str, Any], place_id: str) -> Location:
    """Inverse of ``convert_to_place``.

    ``name`` is taken from the place address (the field the places UI edits) and
    the result carries no ``address`` key at all.
    """
    raw = _as_dict(place)
    name = raw.get("address") or raw.get("name")
    payload = {
        "id": place_id,
        "name": name,
        "lat": raw.get("lat"),
        "lon": raw.get("lon"),
        "type": raw.get("type") or "custom",
        "icon": raw.get("icon"),
    }
    return Location.model_validate(payload)


def places_from_profile(locations: Mapping[str, Any] | Iterable[Any]) -> Dict[str, Place]:
    """Convert stored locations to places keyed by location id."""
    if isinstance(locations, Mapping):
        items = [(str(key), value) for key, value in locations.items()]
    else:
        items = []
        for loc in locations:
            raw = _as_dict(loc)
            items.append((str(raw.get("id", "")), raw))
    return {place_id: convert_to_place({**_as_dict(loc), "id": place_id}) for place_id, loc in items}


def locations_from_places(places: Mapping[str, Place | Mapping[str, Any]]) -> List[Location]:
    return [convert_to_legacy_location(place, place_id) for place_id, place in places.items()]
