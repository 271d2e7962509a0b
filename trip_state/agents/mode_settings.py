"""Mode-setting reconciliation.

Merges setting definitions with persisted values and query-string overrides,
enriches settings and mode buttons for display, and exposes the toggle and
validation helpers the settings panel is driven by. Everything here is a pure
function of its inputs; the only state lives with the caller.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence
import logging
import math
import os

from trip_state.schemas import (
    CurrentQuery,
    ModeButtonDefinition,
    ModeSetting,
    ModeSettingValues,
    ProcessedModeButton,
    ProcessedModeSetting,
    TransportMode,
)
from trip_state.tools.icons import IconResolver, resolve_icon
from trip_state.tools.localizer import Localizer

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_STATE_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

MODE_BUTTONS_PARAM = "modeButtons"
FLEX_MODE = "FLEX"
SETTING_LABEL_PREFIX = "components.ModeSettings."
VALIDATION_MESSAGES = {
    "from": "components.BatchSearchScreen.validationMessages.from",
    "to": "components.BatchSearchScreen.validationMessages.to",
    "modes": "components.BatchSearchScreen.validationMessages.modes",
}

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}
_UNSET = object()


def pipe(*fns: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Compose ``fns`` left to right."""

    def piped(value: Any) -> Any:
        for fn in fns:
            value = fn(value)
        return value

    return piped


def _as_setting(setting: ModeSetting | Mapping[str, Any]) -> ModeSetting:
    if isinstance(setting, ModeSetting):
        return setting
    return ModeSetting.model_validate(setting)


def _as_button(button: ModeButtonDefinition | Mapping[str, Any]) -> ModeButtonDefinition:
    if isinstance(button, ModeButtonDefinition):
        return button
    return ModeButtonDefinition.model_validate(button)


# ---------- value resolution ----------
def _coerce_value(setting: ModeSetting, value: Any) -> Any:
    """Coerce a raw (often string) value to the setting's type or return ``_UNSET``."""
    if value is None:
        return _UNSET

    if setting.type in ("CHECKBOX", "SUBMODE"):
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        lowered = str(value).strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return _UNSET

    if setting.type == "SLIDER":
        if isinstance(value, bool):
            return _UNSET
        if isinstance(value, (int, float)):
            return value if math.isfinite(value) else _UNSET
        text = str(value).strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return _UNSET
        return number if math.isfinite(number) else _UNSET

    # DROPDOWN
    if setting.options:
        for option in setting.options:
            if option.value == value or str(option.value) == str(value):
                return option.value
        return _UNSET
    return value


def generate_mode_setting_values(
    query_params: Mapping[str, Any] | None,
    definitions: Sequence[ModeSetting | Mapping[str, Any]],
    initial_values: Mapping[str, Any] | None,
) -> ModeSettingValues:
    """Resolve the current value of every defined setting.

    Precedence is query param, then initial (profile/config) value, then the
    definition default. Keys that no definition declares are ignored, and keys
    with no value anywhere are left out of the result.
    """
    query_params = query_params or {}
    initial_values = initial_values or {}
    values: ModeSettingValues = {}
    seen: set[str] = set()

    for raw in definitions or []:
        setting = _as_setting(raw)
        if setting.key in seen:
            logger.warning("Duplicate mode setting definition %s ignored", setting.key)
            continue
        seen.add(setting.key)

        for source, candidate in (
            ("query", query_params.get(setting.key)),
            ("initial", initial_values.get(setting.key)),
        ):
            resolved = _coerce_value(setting, candidate)
            if resolved is not _UNSET:
                values[setting.key] = resolved
                break
            if candidate is not None:
                logger.debug("Ignoring %s value %r for setting %s", source, candidate, setting.key)
        else:
            if setting.default is not None:
                values[setting.key] = setting.default

    unknown = sorted(set(initial_values) - seen)
    if unknown:
        logger.debug("Dropping values for unknown mode settings: %s", ", ".join(unknown))
    return values


# ---------- setting enrichment ----------
def _as_processed_setting(setting: ModeSetting | Mapping[str, Any]) -> ProcessedModeSetting:
    setting = _as_setting(setting)
    if isinstance(setting, ProcessedModeSetting):
        return setting
    return ProcessedModeSetting.model_validate(setting.model_dump())


def populate_setting_with_icon(icon_resolver: Optional[IconResolver]) -> Callable[[Any], ProcessedModeSetting]:
    def populate(setting: Any) -> ProcessedModeSetting:
        processed = _as_processed_setting(setting)
        icon = resolve_icon(icon_resolver, processed.icon_name or processed.key, logger)
        return processed.model_copy(update={"icon": icon})

    return populate


def populate_setting_with_value(values: Mapping[str, Any]) -> Callable[[Any], ProcessedModeSetting]:
    def populate(setting: Any) -> ProcessedModeSetting:
        processed = _as_processed_setting(setting)
        value = values[processed.key] if processed.key in values else processed.default
        return processed.model_copy(update={"value": value})

    return populate


def _lookup_label(localizer: Localizer, message_id: str) -> Optional[str]:
    try:
        text = localizer(message_id)
    except Exception:
        logger.warning("Localizer failed for %s; keeping built-in label", message_id, exc_info=True)
        return None
    if not isinstance(text, str) or not text or text == message_id:
        return None
    return text


def add_custom_setting_labels(localizer: Optional[Localizer]) -> Callable[[Any], ProcessedModeSetting]:
    """Override setting labels with localized ``components.ModeSettings.<key>`` messages."""

    def add_labels(setting: Any) -> ProcessedModeSetting:
        processed = _as_processed_setting(setting)
        if localizer is None:
            return processed
        message_id = SETTING_LABEL_PREFIX + processed.key
        update: Dict[str, str] = {}
        label = _lookup_label(localizer, message_id)
        if label:
            update["label"] = label
        if processed.type == "SLIDER":
            low = _lookup_label(localizer, message_id + ".low")
            high = _lookup_label(localizer, message_id + ".high")
            if low:
                update["label_low"] = low
            if high:
                update["label_high"] = high
        return processed.model_copy(update=update) if update else processed

    return add_labels


def process_settings(
    definitions: Sequence[ModeSetting | Mapping[str, Any]],
    values: Mapping[str, Any],
    icon_resolver: Optional[IconResolver],
    localizer: Optional[Localizer],
) -> List[ProcessedModeSetting]:
    enrich = pipe(
        populate_setting_with_icon(icon_resolver),
        populate_setting_with_value(values),
        add_custom_setting_labels(localizer),
    )
    return [enrich(setting) for setting in definitions or []]


# ---------- mode buttons ----------
def _as_processed_button(button: Any) -> ProcessedModeButton:
    button = _as_button(button)
    if isinstance(button, ProcessedModeButton):
        return button
    return ProcessedModeButton.model_validate(button.model_dump())


def add_mode_button_icon(icon_resolver: Optional[IconResolver]) -> Callable[[Any], ProcessedModeButton]:
    def add_icon(button: Any) -> ProcessedModeButton:
        processed = _as_processed_button(button)
        icon = resolve_icon(icon_resolver, processed.icon_name or processed.key, logger)
        return processed.model_copy(update={"icon": icon})

    return add_icon


def _applies_to(setting: ProcessedModeSetting, button: ModeButtonDefinition) -> bool:
    if not setting.applicable_mode:
        return False
    wanted = setting.applicable_mode.lower()
    if wanted == button.key.lower():
        return True
    return any(mode.mode.lower() == wanted for mode in button.modes)


def add_settings_to_button(processed_settings: Sequence[ProcessedModeSetting]) -> Callable[[Any], ProcessedModeButton]:
    def add_settings(button: Any) -> ProcessedModeButton:
        processed = _as_processed_button(button)
        applicable = [s for s in processed_settings if _applies_to(s, processed)]
        return processed.model_copy(update={"mode_settings": applicable})

    return add_settings


def set_mode_button_enabled(enabled_keys: Iterable[str]) -> Callable[[Any], ProcessedModeButton]:
    enabled = set(enabled_keys or [])

    def set_enabled(button: Any) -> ProcessedModeButton:
        processed = _as_processed_button(button)
        return processed.model_copy(update={"enabled": processed.key in enabled})

    return set_enabled


def process_mode_buttons(
    button_defs: Sequence[ModeButtonDefinition | Mapping[str, Any]],
    processed_settings: Sequence[ProcessedModeSetting],
    enabled_keys: Iterable[str],
    icon_resolver: Optional[IconResolver],
) -> List[ProcessedModeButton]:
    enrich = pipe(
        add_mode_button_icon(icon_resolver),
        add_settings_to_button(processed_settings),
        set_mode_button_enabled(enabled_keys),
    )
    return [enrich(button) for button in button_defs or []]


def resolve_enabled_mode_buttons(
    query_value: Optional[Sequence[Optional[str]]],
    persisted: Optional[Sequence[Optional[str]]],
    initial: Optional[Sequence[Optional[str]]],
    button_options: Sequence[ModeButtonDefinition | Mapping[str, Any]],
) -> List[str]:
    """Pick the enabled mode buttons from the first source that is set.

    An explicitly empty list is a valid choice (everything switched off).
    Null entries and keys without a matching button are dropped.
    """
    known = [_as_button(b).key for b in button_options or []]
    source: Sequence[Optional[str]] = []
    for candidate in (query_value, persisted, initial):
        if candidate is not None:
            source = candidate
            break

    enabled: List[str] = []
    for key in source:
        if key is None or key in enabled:
            continue
        if key not in known:
            logger.debug("Dropping unknown mode button %s", key)
            continue
        enabled.append(key)
    return enabled


# ---------- toggles ----------
def on_settings_update(set_query_param: Callable[[Dict[str, Any]], Any]) -> Callable[[Mapping[str, Any]], None]:
    """Route settings-panel changes to the caller's query-param setter."""

    def update(params: Mapping[str, Any]) -> None:
        payload = dict(params)
        if MODE_BUTTONS_PARAM in payload and payload[MODE_BUTTONS_PARAM] is not None:
            payload[MODE_BUTTONS_PARAM] = list(payload[MODE_BUTTONS_PARAM])
        set_query_param(payload)

    return update


def set_mode_button(
    enabled_keys: Sequence[str],
    on_change: Callable[[Dict[str, Any]], Any],
) -> Callable[[str, bool], None]:
    """Return a toggle for mode-button membership.

    The toggle works from ``enabled_keys`` as captured; callers rebuild it after
    applying the change. ``on_change`` only fires when membership changes.
    """
    current = list(enabled_keys or [])

    def toggle(key: str, should_enable: bool) -> None:
        if should_enable:
            if key in current:
                return
            updated = current + [key]
        else:
            if key not in current:
                return
            updated = [k for k in current if k != key]
        on_change({MODE_BUTTONS_PARAM: updated})

    return toggle


def _submodes(button: ProcessedModeButton) -> List[ProcessedModeSetting]:
    return [s for s in button.mode_settings if s.type == "SUBMODE"]


def all_submodes_disabled(button: ProcessedModeButton) -> bool:
    submodes = _submodes(button)
    return bool(submodes) and not any(s.value for s in submodes)


def on_all_submodes_disabled(toggle: Callable[[str, bool], None]) -> Callable[[ProcessedModeButton], None]:
    def handle(button: ProcessedModeButton) -> None:
        toggle(button.key, False)

    return handle


def apply_submode_cascade(button: ProcessedModeButton, toggle: Callable[[str, bool], None]) -> Optional[bool]:
    """Disable ``button`` once all its sub-modes are off, re-enable it when one is back on.

    Returns the new enabled state, or ``None`` when nothing changed.
    """
    submodes = _submodes(button)
    if not submodes:
        return None
    if button.enabled and all_submodes_disabled(button):
        on_all_submodes_disabled(toggle)(button)
        return False
    if not button.enabled and any(s.value for s in submodes):
        toggle(button.key, True)
        return True
    return None


# ---------- query checks ----------
def _mode_name(mode: Any) -> Optional[str]:
    if isinstance(mode, TransportMode):
        return mode.mode
    if isinstance(mode, Mapping):
        return mode.get("mode")
    return getattr(mode, "mode", None)


def count_flex_modes(modes: Iterable[TransportMode | Mapping[str, Any]] | None) -> int:
    return sum(1 for mode in modes or [] if _mode_name(mode) == FLEX_MODE)


def _has_coordinates(location: Any) -> bool:
    if hasattr(location, "model_dump"):
        location = location.model_dump()
    if not isinstance(location, Mapping):
        return False
    return location.get("lat") is not None and location.get("lon") is not None


def trip_planner_validation_errors(query: CurrentQuery | Mapping[str, Any], localizer: Localizer) -> List[str]:
    """Return localized reasons the query cannot be planned yet; empty means plannable."""
    if isinstance(query, CurrentQuery):
        raw: Dict[str, Any] = query.model_dump(by_alias=True)
    else:
        raw = dict(query or {})

    errors: List[str] = []
    if not _has_coordinates(raw.get("from")):
        errors.append(localizer(VALIDATION_MESSAGES["from"]))
    if not _has_coordinates(raw.get("to")):
        errors.append(localizer(VALIDATION_MESSAGES["to"]))

    mode_buttons = raw.get(MODE_BUTTONS_PARAM)
    if mode_buttons is not None:
        has_modes = any(key for key in mode_buttons)
    else:
        has_modes = bool(raw.get("modes"))
    if not has_modes:
        errors.append(localizer(VALIDATION_MESSAGES["modes"]))
    return errors
