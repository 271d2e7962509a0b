# trip_state/orchestrator.py
from __future__ import annotations

import os
from typing import Any, Dict, List, Mapping, Optional, Sequence
import logging

from trip_state.schemas import (
    AppConfig,
    CurrentQuery,
    PersistedProfile,
    ProfileView,
    SettingsPanelState,
    User,
)
from trip_state.agents.mode_settings import (
    MODE_BUTTONS_PARAM,
    count_flex_modes,
    generate_mode_setting_values,
    process_mode_buttons,
    process_settings,
    resolve_enabled_mode_buttons,
    trip_planner_validation_errors,
)
from trip_state.agents.mobility_profile import (
    dependents_to_fetch,
    mobility_profile_options,
    selected_mobility_profile,
)
from trip_state.agents.place_normalizer import places_from_profile
from trip_state.agents.search_history import tidy_recent_searches
from trip_state.tools.context import EngineContext

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_STATE_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False


def _coerce(model, value):
    if value is None or isinstance(value, model):
        return value
    if hasattr(value, "model_dump"):
        value = value.model_dump(mode="python", by_alias=True)
    return model.model_validate(value)


def _query_mode_buttons(query_params: Mapping[str, Any]) -> Optional[List[Optional[str]]]:
    # Decoding the delimited form happens upstream; a bare string here is one key.
    raw = query_params.get(MODE_BUTTONS_PARAM)
    if raw is None:
        return None
    if isinstance(raw, str):
        return [raw]
    return list(raw)


def build_settings_panel(
    config: AppConfig | Mapping[str, Any],
    query_params: Mapping[str, Any] | None = None,
    current_query: CurrentQuery | Mapping[str, Any] | None = None,
    profile: PersistedProfile | Mapping[str, Any] | None = None,
    logged_in_user: User | Mapping[str, Any] | None = None,
    context: EngineContext | None = None,
) -> SettingsPanelState:
    """Reconcile config, profile and URL state into what the settings panel renders.

    Setting values come from the query string first, then the persisted profile,
    then the config's initial state, then each definition's default. The same
    order decides which mode buttons start enabled.
    """
    cfg = _coerce(AppConfig, config) or AppConfig()
    query_params = query_params or {}
    query = _coerce(CurrentQuery, current_query) or CurrentQuery()
    stored = _coerce(PersistedProfile, profile) or PersistedProfile()
    user = _coerce(User, logged_in_user)
    ctx = context or EngineContext()

    definitions = cfg.mode_setting_definitions
    button_options = cfg.modes.mode_buttons
    initial_state = cfg.modes.initial_state

    # Profile values sit over the config's initial state; each source is coerced
    # on its own so an unusable profile value falls back to the config value.
    initial_values: Dict[str, Any] = generate_mode_setting_values(
        stored.mode_setting_values, definitions, initial_state.mode_setting_values
    )
    values = generate_mode_setting_values(query_params, definitions, initial_values)

    enabled = resolve_enabled_mode_buttons(
        _query_mode_buttons(query_params),
        stored.enabled_mode_buttons,
        initial_state.enabled_mode_buttons,
        button_options,
    )

    global_settings = process_settings(
        [d for d in definitions if not d.applicable_mode], values, ctx.icon_resolver, ctx.localizer
    )
    processed_settings = process_settings(definitions, values, ctx.icon_resolver, ctx.localizer)
    mode_buttons = process_mode_buttons(button_options, processed_settings, enabled, ctx.icon_resolver)

    validated_query = query.model_copy(update={"mode_buttons": enabled})
    errors = trip_planner_validation_errors(validated_query, ctx.localizer)

    logger.info(
        "Settings panel reconciled: %d settings, %d/%d mode buttons enabled, %d validation errors",
        len(processed_settings),
        len(enabled),
        len(button_options),
        len(errors),
    )

    return SettingsPanelState(
        global_settings=global_settings,
        mode_buttons=mode_buttons,
        enabled_mode_buttons=enabled,
        mode_setting_values=values,
        validation_errors=errors,
        auto_plan_on_close=cfg.auto_plan and not errors,
        flex_mode_count=count_flex_modes(query.modes),
        save_and_return_button=cfg.advanced_settings_panel.save_and_return_button,
        mobility_profile_options=mobility_profile_options(user, ctx.localizer),
        selected_mobility_profile=selected_mobility_profile(query, user),
        dependents_to_fetch=dependents_to_fetch(user, cfg.mobility_profile),
    )


def build_profile_view(
    profile: PersistedProfile | Mapping[str, Any],
    limit: int | None = None,
) -> ProfileView:
    """Places keyed by id and the tidied recent-search list for the profile screens."""
    stored = _coerce(PersistedProfile, profile) or PersistedProfile()
    places = places_from_profile(stored.places)
    recent: Sequence[Dict[str, Any]] = tidy_recent_searches(stored.recent_searches, limit=limit)
    logger.debug("Profile view built with %d places and %d recent searches", len(places), len(recent))
    return ProfileView(places=places, recent_searches=list(recent))
