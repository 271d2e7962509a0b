from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from trip_state.agents.mode_settings import MODE_BUTTONS_PARAM, generate_mode_setting_values
from trip_state.agents.place_normalizer import convert_to_legacy_location, convert_to_place
from trip_state.agents.search_history import tidy_recent_searches
from trip_state.config import allowed_origins, load_app_config, load_engine_context
from trip_state.orchestrator import build_profile_view, build_settings_panel

app = FastAPI(title="Trip Query State API")

# Operators can narrow this via TRIP_STATE_ALLOWED_ORIGINS.
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _decode_query_params(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Split the comma-delimited ``modeButtons`` param; other params pass through."""
    params = dict(raw)
    mode_buttons = params.get(MODE_BUTTONS_PARAM)
    if isinstance(mode_buttons, str):
        params[MODE_BUTTONS_PARAM] = [key for key in mode_buttons.split(",") if key]
    return params


def _unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False))


@app.post("/api/settings-panel")
async def api_settings_panel(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Panel state for the advanced settings screen.

    ``config`` defaults to the app config loaded from ``TRIP_STATE_APP_CONFIG``.
    """
    try:
        config = payload.get("config") or load_app_config()
        state = build_settings_panel(
            config,
            query_params=_decode_query_params(payload.get("queryParams") or {}),
            current_query=payload.get("currentQuery"),
            profile=payload.get("profile"),
            logged_in_user=payload.get("loggedInUser"),
            context=load_engine_context(),
        )
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return state.model_dump(mode="json", by_alias=True)


@app.post("/api/profile/view")
async def api_profile_view(payload: Dict[str, Any] = Body(...), limit: Optional[int] = None) -> Dict[str, Any]:
    try:
        view = build_profile_view(payload, limit=limit)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return view.model_dump(mode="json", by_alias=True)


@app.post("/api/recent-searches/tidy")
async def api_tidy_recent_searches(
    entries: List[Any] = Body(...),
    limit: Optional[int] = None,
) -> List[Any]:
    return tidy_recent_searches(entries, limit=limit)


@app.post("/api/places/to-place")
async def api_to_place(location: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    try:
        place = convert_to_place(location)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return place.model_dump(mode="json")


@app.post("/api/places/to-location")
async def api_to_location(
    place: Dict[str, Any] = Body(...),
    place_id: str = Body(..., alias="id"),
) -> Dict[str, Any]:
    try:
        location = convert_to_legacy_location(place, place_id)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return location.model_dump(mode="json")


@app.get("/api/mode-settings/values")
async def api_mode_setting_values(request: Request) -> Dict[str, Any]:
    """Current setting values for the URL's query string over the configured defaults."""
    try:
        config = load_app_config()
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    params = _decode_query_params(dict(request.query_params))
    return generate_mode_setting_values(
        params,
        config.mode_setting_definitions,
        config.modes.initial_state.mode_setting_values,
    )
