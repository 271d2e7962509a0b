from typing import Any, Dict, List

from trip_state.agents.mode_settings import (
    all_submodes_disabled,
    apply_submode_cascade,
    count_flex_modes,
    generate_mode_setting_values,
    on_all_submodes_disabled,
    on_settings_update,
    pipe,
    process_mode_buttons,
    process_settings,
    resolve_enabled_mode_buttons,
    set_mode_button,
    trip_planner_validation_errors,
)
from trip_state.schemas import ModeSetting
from trip_state.tools.icons import NEUTRAL_ICON, ModeIconResolver
from trip_state.tools.localizer import MessageCatalog

DEFINITIONS: List[Dict[str, Any]] = [
    {"key": "wheelchair", "type": "CHECKBOX", "label": "Wheelchair", "default": False, "iconName": "wheelchair"},
    {
        "key": "walkReluctance",
        "type": "SLIDER",
        "label": "Walk reluctance",
        "default": 2,
        "low": 1,
        "high": 10,
        "step": 1,
    },
    {"key": "busEnabled", "type": "SUBMODE", "applicableMode": "BUS", "label": "Bus", "default": True, "iconName": "bus"},
    {"key": "railEnabled", "type": "SUBMODE", "applicableMode": "RAIL", "label": "Rail", "default": True, "iconName": "rail"},
    {
        "key": "bikeTriangle",
        "type": "DROPDOWN",
        "applicableMode": "bike",
        "label": "Bike route",
        "options": [{"text": "Safest", "value": "safe"}, {"text": "Fastest", "value": "fast"}],
    },
]

BUTTONS: List[Dict[str, Any]] = [
    {"key": "transit", "label": "Transit", "iconName": "bus", "modes": [{"mode": "BUS"}, {"mode": "RAIL"}]},
    {"key": "bike", "label": "Bike", "iconName": "bicycle", "modes": [{"mode": "BICYCLE"}]},
    {"key": "car", "label": "Drive", "iconName": "car", "modes": [{"mode": "CAR"}]},
]


def test_query_params_win_over_initial_values_and_defaults():
    values = generate_mode_setting_values(
        {"wheelchair": "true", "from": "somewhere"},
        DEFINITIONS,
        {"wheelchair": False, "walkReluctance": 5, "staleSetting": 1},
    )

    assert values["wheelchair"] is True
    assert values["walkReluctance"] == 5
    assert values["busEnabled"] is True
    assert "bikeTriangle" not in values
    assert "staleSetting" not in values
    assert "from" not in values


def test_query_param_strings_are_coerced_by_type():
    values = generate_mode_setting_values(
        {"walkReluctance": "3.5", "busEnabled": "false", "bikeTriangle": "fast"},
        DEFINITIONS,
        {},
    )

    assert values["walkReluctance"] == 3.5
    assert values["busEnabled"] is False
    assert values["bikeTriangle"] == "fast"


def test_uncoercible_override_falls_through():
    values = generate_mode_setting_values(
        {"walkReluctance": "lots", "bikeTriangle": "scenic"},
        DEFINITIONS,
        {"bikeTriangle": "safe"},
    )

    assert values["walkReluctance"] == 2
    assert values["bikeTriangle"] == "safe"


def test_pipe_applies_left_to_right():
    assert pipe(lambda x: x + 1, lambda x: x * 10)(1) == 20


def test_process_settings_attaches_icon_value_and_label():
    values = generate_mode_setting_values({}, DEFINITIONS, {})
    processed = process_settings(DEFINITIONS, values, ModeIconResolver(), MessageCatalog())

    assert [s.key for s in processed] == [d["key"] for d in DEFINITIONS]
    by_key = {s.key: s for s in processed}
    assert by_key["wheelchair"].icon == "wheelchair"
    assert by_key["wheelchair"].value is False
    assert by_key["wheelchair"].label == "Prefer accessible trips"
    assert by_key["walkReluctance"].label_low == "More walking"
    assert by_key["walkReluctance"].icon == NEUTRAL_ICON
    assert by_key["railEnabled"].label == "Rail"
    assert by_key["bikeTriangle"].value is None


def test_process_settings_survives_failing_capabilities():
    def broken_resolver(key):
        raise RuntimeError("icon bundle not loaded")

    def broken_localizer(message_id, params=None):
        raise KeyError(message_id)

    processed = process_settings(DEFINITIONS, {}, broken_resolver, broken_localizer)

    assert len(processed) == len(DEFINITIONS)
    assert all(s.icon == NEUTRAL_ICON for s in processed)
    assert processed[0].label == "Wheelchair"
    assert processed[0].value is False


def test_process_settings_does_not_mutate_definitions():
    definitions = [ModeSetting.model_validate(d) for d in DEFINITIONS]
    before = [d.model_dump() for d in definitions]

    process_settings(definitions, {"wheelchair": True}, ModeIconResolver(), MessageCatalog())

    assert [d.model_dump() for d in definitions] == before


def test_process_mode_buttons_assigns_settings_and_enabled_flag():
    processed_settings = process_settings(DEFINITIONS, {}, ModeIconResolver(), MessageCatalog())

    buttons = process_mode_buttons(BUTTONS, processed_settings, ["transit", "car"], ModeIconResolver())

    by_key = {b.key: b for b in buttons}
    assert [s.key for s in by_key["transit"].mode_settings] == ["busEnabled", "railEnabled"]
    assert [s.key for s in by_key["bike"].mode_settings] == ["bikeTriangle"]
    assert by_key["car"].mode_settings == []
    assert by_key["transit"].enabled and by_key["car"].enabled
    assert not by_key["bike"].enabled
    assert by_key["bike"].icon == "bicycle"


def test_resolve_enabled_mode_buttons_prefers_query_and_drops_unknown():
    assert resolve_enabled_mode_buttons(["bike", None, "boat", "bike"], ["car"], ["transit"], BUTTONS) == ["bike"]
    assert resolve_enabled_mode_buttons(None, None, ["transit", "walk"], BUTTONS) == ["transit"]
    assert resolve_enabled_mode_buttons([], ["car"], ["transit"], BUTTONS) == []


def test_set_mode_button_toggles_and_is_idempotent():
    changes = []
    toggle = set_mode_button(["transit"], changes.append)

    toggle("bike", True)
    toggle("transit", True)
    toggle("car", False)
    toggle("transit", False)

    assert changes == [{"modeButtons": ["transit", "bike"]}, {"modeButtons": []}]


def test_on_settings_update_forwards_to_query_setter():
    received = []
    update = on_settings_update(received.append)

    update({"modeButtons": ("transit", "bike"), "wheelchair": True})

    assert received == [{"modeButtons": ["transit", "bike"], "wheelchair": True}]


def test_all_submodes_disabled_cascades_to_button():
    values = {"busEnabled": False, "railEnabled": False}
    processed_settings = process_settings(DEFINITIONS, values, None, None)
    transit = process_mode_buttons(BUTTONS, processed_settings, ["transit"], None)[0]
    changes = []
    toggle = set_mode_button(["transit"], changes.append)

    assert all_submodes_disabled(transit)
    on_all_submodes_disabled(toggle)(transit)

    assert changes == [{"modeButtons": []}]


def test_apply_submode_cascade_reenables_button():
    processed_settings = process_settings(DEFINITIONS, {"busEnabled": True, "railEnabled": False}, None, None)
    transit = process_mode_buttons(BUTTONS, processed_settings, [], None)[0]
    changes = []

    result = apply_submode_cascade(transit, set_mode_button([], changes.append))

    assert result is True
    assert changes == [{"modeButtons": ["transit"]}]


def test_apply_submode_cascade_ignores_buttons_without_submodes():
    processed_settings = process_settings(DEFINITIONS, {}, None, None)
    car = process_mode_buttons(BUTTONS, processed_settings, ["car"], None)[2]

    assert not all_submodes_disabled(car)
    assert apply_submode_cascade(car, set_mode_button(["car"], lambda _: None)) is None


def test_count_flex_modes():
    assert count_flex_modes([{"mode": "BUS"}, {"mode": "FLEX"}, {"mode": "FLEX"}]) == 2
    assert count_flex_modes([]) == 0
    assert count_flex_modes(None) == 0


def test_validation_errors_empty_for_plannable_query():
    query = {
        "from": {"lat": 47.6, "lon": -122.3, "name": "Pike Place"},
        "to": {"lat": 47.62, "lon": -122.35, "name": "Space Needle"},
        "modeButtons": ["transit"],
    }

    assert trip_planner_validation_errors(query, MessageCatalog()) == []


def test_validation_errors_report_missing_origin_and_modes():
    query = {"to": {"lat": 47.62, "lon": -122.35, "name": "Space Needle"}, "modeButtons": []}

    errors = trip_planner_validation_errors(query, MessageCatalog())

    assert errors == ["Please select a starting point", "Please select at least one mode of travel"]


def test_validation_falls_back_to_query_modes():
    query = {
        "from": {"lat": 1, "lon": 2},
        "to": {"lat": 3, "lon": 4},
        "modes": [{"mode": "WALK"}],
    }

    assert trip_planner_validation_errors(query, MessageCatalog()) == []
