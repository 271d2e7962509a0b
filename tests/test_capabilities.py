import json

from trip_state.agents.mobility_profile import dependent_name, mobility_profile_options
from trip_state.config import allowed_origins, load_app_config, load_engine_context
from trip_state.schemas import DependentInfo
from trip_state.tools.icons import NEUTRAL_ICON, ModeIconResolver, resolve_icon
from trip_state.tools.localizer import MessageCatalog


def test_message_catalog_interpolates_and_returns_id_on_miss():
    catalog = MessageCatalog({"greeting": "Hello {name}, {missing}"})

    assert catalog("greeting", {"name": "Ada"}) == "Hello Ada, {missing}"
    assert catalog("no.such.message") == "no.such.message"


def test_mode_icon_resolver_is_case_insensitive_with_overrides():
    resolver = ModeIconResolver({"GONDOLA": "cable-car"})

    assert resolver("BUS") == "bus"
    assert resolver("gondola") == "cable-car"
    assert resolver("teleport") is None
    assert resolve_icon(resolver, "teleport") == NEUTRAL_ICON
    assert resolve_icon(None, "bus") == NEUTRAL_ICON


def test_dependent_name_falls_back_to_email():
    assert dependent_name(DependentInfo(email="kid@example.com")) == "kid@example.com"
    assert mobility_profile_options({"email": "me@example.com", "dependents": ["x"]}, MessageCatalog()) == []


def test_allowed_origins_from_env(monkeypatch):
    monkeypatch.setenv("TRIP_STATE_ALLOWED_ORIGINS", "https://a.example, https://b.example,")
    assert allowed_origins() == ["https://a.example", "https://b.example"]

    monkeypatch.setenv("TRIP_STATE_ALLOWED_ORIGINS", " , ")
    assert allowed_origins() == ["*"]


def test_load_app_config_and_context_from_files(tmp_path, monkeypatch):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"autoPlan": False, "modes": {"modeButtons": [{"key": "car", "label": "Drive"}]}}))
    messages_path = tmp_path / "messages.json"
    messages_path.write_text(json.dumps({"components.MobilityProfile.myself": "Yo"}))
    monkeypatch.setenv("TRIP_STATE_APP_CONFIG", str(config_path))
    monkeypatch.setenv("TRIP_STATE_MESSAGES", str(messages_path))

    config = load_app_config()
    context = load_engine_context()

    assert config.auto_plan is False
    assert config.modes.mode_buttons[0].key == "car"
    assert context.localizer("components.MobilityProfile.myself") == "Yo"


def test_load_app_config_defaults_without_path(monkeypatch):
    monkeypatch.delenv("TRIP_STATE_APP_CONFIG", raising=False)

    config = load_app_config()

    assert config.auto_plan is True
    assert config.mode_setting_definitions == []
