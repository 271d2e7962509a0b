from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

SettingValue = Union[bool, int, float, str]
ModeSettingValues = Dict[str, SettingValue]

# ------- Places -------
class Location(BaseModel):
    """Saved place as persisted in the user profile."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    lat: float
    lon: float
    type: str = "custom"
    icon: Optional[str] = None

class Place(BaseModel):
    """Saved place as used by the favorites/history UI. ``address`` mirrors ``name``."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    address: Optional[str] = None
    lat: float
    lon: float
    type: str = "custom"
    icon: str

# ------- Recent searches -------
class LocationRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    lat: float
    lon: float
    name: str = ""

class TransportMode(BaseModel):
    mode: str
    qualifier: Optional[str] = None

class TripQuery(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    date: Optional[str] = None
    time: Optional[str] = None
    depart_arrive: Optional[str] = Field(None, alias="departArrive")
    frm: LocationRef = Field(..., alias="from")
    to: LocationRef
    modes: List[TransportMode] = Field(default_factory=list)

class RecentSearchEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    timestamp: int
    query: TripQuery

class CurrentQuery(BaseModel):
    """The trip query being edited. Every part may still be missing."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    date: Optional[str] = None
    time: Optional[str] = None
    depart_arrive: Optional[str] = Field(None, alias="departArrive")
    frm: Optional[Dict[str, Any]] = Field(None, alias="from")
    to: Optional[Dict[str, Any]] = None
    modes: List[TransportMode] = Field(default_factory=list)
    mode_buttons: Optional[List[Optional[str]]] = Field(None, alias="modeButtons")
    for_email: Optional[str] = Field(None, alias="forEmail")

# ------- Mode settings -------
class DropdownOption(BaseModel):
    text: str
    value: SettingValue

class ModeSetting(BaseModel):
    """Static definition of one trip-planning setting. No ``applicable_mode`` means global."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    key: str
    type: Literal["CHECKBOX", "DROPDOWN", "SLIDER", "SUBMODE"]
    applicable_mode: Optional[str] = Field(None, alias="applicableMode")
    label: Optional[str] = None
    label_low: Optional[str] = Field(None, alias="labelLow")
    label_high: Optional[str] = Field(None, alias="labelHigh")
    default: Optional[SettingValue] = None
    icon_name: Optional[str] = Field(None, alias="iconName")
    options: List[DropdownOption] = Field(default_factory=list)
    low: Optional[float] = None
    high: Optional[float] = None
    step: Optional[float] = None
    inverse_key: Optional[str] = Field(None, alias="inverseKey")
    add_transport_mode: Optional[TransportMode] = Field(None, alias="addTransportMode")

class ProcessedModeSetting(ModeSetting):
    icon: Any = None
    value: Optional[SettingValue] = None

class ModeButtonDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    key: str
    label: str
    icon_name: Optional[str] = Field(None, alias="iconName")
    modes: List[TransportMode] = Field(default_factory=list)

class ProcessedModeButton(ModeButtonDefinition):
    icon: Any = None
    mode_settings: List[ProcessedModeSetting] = Field(default_factory=list, alias="modeSettings")
    enabled: bool = False

# ------- Users and profile -------
class DependentInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")
    email: str
    name: Optional[str] = None

class User(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    email: str
    name: Optional[str] = None
    dependents: List[str] = Field(default_factory=list)
    dependents_info: List[DependentInfo] = Field(default_factory=list, alias="dependentsInfo")

class PersistedProfile(BaseModel):
    """Loosely-typed client profile. Entries are validated lazily by the agents."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    recent_searches: List[Any] = Field(default_factory=list, alias="recentSearches")
    places: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    mode_setting_values: Dict[str, Any] = Field(default_factory=dict, alias="modeSettingValues")
    enabled_mode_buttons: Optional[List[Optional[str]]] = Field(None, alias="enabledModeButtons")

# ------- App config -------
class ModesInitialState(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    enabled_mode_buttons: List[Optional[str]] = Field(default_factory=list, alias="enabledModeButtons")
    mode_setting_values: Dict[str, Any] = Field(default_factory=dict, alias="modeSettingValues")

class ModesConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    mode_buttons: List[ModeButtonDefinition] = Field(default_factory=list, alias="modeButtons")
    initial_state: ModesInitialState = Field(default_factory=ModesInitialState, alias="initialState")

class AdvancedSettingsPanelConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    save_and_return_button: bool = Field(False, alias="saveAndReturnButton")

class AppConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    auto_plan: bool = Field(True, alias="autoPlan")
    mobility_profile: bool = Field(False, alias="mobilityProfile")
    advanced_settings_panel: AdvancedSettingsPanelConfig = Field(
        default_factory=AdvancedSettingsPanelConfig, alias="advancedSettingsPanel"
    )
    modes: ModesConfig = Field(default_factory=ModesConfig)
    mode_setting_definitions: List[ModeSetting] = Field(default_factory=list, alias="modeSettingDefinitions")

# ------- Engine output -------
class MobilityProfileOption(BaseModel):
    text: str
    value: str

class SettingsPanelState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    global_settings: List[ProcessedModeSetting] = Field(default_factory=list, alias="globalSettings")
    mode_buttons: List[ProcessedModeButton] = Field(default_factory=list, alias="modeButtons")
    enabled_mode_buttons: List[str] = Field(default_factory=list, alias="enabledModeButtons")
    mode_setting_values: ModeSettingValues = Field(default_factory=dict, alias="modeSettingValues")
    validation_errors: List[str] = Field(default_factory=list, alias="validationErrors")
    auto_plan_on_close: bool = Field(False, alias="autoPlanOnClose")
    flex_mode_count: int = Field(0, alias="flexModeCount")
    save_and_return_button: bool = Field(False, alias="saveAndReturnButton")
    mobility_profile_options: List[MobilityProfileOption] = Field(
        default_factory=list, alias="mobilityProfileOptions"
    )
    selected_mobility_profile: Optional[str] = Field(None, alias="selectedMobilityProfile")
    dependents_to_fetch: List[str] = Field(default_factory=list, alias="dependentsToFetch")

class ProfileView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    places: Dict[str, Place] = Field(default_factory=dict)
    recent_searches: List[Dict[str, Any]] = Field(default_factory=list, alias="recentSearches")
