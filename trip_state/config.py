"""Environment-driven configuration."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from trip_state.schemas import AppConfig
from trip_state.tools.context import EngineContext
from trip_state.tools.icons import ModeIconResolver
from trip_state.tools.localizer import MessageCatalog

# Load .env file if present
load_dotenv()


def allowed_origins() -> List[str]:
    raw = os.getenv("TRIP_STATE_ALLOWED_ORIGINS") or "*"
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


def load_app_config(path: Optional[str] = None) -> AppConfig:
    """Read the JSON app config named by ``path`` or ``TRIP_STATE_APP_CONFIG``.

    With neither set, an empty config (no buttons, no definitions) is returned.
    Raises ``pydantic.ValidationError`` when the file does not match ``AppConfig``.
    """
    path = path or os.getenv("TRIP_STATE_APP_CONFIG")
    if not path:
        return AppConfig()
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return AppConfig.model_validate(raw)


def load_engine_context() -> EngineContext:
    messages_path = os.getenv("TRIP_STATE_MESSAGES")
    localizer = MessageCatalog.from_file(messages_path) if messages_path else MessageCatalog()
    return EngineContext(icon_resolver=ModeIconResolver(), localizer=localizer)
