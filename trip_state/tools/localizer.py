"""Message lookup used wherever the engine produces user-facing text."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

Localizer = Callable[..., str]

DEFAULT_MESSAGES: Dict[str, str] = {
    "components.BatchSearchScreen.validationMessages.from": "Please select a starting point",
    "components.BatchSearchScreen.validationMessages.to": "Please select a destination",
    "components.BatchSearchScreen.validationMessages.modes": "Please select at least one mode of travel",
    "components.MobilityProfile.myself": "Myself",
    "components.ModeSettings.walkReluctance": "Avoid walking",
    "components.ModeSettings.walkReluctance.low": "More walking",
    "components.ModeSettings.walkReluctance.high": "Less walking",
    "components.ModeSettings.wheelchair": "Prefer accessible trips",
    "components.ModeSettings.accessibleRoutes": "Prefer accessible routes",
}


class _Params(dict):
    """Leave unknown placeholders intact instead of raising."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class MessageCatalog:
    """Format messages by id, interpolating ``{name}`` placeholders.

    Like react-intl, a missing id formats to the id itself so callers can tell a
    miss apart from a real translation.
    """

    def __init__(self, messages: Optional[Mapping[str, str]] = None):
        self.messages: Dict[str, str] = dict(DEFAULT_MESSAGES)
        if messages:
            self.messages.update(messages)

    @classmethod
    def from_file(cls, path: str | Path) -> "MessageCatalog":
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"Message catalog {path} must be a JSON object")
        return cls({str(k): str(v) for k, v in raw.items()})

    def __call__(self, message_id: str, params: Optional[Mapping[str, Any]] = None) -> str:
        template = self.messages.get(message_id)
        if template is None:
            return message_id
        if not params:
            return template
        return template.format_map(_Params(params))
