from __future__ import annotations

from dataclasses import dataclass, field

from trip_state.tools.icons import IconResolver, ModeIconResolver
from trip_state.tools.localizer import Localizer, MessageCatalog


@dataclass
class EngineContext:
    """Capabilities handed to the reconciler by its caller."""

    icon_resolver: IconResolver = field(default_factory=ModeIconResolver)
    localizer: Localizer = field(default_factory=MessageCatalog)
