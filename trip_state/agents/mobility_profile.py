"""Helpers for planning on behalf of a dependent traveler."""
from __future__ import annotations

from typing import Any, List, Mapping, Optional

from trip_state.schemas import CurrentQuery, DependentInfo, MobilityProfileOption, User
from trip_state.tools.localizer import Localizer

MYSELF_MESSAGE = "components.MobilityProfile.myself"


def _as_user(user: User | Mapping[str, Any] | None) -> Optional[User]:
    if user is None or isinstance(user, User):
        return user
    return User.model_validate(user)


def dependent_name(dependent: DependentInfo) -> str:
    return dependent.name or dependent.email


def mobility_profile_options(user: User | Mapping[str, Any] | None, localizer: Localizer) -> List[MobilityProfileOption]:
    """Options for the "plan trip for" dropdown.

    Offered only when the user has dependents whose details are loaded; the
    user's own profile always comes first.
    """
    user = _as_user(user)
    if user is None or not user.dependents_info:
        return []
    options = [MobilityProfileOption(text=localizer(MYSELF_MESSAGE), value=user.email)]
    options.extend(
        MobilityProfileOption(text=dependent_name(dep), value=dep.email) for dep in user.dependents_info
    )
    return options


def selected_mobility_profile(
    current_query: CurrentQuery | Mapping[str, Any] | None,
    user: User | Mapping[str, Any] | None,
) -> Optional[str]:
    if isinstance(current_query, CurrentQuery):
        for_email = current_query.for_email
    else:
        for_email = (current_query or {}).get("forEmail")
    if for_email:
        return for_email
    user = _as_user(user)
    return user.email if user else None


def dependents_to_fetch(user: User | Mapping[str, Any] | None, enabled: bool) -> List[str]:
    """Dependent ids whose details must be loaded before the dropdown can render."""
    user = _as_user(user)
    if not enabled or user is None:
        return []
    return list(user.dependents)
