"""Business logic services package with public service helpers."""

from .access_policy import (
    AccessPolicy,
    GrantBasedPolicy,
    RoleBasedPolicy,
    policy_for_role,
)
from .access_service import AccessControlService
from .admin_service import AdminAccessService, InFlightGuard, ToggleInProgress, filter_users
from .unlock_flow import UnlockFlow, UnlockOutcome, UnlockState

__all__ = [
    "AccessPolicy",
    "GrantBasedPolicy",
    "RoleBasedPolicy",
    "policy_for_role",
    "AccessControlService",
    "AdminAccessService",
    "InFlightGuard",
    "ToggleInProgress",
    "filter_users",
    "UnlockFlow",
    "UnlockOutcome",
    "UnlockState",
]
