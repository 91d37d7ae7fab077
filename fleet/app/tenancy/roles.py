"""Franchise roles and normalization of raw membership role strings."""

from enum import Enum


class FranchiseRole(str, Enum):
    """Role a user holds within a franchise."""

    owner = "owner"
    manager = "manager"
    driver = "driver"


# Legacy role names still present in membership rows
_ROLE_ALIASES: dict[str, FranchiseRole] = {
    "super_admin": FranchiseRole.owner,
}


def normalize_role(raw: str | None) -> FranchiseRole:
    """Map a stored role string onto a FranchiseRole.

    Blank and unknown values fall back to driver.
    """
    value = (raw or "").strip().lower()
    if value in _ROLE_ALIASES:
        return _ROLE_ALIASES[value]
    try:
        return FranchiseRole(value)
    except ValueError:
        return FranchiseRole.driver


def is_manager_role(role: FranchiseRole) -> bool:
    """Check whether a role may use manager endpoints."""
    return role in (FranchiseRole.owner, FranchiseRole.manager)
