"""Request context for tenancy enforcement."""

from dataclasses import dataclass, field
from uuid import UUID

from fleet.app.tenancy.roles import FranchiseRole
from fleet.app.tenancy.scope import FranchiseScope


@dataclass(frozen=True)
class ResolvedContext:
    """Resolved franchise context for an authenticated request.

    `scope` is bound to `franchise_id`; every tenant-owned read or write the
    request performs goes through it.
    """

    identity_id: UUID
    franchise_id: UUID
    role: FranchiseRole
    scope: FranchiseScope = field(repr=False, compare=False)
    email: str | None = None
