"""Resolved context response model."""

from uuid import UUID

from pydantic import BaseModel

from fleet.app.tenancy.roles import FranchiseRole


class ContextResponse(BaseModel):
    """Response for GET /me/context."""

    user_id: UUID
    franchise_id: UUID
    role: FranchiseRole
    is_manager: bool
