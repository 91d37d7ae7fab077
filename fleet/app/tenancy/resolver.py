"""Franchise context resolution and tenant-owned entity validation."""

import logging
import time
import uuid
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from fleet.app.db.context import ResolvedContext
from fleet.app.db.models import FranchiseOwned, Vehicle
from fleet.app.db.repositories import IdentityDirectory, SessionAuthenticator
from fleet.app.errors import BackendUnavailableError, ContextError, ContextErrorKind
from fleet.app.tenancy.roles import normalize_role
from fleet.app.tenancy.scope import FranchiseScope
from fleet.app.utils.logging import StructuredTenancyLogger
from fleet.app.utils.metrics import PrometheusTenancyMetrics

logger = logging.getLogger(__name__)

ScopeFactory = Callable[[uuid.UUID], FranchiseScope]


class FranchiseContextResolver:
    """Binds an inbound session to one franchise membership.

    Steps:
    1. Authenticate the session token (Unauthenticated on failure; the
       directory is not consulted).
    2. Load the identity's profile (ProfileNotFound).
    3. Load active memberships, earliest first (NoActiveMembership).
    4. Build a ResolvedContext with a scope bound to the chosen franchise.

    Failures are returned as ContextError values, never raised.
    """

    def __init__(
        self,
        authenticator: SessionAuthenticator,
        directory: IdentityDirectory,
        scope_factory: ScopeFactory,
        structured_logger: StructuredTenancyLogger | None = None,
        metrics: PrometheusTenancyMetrics | None = None,
    ) -> None:
        self._authenticator = authenticator
        self._directory = directory
        self._scope_factory = scope_factory
        self._logger = structured_logger or StructuredTenancyLogger()
        self._metrics = metrics or PrometheusTenancyMetrics()

    @classmethod
    def for_session(
        cls,
        session: AsyncSession,
        authenticator: SessionAuthenticator,
        directory: IdentityDirectory,
    ) -> "FranchiseContextResolver":
        """Build a resolver whose scopes share `session`."""
        return cls(
            authenticator=authenticator,
            directory=directory,
            scope_factory=lambda franchise_id: FranchiseScope(session, franchise_id),
        )

    async def resolve(self, token: str | None) -> ResolvedContext | ContextError:
        """Resolve a session token to a franchise context."""
        started = time.perf_counter()
        identity_id: uuid.UUID | None = None

        try:
            identity_id = await self._authenticate(token)
            if identity_id is None:
                return self._fail(ContextErrorKind.unauthenticated, started)

            profile = await self._directory.get_profile(identity_id)
            if profile is None:
                return self._fail(ContextErrorKind.profile_not_found, started, identity_id)

            memberships = await self._directory.list_active_memberships(identity_id)
            if not memberships:
                return self._fail(ContextErrorKind.no_active_membership, started, identity_id)
        except BackendUnavailableError as e:
            error = e.to_context_error()
            self._record(error.kind.value, started, identity_id, error_detail=e.detail)
            return error

        acting = memberships[0]
        if len(memberships) > 1:
            logger.info(
                f"Identity {identity_id} has {len(memberships)} active memberships; "
                f"acting as franchise {acting.franchise_id}"
            )

        role = normalize_role(acting.role)
        context = ResolvedContext(
            identity_id=identity_id,
            franchise_id=acting.franchise_id,
            role=role,
            scope=self._scope_factory(acting.franchise_id),
            email=profile.email,
        )
        self._record("resolved", started, identity_id, acting.franchise_id, role.value)
        return context

    async def _authenticate(self, token: str | None) -> uuid.UUID | None:
        token = (token or "").strip()
        if not token:
            return None
        return await self._authenticator.get_session_identity(token)

    def _fail(
        self,
        kind: ContextErrorKind,
        started: float,
        identity_id: uuid.UUID | None = None,
    ) -> ContextError:
        self._record(kind.value, started, identity_id)
        return ContextError(kind=kind)

    def _record(
        self,
        outcome: str,
        started: float,
        identity_id: uuid.UUID | None = None,
        franchise_id: uuid.UUID | None = None,
        role: str | None = None,
        error_detail: str | None = None,
    ) -> None:
        latency_ms = (time.perf_counter() - started) * 1000
        self._metrics.record_resolution(outcome, latency_ms)
        self._logger.log_resolution(
            outcome,
            latency_ms,
            identity_id=identity_id,
            franchise_id=franchise_id,
            role=role,
            error_detail=error_detail,
        )


def _parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


async def validate_entity_in_franchise(
    scope: FranchiseScope,
    franchise_id: uuid.UUID,
    entity_id: str,
    model: type[FranchiseOwned] = Vehicle,
) -> FranchiseOwned | None:
    """Look up a tenant-owned entity by its external identifier.

    UUID-shaped identifiers match the primary key. Anything else is matched
    against the model's natural key (upper-cased), when it has one.

    Returns:
        The entity, or None when it is missing or owned by another
        franchise. Callers cannot tell these two cases apart.

    Raises:
        BackendUnavailableError: If the store cannot be queried
    """
    identifier = (entity_id or "").strip()
    if not identifier or franchise_id != scope.franchise_id:
        return None

    parsed = _parse_uuid(identifier)
    if parsed is not None:
        predicate = model.id == parsed  # type: ignore[attr-defined]
    else:
        natural_key = getattr(model, "natural_key", None)
        if natural_key is None:
            return None
        predicate = getattr(model, natural_key) == identifier.upper()

    return await scope.first(model, predicate)
