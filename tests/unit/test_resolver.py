"""Unit tests for FranchiseContextResolver using in-memory repositories."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from prometheus_client import REGISTRY

from fleet.app.db.context import ResolvedContext
from fleet.app.db.inmemory import InMemoryIdentityDirectory, InMemorySessionAuthenticator
from fleet.app.db.repositories import MembershipRecord, ProfileRecord
from fleet.app.errors import BackendUnavailableError, ContextError, ContextErrorKind
from fleet.app.tenancy.resolver import FranchiseContextResolver
from fleet.app.tenancy.roles import FranchiseRole
from fleet.app.tenancy.scope import FranchiseScope


def _resolver(
    authenticator: InMemorySessionAuthenticator,
    directory: InMemoryIdentityDirectory,
) -> FranchiseContextResolver:
    session = MagicMock()
    return FranchiseContextResolver(
        authenticator=authenticator,
        directory=directory,
        scope_factory=lambda franchise_id: FranchiseScope(session, franchise_id),
    )


def _resolutions(outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "fleet_context_resolutions_total", {"outcome": outcome}
    )
    return value or 0.0


class _FailingDirectory:
    """Directory whose store is unreachable."""

    async def get_profile(self, user_id: uuid.UUID) -> ProfileRecord | None:
        raise BackendUnavailableError("could not connect to server")

    async def list_active_memberships(self, user_id: uuid.UUID) -> list[MembershipRecord]:
        raise BackendUnavailableError("could not connect to server")


@pytest.fixture
def authenticator() -> InMemorySessionAuthenticator:
    return InMemorySessionAuthenticator()


@pytest.fixture
def directory() -> InMemoryIdentityDirectory:
    return InMemoryIdentityDirectory()


class TestUnauthenticated:
    """Missing, unknown and expired sessions."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "   "])
    async def test_blank_token_never_reaches_directory(
        self,
        token: str | None,
        authenticator: InMemorySessionAuthenticator,
        directory: InMemoryIdentityDirectory,
    ) -> None:
        """Test that a missing token fails before any profile lookup."""
        result = await _resolver(authenticator, directory).resolve(token)

        assert isinstance(result, ContextError)
        assert result.kind is ContextErrorKind.unauthenticated
        assert directory.calls == 0

    @pytest.mark.asyncio
    async def test_unknown_token(
        self,
        authenticator: InMemorySessionAuthenticator,
        directory: InMemoryIdentityDirectory,
    ) -> None:
        """Test that an unknown token is unauthenticated."""
        result = await _resolver(authenticator, directory).resolve("no-such-token")

        assert result == ContextError(kind=ContextErrorKind.unauthenticated)
        assert directory.calls == 0

    @pytest.mark.asyncio
    async def test_expired_token(
        self,
        authenticator: InMemorySessionAuthenticator,
        directory: InMemoryIdentityDirectory,
    ) -> None:
        """Test that an expired session is unauthenticated."""
        user_id = uuid.uuid4()
        directory.add_profile(user_id, "late@example.com")
        directory.add_membership(user_id, uuid.uuid4(), "manager")
        authenticator.issue(user_id, "stale", ttl=timedelta(seconds=-1))

        result = await _resolver(authenticator, directory).resolve("stale")

        assert isinstance(result, ContextError)
        assert result.kind is ContextErrorKind.unauthenticated
        assert directory.calls == 0


class TestDirectoryFailures:
    """Authenticated identities that cannot be bound to a franchise."""

    @pytest.mark.asyncio
    async def test_profile_not_found(
        self,
        authenticator: InMemorySessionAuthenticator,
        directory: InMemoryIdentityDirectory,
    ) -> None:
        """Test an identity without a profile row."""
        authenticator.issue(uuid.uuid4(), "orphan")

        result = await _resolver(authenticator, directory).resolve("orphan")

        assert isinstance(result, ContextError)
        assert result.kind is ContextErrorKind.profile_not_found
        assert result.status_code == 404

    @pytest.mark.asyncio
    async def test_no_active_membership(
        self,
        authenticator: InMemorySessionAuthenticator,
        directory: InMemoryIdentityDirectory,
    ) -> None:
        """Test that inactive memberships do not count."""
        user_id = uuid.uuid4()
        directory.add_profile(user_id, "former@example.com")
        directory.add_membership(user_id, uuid.uuid4(), "manager", is_active=False)
        authenticator.issue(user_id, "former")

        result = await _resolver(authenticator, directory).resolve("former")

        assert isinstance(result, ContextError)
        assert result.kind is ContextErrorKind.no_active_membership
        assert result.status_code == 403

    @pytest.mark.asyncio
    async def test_backend_unavailable(
        self, authenticator: InMemorySessionAuthenticator
    ) -> None:
        """Test a store failure becomes a backend_unavailable error value."""
        authenticator.issue(uuid.uuid4(), "token")
        resolver = FranchiseContextResolver(
            authenticator=authenticator,
            directory=_FailingDirectory(),
            scope_factory=lambda franchise_id: FranchiseScope(MagicMock(), franchise_id),
        )

        result = await resolver.resolve("token")

        assert isinstance(result, ContextError)
        assert result.kind is ContextErrorKind.backend_unavailable
        assert result.detail == "could not connect to server"
        assert result.message == "Backend unavailable"


class TestResolved:
    """Successful resolution."""

    @pytest.mark.asyncio
    async def test_resolves_single_membership(
        self,
        authenticator: InMemorySessionAuthenticator,
        directory: InMemoryIdentityDirectory,
    ) -> None:
        """Test the context carries identity, franchise, role and a bound scope."""
        user_id = uuid.uuid4()
        franchise_id = uuid.uuid4()
        directory.add_profile(user_id, "manager@example.com")
        directory.add_membership(user_id, franchise_id, "manager")
        authenticator.issue(user_id, "good")

        result = await _resolver(authenticator, directory).resolve("good")

        assert isinstance(result, ResolvedContext)
        assert result.identity_id == user_id
        assert result.franchise_id == franchise_id
        assert result.role is FranchiseRole.manager
        assert result.email == "manager@example.com"
        assert result.scope.franchise_id == franchise_id

    @pytest.mark.asyncio
    async def test_earliest_membership_wins(
        self,
        authenticator: InMemorySessionAuthenticator,
        directory: InMemoryIdentityDirectory,
    ) -> None:
        """Test that multiple memberships resolve to the oldest, every time."""
        user_id = uuid.uuid4()
        older = uuid.uuid4()
        newer = uuid.uuid4()
        now = datetime.now(timezone.utc)
        directory.add_profile(user_id, "multi@example.com")
        # Insert newest first so insertion order cannot explain the result
        directory.add_membership(user_id, newer, "manager", created_at=now)
        directory.add_membership(user_id, older, "driver", created_at=now - timedelta(days=30))
        authenticator.issue(user_id, "multi")
        resolver = _resolver(authenticator, directory)

        results = [await resolver.resolve("multi") for _ in range(3)]

        assert all(isinstance(r, ResolvedContext) for r in results)
        assert {r.franchise_id for r in results} == {older}
        assert results[0].role is FranchiseRole.driver

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("stored_role", "expected"),
        [
            ("super_admin", FranchiseRole.owner),
            (None, FranchiseRole.driver),
            ("mechanic", FranchiseRole.driver),
        ],
    )
    async def test_role_is_normalized(
        self,
        stored_role: str | None,
        expected: FranchiseRole,
        authenticator: InMemorySessionAuthenticator,
        directory: InMemoryIdentityDirectory,
    ) -> None:
        """Test stored role strings are mapped onto the closed role set."""
        user_id = uuid.uuid4()
        directory.add_profile(user_id, "role@example.com")
        directory.add_membership(user_id, uuid.uuid4(), stored_role)
        authenticator.issue(user_id, "role")

        result = await _resolver(authenticator, directory).resolve("role")

        assert isinstance(result, ResolvedContext)
        assert result.role is expected


class TestObservability:
    """Resolution outcomes are logged and counted."""

    @pytest.mark.asyncio
    async def test_outcome_counter_increments(
        self,
        authenticator: InMemorySessionAuthenticator,
        directory: InMemoryIdentityDirectory,
    ) -> None:
        """Test each resolution increments its outcome counter."""
        before = _resolutions("unauthenticated")

        await _resolver(authenticator, directory).resolve(None)

        assert _resolutions("unauthenticated") == before + 1

    @pytest.mark.asyncio
    async def test_structured_log_record(
        self,
        authenticator: InMemorySessionAuthenticator,
        directory: InMemoryIdentityDirectory,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test a successful resolution emits a structured log record."""
        user_id = uuid.uuid4()
        franchise_id = uuid.uuid4()
        directory.add_profile(user_id, "log@example.com")
        directory.add_membership(user_id, franchise_id, "owner")
        authenticator.issue(user_id, "log")

        with caplog.at_level(logging.INFO, logger="fleet.app.utils.logging"):
            await _resolver(authenticator, directory).resolve("log")

        records = [r for r in caplog.records if hasattr(r, "structured")]
        assert records
        structured = records[-1].structured
        assert structured["outcome"] == "resolved"
        assert structured["franchise_id"] == str(franchise_id)
        assert structured["role"] == "owner"
