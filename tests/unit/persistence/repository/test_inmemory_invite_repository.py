"""Tests for the in-memory invite repository."""

from datetime import datetime, timedelta, timezone

import pytest

from sitesisters.domain.value import ConsumeOutcome, InviteCode
from sitesisters.persistence.repository.inmemory import InMemoryInviteRepository
from tests.conftest import make_invite, new_user_id

NOW = datetime.now(timezone.utc)


class TestInMemoryInviteRepository:
    """Tests for InMemoryInviteRepository."""

    @pytest.mark.asyncio
    async def test_add_rejects_duplicate_code(self):
        repo = InMemoryInviteRepository()
        await repo.add(make_invite("ABC123"))

        with pytest.raises(ValueError):
            await repo.add(make_invite("ABC123"))

    @pytest.mark.asyncio
    async def test_get_status_for_unknown_code(self):
        repo = InMemoryInviteRepository()

        assert await repo.get_status(InviteCode("NOPE"), NOW) is None

    @pytest.mark.asyncio
    async def test_get_status_reflects_validity(self):
        repo = InMemoryInviteRepository()
        await repo.add(make_invite("FULL", uses=1, max_uses=1))

        status = await repo.get_status(InviteCode("FULL"), NOW)

        assert status is not None
        assert status.is_valid is False
        assert status.uses == 1

    @pytest.mark.asyncio
    async def test_checks_run_in_order(self):
        """Prior usage is checked before self-referral and validity."""
        repo = InMemoryInviteRepository()
        inviter = new_user_id()
        user = new_user_id()
        await repo.add(make_invite("ABC123", inviter_user_id=inviter, max_uses=1))

        assert await repo.consume(InviteCode("ABC123"), user, NOW) == (
            ConsumeOutcome.CONSUMED
        )
        assert await repo.consume(InviteCode("ABC123"), user, NOW) == (
            ConsumeOutcome.ALREADY_CONSUMED
        )
        assert await repo.consume(InviteCode("ABC123"), inviter, NOW) == (
            ConsumeOutcome.SELF_REFERRAL
        )
        assert await repo.consume(InviteCode("ABC123"), new_user_id(), NOW) == (
            ConsumeOutcome.MAX_USES_REACHED
        )

    @pytest.mark.asyncio
    async def test_consume_evaluates_expiry_at_given_time(self):
        repo = InMemoryInviteRepository()
        invite = await repo.add(make_invite("SOON", expires_in=timedelta(hours=1)))

        outcome = await repo.consume(
            InviteCode("SOON"), new_user_id(), NOW + timedelta(hours=2)
        )

        assert outcome == ConsumeOutcome.EXPIRED
        assert await repo.count_usages(invite.id) == 0

    @pytest.mark.asyncio
    async def test_consume_records_usage_time(self):
        repo = InMemoryInviteRepository()
        invite = await repo.add(make_invite("ABC123"))
        user = new_user_id()

        await repo.consume(InviteCode("ABC123"), user, NOW)

        usage = await repo.find_usage(invite.id, user)
        assert usage is not None
        assert usage.consumed_at == NOW
