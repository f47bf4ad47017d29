"""PostgreSQL implementation of Invite repository."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from sqlalchemy import and_, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sitesisters.domain.error import StoreError
from sitesisters.domain.model import Invite, InviteStatus, InviteUsage
from sitesisters.domain.repository import InviteRepository
from sitesisters.domain.value import ConsumeOutcome, InviteCode, InviteId, UserId
from sitesisters.persistence.mappers import (
    invite_to_dict,
    row_to_invite,
    row_to_invite_usage,
)
from sitesisters.persistence.tables import invite_usages_table, invites_table


@asynccontextmanager
async def _store_errors(operation: str) -> AsyncIterator[None]:
    """Translate driver and connection failures into StoreError."""
    try:
        yield
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        raise StoreError(f"Invite store failed during {operation}: {e}") from e


class PostgresInviteRepository(InviteRepository):
    """PostgreSQL implementation of InviteRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def add(self, invite: Invite) -> Invite:
        """Insert a new invite.

        Args:
            invite: Invite to insert

        Returns:
            Stored invite

        Raises:
            ValueError: If the id or code is already taken
            StoreError: If the database fails
        """
        async with _store_errors("add"):
            try:
                async with self.session.begin_nested():
                    await self.session.execute(
                        invites_table.insert().values(**invite_to_dict(invite))
                    )
            except IntegrityError as e:
                raise ValueError(f"Invite already exists: {invite.code.prefix}") from e
        return invite

    async def find_by_code(self, code: InviteCode) -> Optional[Invite]:
        """Find an invite by its exact code.

        Args:
            code: Invite code to look up

        Returns:
            Invite if found, None otherwise
        """
        stmt = select(invites_table).where(invites_table.c.code == code.root)
        async with _store_errors("find_by_code"):
            result = await self.session.execute(stmt)
            row = result.mappings().first()
        return row_to_invite(dict(row)) if row else None

    async def get_status(
        self, code: InviteCode, now: datetime
    ) -> Optional[InviteStatus]:
        """Look up a validity snapshot for a code.

        Args:
            code: Invite code to look up
            now: Time the validity predicate is evaluated at

        Returns:
            Snapshot if the code exists, None otherwise
        """
        invite = await self.find_by_code(code)
        return invite.status_at(now) if invite else None

    async def consume(
        self, code: InviteCode, user_id: UserId, now: datetime
    ) -> ConsumeOutcome:
        """Atomically record that a user used a code.

        Locks the invite row for the rest of the transaction, so concurrent
        consumers of the same invite queue up behind each other and each
        sees the uses count the previous one left. The transaction is
        committed before returning: an outcome is only reported once it is
        durable, and the row lock is released right away. A failed commit
        is rolled back and raised, leaving neither the usage nor the
        increment behind.

        Args:
            code: Invite code
            user_id: Consuming user
            now: Time the validity predicate is evaluated at

        Returns:
            Outcome of the attempt

        Raises:
            StoreError: If the database fails or times out
        """
        async with _store_errors("consume"):
            try:
                async with self.session.begin_nested():
                    outcome = await self._consume_locked(code, user_id, now)
                await self.session.commit()
            except (SQLAlchemyError, OSError, TimeoutError):
                await self.session.rollback()
                raise
        return outcome

    async def _consume_locked(
        self, code: InviteCode, user_id: UserId, now: datetime
    ) -> ConsumeOutcome:
        stmt = (
            select(invites_table)
            .where(invites_table.c.code == code.root)
            .with_for_update()
        )
        row = (await self.session.execute(stmt)).mappings().first()
        if row is None:
            return ConsumeOutcome.NOT_FOUND

        invite = row_to_invite(dict(row))

        existing = await self.session.execute(
            select(invite_usages_table.c.invite_id).where(
                and_(
                    invite_usages_table.c.invite_id == invite.id,
                    invite_usages_table.c.user_id == user_id,
                )
            )
        )
        if existing.first() is not None:
            return ConsumeOutcome.ALREADY_CONSUMED

        if invite.inviter_user_id == user_id:
            return ConsumeOutcome.SELF_REFERRAL
        if invite.is_expired(now):
            return ConsumeOutcome.EXPIRED
        if invite.is_exhausted():
            return ConsumeOutcome.MAX_USES_REACHED

        insert_stmt = (
            pg_insert(invite_usages_table)
            .values(invite_id=invite.id, user_id=user_id, consumed_at=now)
            .on_conflict_do_nothing(index_elements=["invite_id", "user_id"])
            .returning(invite_usages_table.c.invite_id)
        )
        inserted = (await self.session.execute(insert_stmt)).scalar_one_or_none()
        if inserted is None:
            return ConsumeOutcome.ALREADY_CONSUMED

        await self.session.execute(
            update(invites_table)
            .where(invites_table.c.id == invite.id)
            .values(uses=invites_table.c.uses + 1)
        )
        return ConsumeOutcome.CONSUMED

    async def find_usage(
        self, invite_id: InviteId, user_id: UserId
    ) -> Optional[InviteUsage]:
        """Find a user's usage record for an invite.

        Args:
            invite_id: Invite ID
            user_id: User ID

        Returns:
            Usage record if found, None otherwise
        """
        stmt = select(invite_usages_table).where(
            and_(
                invite_usages_table.c.invite_id == invite_id,
                invite_usages_table.c.user_id == user_id,
            )
        )
        async with _store_errors("find_usage"):
            result = await self.session.execute(stmt)
            row = result.mappings().first()
        return row_to_invite_usage(dict(row)) if row else None

    async def count_usages(self, invite_id: InviteId) -> int:
        """Count usage records for an invite.

        Args:
            invite_id: Invite ID

        Returns:
            Number of usage records
        """
        stmt = (
            select(func.count())
            .select_from(invite_usages_table)
            .where(invite_usages_table.c.invite_id == invite_id)
        )
        async with _store_errors("count_usages"):
            result = await self.session.execute(stmt)
            return result.scalar_one()
