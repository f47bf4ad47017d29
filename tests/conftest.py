"""Test configuration and fixtures."""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from sitesisters.domain.model import Invite
from sitesisters.domain.value import InviteCode, InviteId, UserId


def make_invite(
    code: str = "ABC123",
    inviter_user_id: UserId | None = None,
    uses: int = 0,
    max_uses: int | None = None,
    expires_in: timedelta | None = None,
) -> Invite:
    """Helper function to build invites for tests.

    Args:
        code: Invite code
        inviter_user_id: Inviting member, None for a system-issued invite
        uses: Uses already taken
        max_uses: Usage cap, None for unlimited
        expires_in: Offset from now for the expiry (negative for already
            expired), None for no expiry

    Returns:
        Invite entity, not yet stored
    """
    now = datetime.now(timezone.utc)
    return Invite(
        id=InviteId(uuid4()),
        code=InviteCode(code),
        inviter_user_id=inviter_user_id,
        uses=uses,
        max_uses=max_uses,
        expires_at=now + expires_in if expires_in is not None else None,
        created_at=now,
    )


def new_user_id() -> UserId:
    return UserId(uuid4())


class _ScriptedResult:
    """Stand-in for a SQLAlchemy result holding at most one row."""

    def __init__(self, row: dict | None = None, scalar: object = None) -> None:
        self._row = row
        self._scalar = scalar

    def mappings(self) -> "_ScriptedResult":
        return self

    def first(self) -> dict | None:
        return self._row

    def scalar_one_or_none(self) -> object:
        return self._scalar


class CommitFailingSession:
    """Async session that answers a successful consume, then cannot commit.

    Replays the statements PostgresInviteRepository.consume issues for a
    fresh consumption of `invite`, and raises OperationalError on commit as
    a dropped connection would.
    """

    def __init__(self, invite: Invite) -> None:
        row = invite.model_dump()
        self._results = [
            _ScriptedResult(row=row),  # SELECT ... FOR UPDATE
            _ScriptedResult(row=None),  # no prior usage
            _ScriptedResult(scalar=invite.id),  # usage inserted
            _ScriptedResult(),  # uses + 1
        ]
        self.events: list[str] = []

    async def execute(self, statement) -> _ScriptedResult:
        return self._results.pop(0)

    @asynccontextmanager
    async def begin_nested(self) -> AsyncIterator[None]:
        yield
        self.events.append("savepoint released")

    async def commit(self) -> None:
        self.events.append("commit attempted")
        raise OperationalError("COMMIT", {}, ConnectionResetError("connection lost"))

    async def rollback(self) -> None:
        self.events.append("rolled back")
