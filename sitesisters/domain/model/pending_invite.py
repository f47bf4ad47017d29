"""Pending invite carrier.

Threads a validated invite code from the invite link click to the consume
call made after signup. The carrier lives on the client (a cookie) and is
not authoritative: losing it only means the user has to open the link again.

States:
    ABSENT -> PENDING(code) -> CLEARED

An expired PENDING carrier reads as ABSENT.
"""

from datetime import datetime, timedelta
from typing import Optional

from pydantic import model_validator

from sitesisters.domain.model.common import DomainModel
from sitesisters.domain.value import InviteCode, PendingInviteState

DEFAULT_LIFETIME = timedelta(days=7)


class PendingInvite(DomainModel):
    """Time-bounded pending invite code."""

    state: PendingInviteState = PendingInviteState.ABSENT
    code: Optional[InviteCode] = None
    expires_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_code_matches_state(self) -> "PendingInvite":
        """Only PENDING carries a code."""
        if self.state == PendingInviteState.PENDING:
            if self.code is None or self.expires_at is None:
                raise ValueError("Pending carrier needs a code and an expiry")
        elif self.code is not None:
            raise ValueError(f"{self.state.value} carrier cannot hold a code")
        return self

    @classmethod
    def absent(cls) -> "PendingInvite":
        return cls()

    @classmethod
    def restore(
        cls, raw_code: object, expires_at: Optional[datetime]
    ) -> "PendingInvite":
        """Rebuild a carrier from the values the client sent back.

        The expiry recorded when the code was first carried travels with
        it, so the lifetime is not renewed by sending the code again. A
        code without a readable expiry is treated as no carrier at all.

        Raises:
            ValueError: If the code is longer than any issued code
        """
        code = InviteCode.parse(raw_code)
        if code is None or expires_at is None:
            return cls.absent()
        return cls(state=PendingInviteState.PENDING, code=code, expires_at=expires_at)

    def record(
        self, code: InviteCode, now: datetime, lifetime: timedelta = DEFAULT_LIFETIME
    ) -> "PendingInvite":
        """Carry a freshly validated code.

        Callers must only record codes that just passed validation. A newer
        invite link replaces whatever was pending before.
        """
        return PendingInvite(
            state=PendingInviteState.PENDING, code=code, expires_at=now + lifetime
        )

    def clear(self) -> "PendingInvite":
        """Drop the code after it was submitted for consumption.

        Only a carried code can be cleared; ABSENT stays ABSENT.
        """
        if self.state == PendingInviteState.ABSENT:
            return self
        return PendingInvite(state=PendingInviteState.CLEARED)

    def effective_state(self, now: datetime) -> PendingInviteState:
        """State as observed at the given time."""
        if (
            self.state == PendingInviteState.PENDING
            and self.expires_at is not None
            and self.expires_at <= now
        ):
            return PendingInviteState.ABSENT
        return self.state

    def pending_code(self, now: datetime) -> Optional[InviteCode]:
        """The carried code, if still pending at the given time."""
        if self.effective_state(now) == PendingInviteState.PENDING:
            return self.code
        return None
