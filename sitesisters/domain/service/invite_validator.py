"""Invite validation domain service."""

from collections.abc import Callable
from datetime import datetime

import logfire

from sitesisters.domain.error import StoreError, ValidationError
from sitesisters.domain.model.invite import InviteStatus, utcnow
from sitesisters.domain.repository import InviteRepository
from sitesisters.domain.value import DeclineReason, InviteCode
from sitesisters.domain.value.common import ValueObject

from .base import Service


class ValidationResult(ValueObject):
    """Verdict for an invite code.

    `reason` is set exactly when `valid` is False.
    """

    valid: bool
    reason: DeclineReason | None = None
    invite: InviteStatus | None = None

    @classmethod
    def declined(
        cls, reason: DeclineReason, invite: InviteStatus | None = None
    ) -> "ValidationResult":
        return cls(valid=False, reason=reason, invite=invite)


class InviteValidator(Service):
    """Turns invite snapshots into a verdict with a precise reason.

    Read-only: validating never changes an invite, so it can be called any
    number of times. The verdict may be stale by the time it is used.
    """

    def __init__(
        self,
        invite_repository: InviteRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize invite validator.

        Args:
            invite_repository: Invite repository
            clock: Source of the current time
        """
        self.invite_repository = invite_repository
        self.clock = clock

    @staticmethod
    def evaluate(status: InviteStatus | None, now: datetime) -> ValidationResult:
        """Decide validity for a snapshot.

        Expiry wins over exhaustion: an invite that is both expired and
        used up is reported as expired.

        Args:
            status: Snapshot from the store, None if the code does not exist
            now: Current time

        Returns:
            Validation verdict
        """
        if status is None:
            return ValidationResult.declined(DeclineReason.NOT_FOUND)

        if status.is_valid:
            return ValidationResult(valid=True, invite=status)

        if status.expires_at is not None and status.expires_at < now:
            reason = DeclineReason.EXPIRED
        elif status.max_uses is not None and status.uses >= status.max_uses:
            reason = DeclineReason.MAX_USES_REACHED
        else:
            reason = DeclineReason.INVALID
        return ValidationResult.declined(reason, invite=status)

    async def validate(self, raw_code: object) -> ValidationResult:
        """Validate an invite code.

        Args:
            raw_code: Untrusted code, trimmed before lookup

        Returns:
            Validation verdict

        Raises:
            ValidationError: If the store could not be consulted
        """
        try:
            code = InviteCode.parse(raw_code)
        except ValueError:
            # Too long to ever have been issued
            logfire.info("Invite validation with malformed code")
            return ValidationResult.declined(DeclineReason.NOT_FOUND)
        if code is None:
            logfire.info("Invite validation without code")
            return ValidationResult.declined(DeclineReason.NO_CODE)

        with logfire.span("invite_validator.validate", code=code.prefix):
            now = self.clock()
            try:
                status = await self.invite_repository.get_status(code, now)
            except StoreError as e:
                logfire.error(
                    "Invite lookup failed",
                    code=code.prefix,
                    error=str(e),
                )
                raise ValidationError(code.prefix) from e

            result = self.evaluate(status, now)
            if result.valid:
                logfire.info("Invite valid", code=code.prefix)
            else:
                logfire.info(
                    "Invite declined",
                    code=code.prefix,
                    reason=result.reason.value if result.reason else None,
                )
            return result
