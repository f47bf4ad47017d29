"""Domain value objects for SiteSisters.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from enum import Enum

from pydantic import field_validator

from sitesisters.domain.value.common import RootValueObject


class DeclineReason(str, Enum):
    """Why an invite code was declined.

    Declines are user-facing and not retryable without a new code.
    """

    NO_CODE = "no_code"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MAX_USES_REACHED = "max_uses_reached"
    SELF_REFERRAL = "self_referral"
    INVALID = "invalid"

    @property
    def message(self) -> str:
        """Human-readable message shown to the invitee."""
        return _DECLINE_MESSAGES[self]


_DECLINE_MESSAGES = {
    DeclineReason.NO_CODE: "No invite code provided.",
    DeclineReason.NOT_FOUND: "Invalid invite code.",
    DeclineReason.EXPIRED: "This invite has expired.",
    DeclineReason.MAX_USES_REACHED: "This invite has reached its maximum uses.",
    DeclineReason.SELF_REFERRAL: "You cannot use your own invite code.",
    DeclineReason.INVALID: "Invalid invite code.",
}


class ConsumeOutcome(str, Enum):
    """Result of the store's atomic consume primitive."""

    CONSUMED = "consumed"
    ALREADY_CONSUMED = "already_consumed"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MAX_USES_REACHED = "max_uses_reached"
    SELF_REFERRAL = "self_referral"

    @property
    def succeeded(self) -> bool:
        """True when usage is recorded for the user (new or already theirs)."""
        return self in (ConsumeOutcome.CONSUMED, ConsumeOutcome.ALREADY_CONSUMED)

    @property
    def decline_reason(self) -> DeclineReason | None:
        """Decline reason for a failed outcome, None on success."""
        if self.succeeded:
            return None
        return DeclineReason(self.value)


class PendingInviteState(str, Enum):
    """State of the pending-code carrier."""

    ABSENT = "absent"
    PENDING = "pending"
    CLEARED = "cleared"


class InviteCode(RootValueObject[str]):
    """Shareable invite code.

    Case-sensitive. Surrounding whitespace is never part of the code.
    """

    @field_validator("root", mode="before")
    @classmethod
    def strip_whitespace(cls, v: object) -> object:
        """Trim surrounding whitespace before validation."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("root")
    @classmethod
    def validate_code_format(cls, v: str) -> str:
        """Validate code is not empty and within length limits."""
        if len(v) < 1 or len(v) > 255:
            raise ValueError("Invite code must be 1-255 characters")
        return v

    @classmethod
    def parse(cls, raw: object) -> "InviteCode | None":
        """Build a code from untrusted input.

        Returns:
            The trimmed code, or None for non-string, empty or
            whitespace-only input

        Raises:
            ValueError: If the trimmed code is longer than any stored code
        """
        if not isinstance(raw, str) or not raw.strip():
            return None
        return cls(raw)

    @property
    def prefix(self) -> str:
        """Short prefix safe to put in logs."""
        return self.redact(self.root)

    @staticmethod
    def redact(value: str, length: int = 4) -> str:
        """Redact a raw code to its first few characters."""
        return value[:length] + "..."
