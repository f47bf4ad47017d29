"""User entity.

Accounts and profiles are managed by the account pages; the invite
lifecycle only reads users to show who sent an invite.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from sitesisters.domain.model.common import DomainModel
from sitesisters.domain.value import UserId


class User(DomainModel):
    """Platform member."""

    id: UserId
    display_name: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
