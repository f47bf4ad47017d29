"""Base model for domain entities and snapshots."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Base class for domain models.

    Entities are immutable; a changed invite is a new copy
    (`model_copy(update=...)`) produced by the store.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,  # Allow value objects like InviteCode
    )
