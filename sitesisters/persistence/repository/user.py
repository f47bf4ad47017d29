"""PostgreSQL implementation of User repository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sitesisters.domain.error import StoreError
from sitesisters.domain.model import User
from sitesisters.domain.repository import UserRepository
from sitesisters.domain.value import UserId
from sitesisters.persistence.mappers import row_to_user, user_to_dict
from sitesisters.persistence.tables import users_table


class PostgresUserRepository(UserRepository):
    """PostgreSQL implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: User ID to look up

        Returns:
            User if found, None otherwise

        Raises:
            StoreError: If the database fails
        """
        stmt = select(users_table).where(users_table.c.id == user_id)
        try:
            # Savepoint keeps the request transaction usable if this lookup fails
            async with self.session.begin_nested():
                result = await self.session.execute(stmt)
                row = result.mappings().first()
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            raise StoreError(f"User lookup failed: {e}") from e
        return row_to_user(dict(row)) if row else None

    async def save(self, user: User) -> User:
        """Save a user (create or update).

        Args:
            user: User to save

        Returns:
            Saved user
        """
        user_dict = user_to_dict(user)
        stmt = (
            pg_insert(users_table)
            .values(**user_dict)
            .on_conflict_do_update(
                index_elements=["id"],
                set_={
                    "display_name": user_dict["display_name"],
                    "email": user_dict["email"],
                },
            )
        )
        try:
            await self.session.execute(stmt)
            await self.session.flush()
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            raise StoreError(f"User save failed: {e}") from e
        return user
