"""
Base repository class for data access layer.

Repositories are the entity store the live-game services talk to: fetch by
id, fetch by filter, create, update, delete. Writes are last-write-wins;
nothing is committed until ``save()`` is called, so a service can validate
everything first and persist in one commit.

Example:
    class PlayerRepository(BaseRepository[Player]):
        def find_by_team(self, team_id: str) -> List[Player]:
            return self.db.query(Player).filter(Player.team_id == team_id).all()
"""
from abc import ABC
from typing import TypeVar, Generic, Type, Optional, List
from sqlalchemy import desc
from sqlalchemy.orm import Session

from hoopstats.utils.timezone import utc_now

T = TypeVar("T")


class BaseRepository(Generic[T], ABC):
    """
    Base repository class providing common data access methods.

    Attributes:
        model_type: The SQLAlchemy model class this repository manages
        db: The database session
    """

    def __init__(self, model_type: Type[T], db: Session):
        self.model_type = model_type
        self.db = db

    # ========================================================================
    # CRUD Operations
    # ========================================================================

    def find_by_id(self, id: str) -> Optional[T]:
        """Find a single record by ID."""
        return self.db.query(self.model_type).filter(self.model_type.id == id).first()

    def get_for_update(self, id: str) -> Optional[T]:
        """
        Re-read a record with a row lock for a read-modify-write.

        Populates existing identity-map instances so validation never runs
        against a stale in-memory copy.
        """
        return (
            self.db.query(self.model_type)
            .filter(self.model_type.id == id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    def find_all(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[str] = None
    ) -> List[T]:
        """
        Find all records with optional pagination.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
            order_by: Column name to order by (prefix with '-' for descending)
        """
        query = self.db.query(self.model_type)

        if order_by:
            if order_by.startswith('-'):
                query = query.order_by(desc(getattr(self.model_type, order_by[1:])))
            else:
                query = query.order_by(getattr(self.model_type, order_by))

        if offset is not None:
            query = query.offset(offset)

        if limit is not None:
            query = query.limit(limit)

        return query.all()

    def create(self, **kwargs) -> T:
        """Create a new record (not yet committed)."""
        instance = self.model_type(**kwargs)
        self.db.add(instance)
        return instance

    def update(self, id: str, **kwargs) -> Optional[T]:
        """
        Update a record by ID.

        Returns:
            The updated record, or None if not found
        """
        instance = self.find_by_id(id)
        if instance:
            for key, value in kwargs.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)
            instance.updated_at = utc_now()
        return instance

    def delete(self, id: str) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if deleted, False if not found
        """
        instance = self.find_by_id(id)
        if instance:
            self.db.delete(instance)
            return True
        return False

    # ========================================================================
    # Existence Checks
    # ========================================================================

    def exists(self, id: str) -> bool:
        """Check if a record with given ID exists."""
        return self.exists_where(self.model_type.id == id)

    def exists_where(self, *criterion) -> bool:
        """Check if any record matching the criterion exists."""
        return self.db.query(
            self.db.query(self.model_type).filter(*criterion).exists()
        ).scalar()

    # ========================================================================
    # Save Operations
    # ========================================================================

    def save(self) -> None:
        """Commit pending changes to the database."""
        self.db.commit()

    def refresh(self, instance: T) -> T:
        """Refresh an instance from the database."""
        self.db.refresh(instance)
        return instance
