"""SQLite-backed store for actions, built on SQLModel sessions."""

import logging
from typing import Optional

from sqlalchemy import event, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, col, create_engine, select

from action_tracker.config import database_url
from action_tracker.models import (
    Action,
    ActionCreate,
    ActionFilter,
    ActionPatch,
    ActionPriority,
    ActionRead,
    ActionStatus,
)

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the underlying database fails."""


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class ActionStore:
    """Durable storage and retrieval of actions.

    The store owns its engine. Call ``initialize()`` once during bootstrap;
    calling it again is harmless.
    """

    def __init__(self, url: Optional[str] = None, echo: bool = False):
        self.url = url or database_url()
        if self.url in ("sqlite://", "sqlite:///:memory:"):
            # Every session must see the same in-memory database.
            self.engine = create_engine(
                self.url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                self.url, echo=echo, connect_args={"check_same_thread": False}
            )
        event.listen(self.engine, "connect", _set_sqlite_pragmas)

    def initialize(self) -> None:
        """Create the actions table and its indexes if they do not exist."""
        try:
            SQLModel.metadata.create_all(self.engine, tables=[Action.__table__])
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to initialize database at {self.url}") from e
        logger.info("Action store ready at %s", self.url)

    def close(self) -> None:
        self.engine.dispose()

    def list(self, filters: Optional[ActionFilter] = None) -> list[ActionRead]:
        """List actions, most recent first, narrowed by the given filters.

        ``search`` is a case-insensitive substring match against the title or
        the description; ``%`` and ``_`` in it match literally.
        """
        filters = filters or ActionFilter()
        statement = select(Action)
        if filters.status:
            statement = statement.where(Action.status == filters.status)
        if filters.origin:
            statement = statement.where(Action.origin == filters.origin)
        if filters.search:
            statement = statement.where(
                or_(
                    col(Action.title).icontains(filters.search, autoescape=True),
                    col(Action.description).icontains(filters.search, autoescape=True),
                )
            )
        statement = statement.order_by(col(Action.created_at).desc(), col(Action.id).desc())
        try:
            with Session(self.engine) as session:
                return [ActionRead.model_validate(row) for row in session.exec(statement).all()]
        except SQLAlchemyError as e:
            raise StoreError("Failed to list actions") from e

    def get(self, action_id: int) -> Optional[ActionRead]:
        try:
            with Session(self.engine) as session:
                action = session.get(Action, action_id)
                return ActionRead.model_validate(action) if action is not None else None
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read action {action_id}") from e

    def create(self, fields: ActionCreate) -> ActionRead:
        """Persist a new action, filling defaults for empty optional fields."""
        action = Action(
            title=fields.title,
            description=fields.description or "",
            origin=fields.origin,
            status=fields.status or ActionStatus.todo.value,
            priority=fields.priority or ActionPriority.medium.value,
            due_date=fields.due_date or None,
        )
        try:
            with Session(self.engine) as session:
                session.add(action)
                session.commit()
                session.refresh(action)
                created = ActionRead.model_validate(action)
        except SQLAlchemyError as e:
            raise StoreError("Failed to create action") from e
        logger.info("Created action #%s (origin=%s)", created.id, created.origin)
        return created

    def update(self, action_id: int, patch: ActionPatch) -> Optional[ActionRead]:
        """Apply the fields set on ``patch`` and return the updated action.

        Returns None when no action has ``action_id``. An empty patch returns
        the current action without writing.
        """
        changes = patch.changes()
        try:
            with Session(self.engine) as session:
                action = session.get(Action, action_id)
                if action is None:
                    return None
                if not changes:
                    return ActionRead.model_validate(action)
                for key, value in changes.items():
                    setattr(action, key, value)
                session.add(action)
                session.commit()
                session.refresh(action)
                updated = ActionRead.model_validate(action)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update action {action_id}") from e
        logger.info("Updated action #%s: %s", action_id, sorted(changes))
        return updated

    def delete(self, action_id: int) -> bool:
        """Hard-delete an action. Returns False when it did not exist."""
        try:
            with Session(self.engine) as session:
                action = session.get(Action, action_id)
                if action is None:
                    return False
                session.delete(action)
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete action {action_id}") from e
        logger.info("Deleted action #%s", action_id)
        return True
