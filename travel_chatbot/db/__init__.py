from __future__ import annotations
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Generic,
    Sequence,
    Type,
    TypeVar,
)
from sqlalchemy import (
    Engine,
    event,
    select,
    create_engine,
    NullPool,
    asc,
    desc,
)
from sqlalchemy.orm import Session, sessionmaker
from travel_chatbot.models.base import Base
from travel_chatbot.settings import config

if TYPE_CHECKING:
    from sqlalchemy import ColumnExpressionArgument

V = TypeVar("V", bound=Type)

_session_factory: Callable[..., Session] | None = None


def create_factory(url: str) -> Callable[..., Session]:
    if url.startswith("sqlite"):
        engine = create_engine(
            url, poolclass=NullPool, connect_args={"check_same_thread": False}
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_engine(url, poolclass=NullPool)
    return sessionmaker(engine, expire_on_commit=False)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def configure_database(url: str) -> Engine:
    """
    Point every CRUD helper at ``url`` and create missing tables.

    Called once at application startup, and by the tests with a throwaway
    SQLite file.
    """
    # register every table on Base.metadata before create_all
    from travel_chatbot.models import auth, chat, travel  # noqa: F401

    global _session_factory
    _session_factory = create_factory(url)
    engine = _session_factory.kw["bind"]  # type: ignore[attr-defined]
    Base.metadata.create_all(engine)
    return engine


def get_session_factory() -> Callable[..., Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = create_factory(config.db_url)
    return _session_factory


class CRUDCapability(Generic[V]):
    resource_db: Type[V]

    def __init__(self, resource_db: Type[V]) -> None:
        self.resource_db = resource_db

    def db_row_to_model(self, row: V) -> dict[str, Any]:
        return {field.name: getattr(row, field.name) for field in row.__table__.c}

    def db_rows_to_model_list(self, rows: Sequence[V]) -> list[dict[str, Any]]:
        return [self.db_row_to_model(r) for r in rows]

    def get_sync_session(self) -> Session:
        return get_session_factory()()

    def list_resource(
        self,
        where: list["ColumnExpressionArgument[bool]"] | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        stmt = select(self.resource_db)
        if where is not None:
            stmt = stmt.where(*where)
        if order_by is not None:
            order_by_clauses = []
            for item in order_by:
                if item.startswith("-"):
                    column = getattr(self.resource_db, item[1:])
                    order_by_clauses.append(desc(column))
                else:
                    column = getattr(self.resource_db, item)
                    order_by_clauses.append(asc(column))
            stmt = stmt.order_by(*order_by_clauses)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset is not None:
            stmt = stmt.offset(offset)

        with self.get_sync_session() as session:
            resources = session.scalars(stmt).all()
            return self.db_rows_to_model_list(resources)

    def get_resource(
        self,
        resource_id: Any | None,
        where: list["ColumnExpressionArgument[bool]"] | None = None,
    ) -> dict[str, Any] | None:
        stmt = select(self.resource_db)
        if resource_id is not None:
            stmt = stmt.where(self.resource_db.id == resource_id)  # type: ignore
        if where is not None:
            stmt = stmt.where(*where)

        with self.get_sync_session() as session:
            resource = session.scalars(stmt).first()
            if resource is None:
                return None
            return self.db_row_to_model(resource)

    def create_resource(
        self,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        resource = self.resource_db(**data)  # type: ignore
        with self.get_sync_session() as session:
            session.add(resource)
            session.commit()
            session.refresh(resource)
            return self.db_row_to_model(resource)  # type: ignore

    def delete_resource(
        self,
        resource_id: Any | None = None,
        where: list["ColumnExpressionArgument[bool]"] | None = None,
    ) -> dict[str, Any] | None:
        stmt = select(self.resource_db)
        if resource_id is not None:
            stmt = stmt.where(self.resource_db.id == resource_id)  # type: ignore
        if where is not None:
            stmt = stmt.where(*where)

        with self.get_sync_session() as session:
            resource = session.scalars(stmt).first()
            if resource is None:
                return None
            deleted = self.db_row_to_model(resource)
            session.delete(resource)
            session.commit()
            return deleted
