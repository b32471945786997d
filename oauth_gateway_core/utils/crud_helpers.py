"""
Generic CRUD helpers for SQLAlchemy models.

Writes that must never be observed half-done go through upsert_record, which
issues a single INSERT ... ON CONFLICT DO UPDATE statement.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from ..exceptions import BaseError, ErrorCode
from ..utils.logger import get_logger

T = TypeVar("T")


def get_record(session: Session, model_class: Type[T], filters: Dict[str, Any]) -> Optional[T]:
    """
    Generic get operation for any model.

    Args:
        session: Database session
        model_class: SQLAlchemy model class
        filters: Column equality conditions; None matches NULL

    Raises:
        BaseError: If a filter names a column the model does not have

    Returns:
        Record instance or None
    """
    query = session.query(model_class)

    for key, value in filters.items():
        if not hasattr(model_class, key):
            raise BaseError(
                f"Unknown filter column for {model_class.__name__}: {key}",
                error_code=ErrorCode.VALIDATION_FAILED,
                status_code=400,
                column=key,
            )
        query = query.filter(getattr(model_class, key) == value)

    return query.first()


def upsert_record(
    session: Session,
    model_class: Type[T],
    data: Dict[str, Any],
    conflict_columns: Sequence[str],
) -> None:
    """
    Atomically insert or overwrite the row identified by ``conflict_columns``.

    Args:
        session: Database session
        model_class: SQLAlchemy model class
        data: Full column data for the row
        conflict_columns: Columns of the unique key deciding insert vs update

    Raises:
        BaseError: If the write fails
    """
    logger = get_logger()
    dialect = session.get_bind().dialect.name

    if dialect == "postgresql":
        insert = postgresql.insert
    elif dialect == "sqlite":
        insert = sqlite.insert
    else:
        raise BaseError(
            f"Atomic upsert not supported for dialect: {dialect}",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            dialect=dialect,
        )

    now = datetime.now(timezone.utc)
    values = dict(data)
    if hasattr(model_class, "updated_at"):
        values["updated_at"] = now
    if hasattr(model_class, "created_at"):
        values.setdefault("created_at", now)

    update_columns: List[str] = [
        key for key in values if key not in conflict_columns and key != "created_at"
    ]

    statement = insert(model_class).values(**values)
    statement = statement.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={column: getattr(statement.excluded, column) for column in update_columns},
    )

    try:
        session.execute(statement)
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(
            f"Failed to upsert {model_class.__name__}",
            extra={"model": model_class.__name__, "error": str(e)},
        )
        raise BaseError(
            f"Failed to upsert {model_class.__name__}: {str(e)}",
            error_code=ErrorCode.DATABASE_ERROR,
            cause=e,
        ) from e

    logger.debug(
        f"Upserted {model_class.__name__}",
        extra={"model": model_class.__name__, "keys": {c: values.get(c) for c in conflict_columns}},
    )


def delete_record(session: Session, model_class: Type[T], filters: Dict[str, Any]) -> bool:
    """
    Delete the first record matching ``filters``.

    Returns:
        True if a record was deleted, False if none matched

    Raises:
        BaseError: If the delete fails
    """
    logger = get_logger()

    record = get_record(session, model_class, filters)
    if record is None:
        return False

    try:
        session.delete(record)
        session.commit()
    except Exception as e:
        session.rollback()
        raise BaseError(
            f"Failed to delete {model_class.__name__}: {str(e)}",
            error_code=ErrorCode.DATABASE_ERROR,
            cause=e,
        ) from e

    logger.info(f"Deleted {model_class.__name__}", extra={"model": model_class.__name__})
    return True
