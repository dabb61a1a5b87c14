"""Mapper functions to convert between domain models and SQLAlchemy models.

Besides ORM <-> domain conversion, this layer produces the *local record*
form of an entity: a plain dict keyed by the local store's column names
(``accountId``, ``createdOn``). The sync layer converts local records to
remote rows and back, so values arriving from the remote store are coerced
here using the column types.
"""

from dataclasses import fields
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from dateutil import parser as date_parser
from sqlalchemy import Date, DateTime, Numeric, inspect

from debtbook.domain import entities as domain
from debtbook.database.models import (
    TABLE_MODELS,
    SyncLog as ORMSyncLog,
    CodeListElement as ORMCodeListElement,
)


def _column_map(table: str) -> dict[str, Any]:
    """Return attribute name -> Column for a synced table."""
    mapper = inspect(TABLE_MODELS[table])
    return {attr.key: attr.columns[0] for attr in mapper.column_attrs}


def record_to_domain(orm_record: Any) -> domain.SyncedEntity:
    """Convert any synced SQLAlchemy model to its domain entity."""
    entity_cls = domain.SYNCED_ENTITIES[orm_record.__tablename__]
    return entity_cls(**{f.name: getattr(orm_record, f.name) for f in fields(entity_cls)})


def domain_to_orm(entity: domain.SyncedEntity) -> Any:
    """Build a new SQLAlchemy model instance from a domain entity.

    Unset (None) fields are left out so column defaults apply.
    """
    model = TABLE_MODELS[entity.TABLE]
    values = {f.name: getattr(entity, f.name) for f in fields(entity)}
    return model(**{name: value for name, value in values.items() if value is not None})


def copy_to_orm(entity: domain.SyncedEntity, orm_record: Any) -> None:
    """Copy every field of a domain entity onto an existing model instance."""
    for f in fields(entity):
        setattr(orm_record, f.name, getattr(entity, f.name))


def sync_log_to_domain(orm_log: ORMSyncLog) -> domain.SyncLogEntry:
    """Convert SQLAlchemy SyncLog model to domain SyncLogEntry."""
    return domain.SyncLogEntry(
        id=orm_log.id,
        user_id=orm_log.user_id,
        table_name=orm_log.table_name,
        record_id=orm_log.record_id,
        operation=orm_log.operation,
        status=orm_log.status,
        error=orm_log.error,
        created_on=orm_log.created_on,
        processed_at=orm_log.processed_at,
    )


def code_list_element_to_domain(orm_element: ORMCodeListElement) -> domain.CodeListElement:
    """Convert SQLAlchemy CodeListElement model to domain CodeListElement."""
    return domain.CodeListElement(
        id=orm_element.id,
        code_list_name=orm_element.code_list_name,
        element=orm_element.element,
        description=orm_element.description,
        active=orm_element.active,
        sort_order=orm_element.sort_order,
    )


def to_local_record(entity: domain.SyncedEntity) -> dict[str, Any]:
    """Return the entity keyed by local column names."""
    columns = _column_map(entity.TABLE)
    return {columns[f.name].name: getattr(entity, f.name) for f in fields(entity)}


def _coerce(column, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(column.type, DateTime):
        return value if isinstance(value, datetime) else date_parser.isoparse(value)
    if isinstance(column.type, Date):
        if isinstance(value, datetime):
            return value.date()
        return value if isinstance(value, date) else date_parser.isoparse(value).date()
    if isinstance(column.type, Numeric):
        return value if isinstance(value, Decimal) else Decimal(str(value))
    return value


def local_record_to_fields(table: str, record: dict[str, Any]) -> dict[str, Any]:
    """Convert a local record back to entity keyword arguments.

    Keys that are not columns of the table are dropped, and values are
    coerced to the column's Python type (ISO strings to dates, numbers to
    Decimal).
    """
    by_name = {column.name: (key, column) for key, column in _column_map(table).items()}
    result = {}
    for name, value in record.items():
        if name not in by_name:
            continue
        key, column = by_name[name]
        result[key] = _coerce(column, value)
    return result
