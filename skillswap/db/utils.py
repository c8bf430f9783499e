from typing import Any, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


def apply_dict_updates(entity: T, update_data: dict[str, Any], excluded_attrs: set[str] | None) -> T:
    """
    Dynamically applies key-value pairs from a dictionary to an ORM entity.

    Args:
        entity: The SQLAlchemy ORM object loaded into the session.
        update_data: Dictionary of fields and values to update.
        excluded_attrs: Attribute names that must never be written through this path.
    """
    excluded_attrs = excluded_attrs if excluded_attrs else set()
    for key, value in update_data.items():

        if key in excluded_attrs:
            continue

        if hasattr(entity, key):
            setattr(entity, key, value)
    return entity


async def count_rows(session: AsyncSession, stmt: Select) -> int:
    """Counts the rows a select would return, ignoring its ordering and paging."""
    count_stmt = select(func.count()).select_from(stmt.order_by(None).limit(None).offset(None).subquery())
    return (await session.scalar(count_stmt)) or 0


def escape_like(term: str) -> str:
    """Escapes LIKE wildcards so user input is matched literally (escape char '\\')."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
