from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, MutableMapping, Optional, TypeVar

from .errors import DecodeError

RowT = TypeVar("RowT")
ParentT = TypeVar("ParentT", bound=MutableMapping[str, Any])
ChildT = TypeVar("ChildT")

_DECODE_FAILURES = (KeyError, IndexError, TypeError, ValueError)


# PUBLIC_INTERFACE
def group_rows(
    rows: Iterable[RowT],
    *,
    parent: Callable[[RowT], ParentT],
    child: Callable[[RowT], Optional[ChildT]],
    key: str = "id",
    field: str = "items",
) -> List[ParentT]:
    """
    Fold flat parent/child join rows into one parent per distinct id.

    Args:
        rows: Joined rows, consumed once. Each row repeats the parent columns
            and carries at most one nullable child value.
        parent: Decodes the parent projection of a row into a mutable mapping.
        child: Decodes the child value of a row; None means "no child row".
        key: Name of the id field in the decoded parent.
        field: Name of the field the aggregated child list is stored under.

    Returns:
        Parents in order of first appearance, each with a list (possibly
        empty) of its non-null child values in arrival order. Duplicate child
        values are kept.

    Raises:
        DecodeError: if any row fails to decode. Nothing is returned in that case.
    """
    parents: Dict[Any, ParentT] = {}
    children: Dict[Any, List[ChildT]] = {}

    for row in rows:
        try:
            entity = parent(row)
            value = child(row)
            parent_id = entity[key]
        except _DECODE_FAILURES as exc:
            raise DecodeError(f"cannot decode row: {exc}") from exc

        if parent_id not in parents:
            parents[parent_id] = entity
            children[parent_id] = []
        if value is not None:
            children[parent_id].append(value)

    for parent_id, entity in parents.items():
        entity[field] = children[parent_id]
    return list(parents.values())


# PUBLIC_INTERFACE
def unique_by_key(entities: Iterable[ParentT], key: str = "id") -> List[ParentT]:
    """
    Keep the first entity seen for each value of `key`, in arrival order.
    """
    unique: Dict[Any, ParentT] = {}
    for entity in entities:
        unique.setdefault(entity[key], entity)
    return list(unique.values())
