"""Column-pair encoding of EntityRef values on table models.

A reference named ``product`` lives in two columns, ``product_id`` (the
referenced entity's sequential id) and ``product_legacy_key`` (its storage
key, only on records not yet rewritten). At most one of them is set.
"""

from typing import Any

from sqlalchemy import CheckConstraint

from stationery.models.types import EntityRef, RefKind


def ref_constraint(table: str, name: str, *, required: bool = True) -> CheckConstraint:
    """Check constraint enforcing the one-of encoding for reference ``name``."""
    id_col, key_col = f"{name}_id", f"{name}_legacy_key"
    if required:
        sql = f"({id_col} IS NULL) <> ({key_col} IS NULL)"
    else:
        sql = f"{id_col} IS NULL OR {key_col} IS NULL"
    return CheckConstraint(sql, name=f"ck_{table}_{name}_ref")


def get_ref(entity: Any, name: str) -> EntityRef | None:
    """Read reference ``name`` off ``entity`` as a tagged value."""
    entity_id = getattr(entity, f"{name}_id")
    if entity_id is not None:
        return EntityRef.sequential(entity_id)
    legacy_key = getattr(entity, f"{name}_legacy_key")
    if legacy_key is not None:
        return EntityRef.legacy(legacy_key)
    return None


def set_ref(entity: Any, name: str, ref: EntityRef | None) -> None:
    """Write reference ``name`` onto ``entity``, clearing the other column."""
    if ref is None:
        setattr(entity, f"{name}_id", None)
        setattr(entity, f"{name}_legacy_key", None)
    elif ref.kind is RefKind.SEQUENTIAL_ID:
        setattr(entity, f"{name}_id", ref.value)
        setattr(entity, f"{name}_legacy_key", None)
    else:
        setattr(entity, f"{name}_id", None)
        setattr(entity, f"{name}_legacy_key", ref.value)
