from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping

from menu_builder.core.errors import ValidationFailed


@dataclass(frozen=True)
class EntityFields:
    """Mutable columns of an entity, declared once per entity."""

    mutable: tuple[str, ...]
    required: tuple[str, ...] = ()


@dataclass(frozen=True)
class FieldUpdateSet:
    values: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_changes(cls, changes: Mapping[str, Any], fields: EntityFields) -> "FieldUpdateSet":
        """Build the set of columns a partial update touches.

        ``changes`` holds only the fields the caller supplied. Unknown fields
        and explicit nulls on required columns are rejected before anything is
        written.
        """
        unknown = sorted(set(changes) - set(fields.mutable))
        nulls = sorted(name for name in fields.required if name in changes and changes[name] is None)
        details = [{"field": name, "message": "Field cannot be updated"} for name in unknown]
        details += [{"field": name, "message": "Field cannot be null"} for name in nulls]
        if details:
            raise ValidationFailed(details=details)

        values = {name: changes[name] for name in fields.mutable if name in changes}
        if not values:
            raise ValidationFailed("No fields to update")
        return cls(values=values)

    def fields(self) -> Iterable[str]:
        return self.values.keys()


COMPANY_FIELDS = EntityFields(
    mutable=("name", "description", "logo_url"),
    required=("name",),
)

MENU_ITEM_FIELDS = EntityFields(
    mutable=("name", "price", "description", "category", "image_url", "available"),
    required=("name", "price", "available"),
)
