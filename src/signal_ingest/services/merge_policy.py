"""Per-entity field merge policies.

Each policy maps field names to a rule deciding whether an incoming value
may replace what the store already holds. ``merge`` returns only the
fields that would actually change, so an empty result means the row is a
duplicate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldRule(str, Enum):
    FILL_IF_NULL = "fill_if_null"
    OVERWRITE = "overwrite"
    IGNORE = "ignore"


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


@dataclass(frozen=True)
class MergePolicy:
    name: str
    default: FieldRule = FieldRule.FILL_IF_NULL
    rules: dict[str, FieldRule] = field(default_factory=dict)

    def rule_for(self, field_name: str) -> FieldRule:
        return self.rules.get(field_name, self.default)

    def merge(self, existing: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
        """Compute the field updates ``incoming`` applies on top of ``existing``.

        Blank incoming values never clear stored data, whatever the rule.
        """
        changes: dict[str, Any] = {}
        for key, value in incoming.items():
            if is_blank(value):
                continue
            rule = self.rule_for(key)
            if rule is FieldRule.IGNORE:
                continue
            current = existing.get(key)
            if rule is FieldRule.FILL_IF_NULL and not is_blank(current):
                continue
            if current == value:
                continue
            changes[key] = value
        return changes


_TIMESTAMPS = {"id": FieldRule.IGNORE, "created_at": FieldRule.IGNORE, "updated_at": FieldRule.IGNORE}

COMPANY_IMPORT_POLICY = MergePolicy(
    name="company_import",
    default=FieldRule.FILL_IF_NULL,
    rules={
        **_TIMESTAMPS,
        "name": FieldRule.IGNORE,
        "slug": FieldRule.IGNORE,
        "messaging_hook": FieldRule.OVERWRITE,
    },
)

CORRECTION_POLICY = MergePolicy(
    name="correction",
    default=FieldRule.OVERWRITE,
    rules={**_TIMESTAMPS, "slug": FieldRule.IGNORE},
)

SIGNAL_REIMPORT_POLICY = MergePolicy(
    name="signal_reimport",
    default=FieldRule.FILL_IF_NULL,
    rules={
        **_TIMESTAMPS,
        "company_id": FieldRule.IGNORE,
        "signal_type": FieldRule.IGNORE,
        "signal_date": FieldRule.IGNORE,
        "discovered_date": FieldRule.IGNORE,
        "title": FieldRule.OVERWRITE,
        "description": FieldRule.OVERWRITE,
        "source_url": FieldRule.OVERWRITE,
        "source_type": FieldRule.OVERWRITE,
        "source_2_url": FieldRule.OVERWRITE,
        "source_2_type": FieldRule.OVERWRITE,
        "strength": FieldRule.OVERWRITE,
        "tier": FieldRule.OVERWRITE,
        "status": FieldRule.OVERWRITE,
        "expiry_date": FieldRule.OVERWRITE,
    },
)

PROJECT_IMPORT_POLICY = MergePolicy(
    name="project_import",
    default=FieldRule.FILL_IF_NULL,
    rules={
        **_TIMESTAMPS,
        "company_id": FieldRule.IGNORE,
        "location_state": FieldRule.IGNORE,
    },
)
