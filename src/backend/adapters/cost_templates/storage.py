from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from common.profit_engine.models import CostTemplate, CostType

logger = logging.getLogger(__name__)

# Storage enum names that differ from the engine's CostType.
_STORAGE_ALIASES = {
    "PAYMENT": CostType.PAYMENT_FEE,
    "PAYMENT_FEES": CostType.PAYMENT_FEE,
    "PLATFORM": CostType.PLATFORM_FEE,
    "PLATFORM_FEES": CostType.PLATFORM_FEE,
    "SHIPPING_COST": CostType.SHIPPING,
    "OTHER": CostType.CUSTOM,
}


def cost_type_from_storage(value: Any) -> CostType | None:
    if isinstance(value, CostType):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    key = value.strip().upper()
    if key in _STORAGE_ALIASES:
        return _STORAGE_ALIASES[key]
    try:
        return CostType(key)
    except ValueError:
        return None


def cost_type_to_storage(cost_type: CostType) -> str:
    return cost_type.value


def cost_templates_from_storage(rows: Iterable[Any]) -> list[CostTemplate]:
    """
    Convert stored cost template rows into CostTemplates.

    Rows look like `{"name", "type", "config": {...}, "lines": [{"appliesTo", "percentageRate", "flatAmount"}]}`.
    Rows that cannot be understood (unknown type, non-object lines) are dropped with a warning so one
    bad template never blocks evaluation of the rest.
    """
    templates: list[CostTemplate] = []
    for index, row in enumerate(rows or []):
        if not isinstance(row, dict):
            logger.warning("Dropping cost template #%d: expected an object, got %s.", index, type(row).__name__)
            continue
        cost_type = cost_type_from_storage(row.get("type"))
        if cost_type is None:
            logger.warning("Dropping cost template %r: unknown cost type %r.", row.get("name"), row.get("type"))
            continue
        lines = row.get("lines")
        if lines is not None and not isinstance(lines, list):
            lines = None
        try:
            templates.append(
                CostTemplate(
                    type=cost_type,
                    name=str(row.get("name") or ""),
                    lines=[line for line in lines if isinstance(line, dict)] if lines is not None else None,
                    config=row.get("config"),
                )
            )
        except ValidationError as exc:
            logger.warning("Dropping cost template %r: %s", row.get("name"), exc)
    return templates
