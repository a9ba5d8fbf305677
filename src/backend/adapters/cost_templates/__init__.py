"""Merchant cost template adapters (storage rows -> engine models, no I/O)."""

from .storage import cost_templates_from_storage, cost_type_from_storage, cost_type_to_storage

__all__ = [
    "cost_templates_from_storage",
    "cost_type_from_storage",
    "cost_type_to_storage",
]
