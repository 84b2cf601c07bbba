"""Closed-domain checks applied to every record before it touches storage.

Each entity kind declares which of its fields are enumerated and which numeric
fields must be strictly positive.  :func:`validate_reference_fields` raises on
the first violation so a record is either admitted whole or not at all.
"""

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from src.errors import ValidationError
from src.schemas.records import EntityKind

TEA_CATEGORIES = frozenset({"M1", "M2", "M3", "S1"})

TEA_GRADES = frozenset(
    {
        "PD", "PD2", "DUST", "DUST1", "DUST2", "PF", "PF1", "BP", "BP1",
        "FNGS1", "BOP", "BOPF", "FNGS", "FNGS2", "BMF", "BMFD", "PF2", "BMF1",
    }
)

BROKERS = frozenset(
    {
        "AMBR", "ANJL", "ATBL", "ATLS", "BICL", "BTBL", "CENT", "COMK",
        "CTBL", "PRME", "PTBL", "TBEA", "UNTB", "VENS", "TTBL", "UIBD",
    }
)

SHIPMENT_STATUSES = frozenset({"Pending", "Approved", "Shipped", "Delivered", "Cancelled"})
VESSELS = frozenset({"first", "second", "third", "fourth"})
PACKAGING_INSTRUCTIONS = frozenset({"oneJutetwoPolly", "oneJuteOnePolly"})
REPRINTS = frozenset({"1", "2", "3", "4", "5", "6", "7", "No", None})
USER_ROLES = frozenset({"user", "admin"})
REPORT_FILE_TYPES = frozenset({"pdf", "doc", "docx", "txt", "csv", "xlsx"})

_LISTING_ENUMS: dict[str, frozenset] = {
    "category": TEA_CATEGORIES,
    "grade": TEA_GRADES,
    "broker": BROKERS,
    "reprint": REPRINTS,
}

ENUMERATED_FIELDS: dict[EntityKind, dict[str, frozenset]] = {
    EntityKind.USER: {"role": USER_ROLES},
    EntityKind.CATALOG: _LISTING_ENUMS,
    EntityKind.SELLING_PRICE: _LISTING_ENUMS,
    EntityKind.OUT_LOTS: {"grade": TEA_GRADES, "broker": BROKERS},
    EntityKind.STOCKS: {"grade": TEA_GRADES, "broker": BROKERS},
    EntityKind.SHIPMENT: {
        "status": SHIPMENT_STATUSES,
        "vessel": VESSELS,
        "packaging_instructions": PACKAGING_INSTRUCTIONS,
    },
    EntityKind.REPORT: {"file_type": REPORT_FILE_TYPES},
}

POSITIVE_FIELDS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.CATALOG: ("bags", "net_weight"),
    EntityKind.SELLING_PRICE: ("bags", "net_weight"),
    EntityKind.OUT_LOTS: ("bags", "net_weight"),
    EntityKind.STOCKS: ("bags", "weight"),
}


def check_member(field: str, value: Any, allowed: Iterable[Any]) -> None:
    if value not in allowed:
        name = to_camel(field)
        raise ValidationError(name, value, f"Invalid {name} {value!r}")


def check_positive(field: str, value: Any) -> None:
    if value is None or value <= 0:
        name = to_camel(field)
        raise ValidationError(name, value, f"Zero or negative {name} {value!r}")


def validate_reference_fields(kind: EntityKind, record: BaseModel) -> None:
    """Reject *record* if any enumerated or positive field of *kind* is out of domain."""
    for field, allowed in ENUMERATED_FIELDS.get(kind, {}).items():
        check_member(field, getattr(record, field), allowed)
    for field in POSITIVE_FIELDS.get(kind, ()):
        check_positive(field, getattr(record, field))
