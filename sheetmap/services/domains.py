from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from ..dates import normalize, to_date
from ..models.mapping_schema import ExtractionResult

"""Domain record builders.

Turns a raw extraction record into a typed record for one of the known
business domains. The set of domains is closed (DomainType); each domain
declares a fixed table of field kinds. Declared fields are coerced, anything
else passes through untouched.

Date fields go through ``sheetmap.dates.to_date`` only. Values that cannot be
coerced become ``None`` and leave a notice on the record; building never
raises for bad cell content.
"""

__all__ = [
    "DomainType",
    "FieldKind",
    "DomainRecord",
    "DOMAIN_FIELDS",
    "resolve_domain",
    "build_record",
]

logger = logging.getLogger(__name__)


class DomainType(Enum):
    AUDIT = "audit"
    VEHICULO = "vehiculo"


class FieldKind(Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


DOMAIN_FIELDS: dict[DomainType, dict[str, FieldKind]] = {
    DomainType.AUDIT: {
        "fecha": FieldKind.DATE,
        "cantidad_items": FieldKind.NUMBER,
        "cantidad_cumple": FieldKind.NUMBER,
        "cantidad_cumple_parcial": FieldKind.NUMBER,
        "cantidad_no_cumple": FieldKind.NUMBER,
        "cantidad_no_aplica": FieldKind.NUMBER,
        "cumplimiento_total_pct": FieldKind.NUMBER,
        "porcentaje_cumplimiento": FieldKind.NUMBER,
        "cumple": FieldKind.BOOLEAN,
        "cumple_parcial": FieldKind.BOOLEAN,
        "no_cumple": FieldKind.BOOLEAN,
        "no_aplica": FieldKind.BOOLEAN,
    },
    DomainType.VEHICULO: {
        "fecha": FieldKind.DATE,
        "latitud": FieldKind.NUMBER,
        "longitud": FieldKind.NUMBER,
        "velocidad": FieldKind.NUMBER,
        "vehiculo": FieldKind.STRING,
        "direccion": FieldKind.STRING,
        "llave": FieldKind.STRING,
        "operador": FieldKind.STRING,
        "evento": FieldKind.STRING,
        "texto": FieldKind.STRING,
        "descripcion": FieldKind.STRING,
        "mapa": FieldKind.STRING,
    },
}

TRUTHY = frozenset({"true", "x", "✓", "si", "sí", "yes", "1", "verdadero"})
FALSY = frozenset({"false", "no", "0", "falso", "-"})

_THOUSANDS_DOT = re.compile(r"^-?\d{1,3}(\.\d{3})+(,\d+)?$")


@dataclass(frozen=True)
class DomainRecord:
    domain: DomainType
    values: dict[str, Any]
    notices: list[str] = field(default_factory=list)


def resolve_domain(domain: DomainType | str | None) -> DomainType:
    """Map a domain name to DomainType. None falls back to audit.

    Raises:
        ValueError: unknown domain name
    """
    if domain is None:
        return DomainType.AUDIT
    if isinstance(domain, DomainType):
        return domain
    try:
        return DomainType(domain.strip().lower())
    except ValueError as e:
        known = ", ".join(d.value for d in DomainType)
        raise ValueError(f"unknown domain '{domain}' (expected one of: {known})") from e


def _to_number(value: Any) -> float | int | None:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        try:
            return value if math.isfinite(value) else None
        except OverflowError:
            return None
    text = str(value).strip().replace(" ", "")
    if text.endswith("%"):
        text = text[:-1]
    if _THOUSANDS_DOT.match(text):
        # 1.234,5 -> 1234.5
        text = text.replace(".", "").replace(",", ".")
    elif "," in text and "." not in text:
        text = text.replace(",", ".")
    else:
        text = text.replace(",", "")
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def _to_boolean(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in TRUTHY:
        return True
    if text in FALSY:
        return False
    return None


def _coerce(name: str, kind: FieldKind, value: Any, default_year: int | None) -> tuple[Any, str | None]:
    """Return (coerced value, notice or None)."""
    if value is None:
        return None, None
    if kind is FieldKind.STRING:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return str(value).strip(), None
    if kind is FieldKind.NUMBER:
        number = _to_number(value)
        if number is None:
            return None, f"field '{name}': {value!r} is not a number"
        return number, None
    if kind is FieldKind.BOOLEAN:
        flag = _to_boolean(value)
        if flag is None:
            return None, f"field '{name}': {value!r} is not a yes/no value"
        return flag, None

    parsed: date | None = to_date(value, default_year=default_year)
    if parsed is not None:
        return parsed, None
    if normalize(value).is_ambiguous:
        return None, f"field '{name}': {value!r} is an ambiguous date"
    return None, f"field '{name}': {value!r} is not a recognizable date"


def build_record(
    result: ExtractionResult,
    domain: DomainType | str | None = None,
    default_year: int | None = None,
) -> DomainRecord:
    """Build a typed domain record from an extraction result.

    Args:
        result: extraction output (raw values keyed by field name)
        domain: DomainType or its name; None means audit
        default_year: year used for year-less dates (current year when None)

    Returns:
        DomainRecord with coerced declared fields, undeclared fields as-is,
        and one notice per value that could not be coerced

    Raises:
        ValueError: unknown domain name
    """
    domain_type = resolve_domain(domain)
    kind_of = DOMAIN_FIELDS[domain_type]
    values: dict[str, Any] = {}
    notices: list[str] = []

    for name, raw in result.data.items():
        kind = kind_of.get(name)
        if kind is None:
            values[name] = raw
            continue
        value, notice = _coerce(name, kind, raw, default_year)
        values[name] = value
        if notice:
            notices.append(notice)

    record = DomainRecord(domain=domain_type, values=values, notices=notices)
    if notices:
        logger.debug("domain=%s notices=%d", record.domain.value, len(notices))
    return record
