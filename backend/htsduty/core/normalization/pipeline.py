"""Normalization pipeline for USITC tariff-line records.

The HTS API is not consistent about field names: the code may arrive as
"htsno", "hts_number" or "number", the general rate as "general",
"general_rate" or a nested "rates.general". Every record flows through
this pipeline before ranking, so downstream code only ever sees
NormalizedTariffItem.
"""

import re
from typing import Any, Callable
from urllib.parse import quote

from htsduty.core.duty.rate_parser import parse_rate
from htsduty.schemas.tariff import NormalizedTariffItem

Accessor = Callable[[dict], Any]

_NESOI_RE = re.compile(r"\bnesoi\b|\bnot\s+elsewhere\s+specified", re.IGNORECASE)

SOURCE_URL = "https://hts.usitc.gov/?query={code}"


def _field(name: str) -> Accessor:
    return lambda rec: rec.get(name)


def _nested(outer: str, inner: str) -> Accessor:
    def get(rec: dict) -> Any:
        value = rec.get(outer)
        return value.get(inner) if isinstance(value, dict) else None
    return get


def _general_duty_scan(rec: dict) -> Any:
    """Last resort: any string field named like a general duty rate."""
    for key, value in rec.items():
        if not isinstance(value, str):
            continue
        k = str(key).lower()
        if ("general" in k and "duty" in k) or "general rate" in k:
            return value
    return None


# Ordered accessors, first non-empty result wins.
CODE_ACCESSORS: list[Accessor] = [
    _field(name)
    for name in ("htsno", "hts_no", "htsno_str", "hts_number", "hts", "number", "htsno10")
]
DESCRIPTION_ACCESSORS: list[Accessor] = [
    _field(name)
    for name in ("description", "desc", "article", "short_desc", "item_description")
]
NOTES_ACCESSORS: list[Accessor] = [_field("notes"), _field("additional")]
GENERAL_RATE_ACCESSORS: list[Accessor] = [
    _field("general_rate"),
    _field("generalRate"),
    _field("general"),
    _nested("rates", "general"),
    _general_duty_scan,
]


def first_value(rec: dict, accessors: list[Accessor], strings_only: bool = False) -> str | None:
    """Run accessors in order and return the first non-empty value as text."""
    for accessor in accessors:
        value = accessor(rec)
        if value is None:
            continue
        if strings_only and not isinstance(value, str):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def digits_only(text: str) -> str:
    return re.sub(r"\D", "", text or "")


def to_code10(code: str) -> str:
    """Truncate to 10 digits and right-pad with zeros."""
    return digits_only(code)[:10].ljust(10, "0")


def format_code(code10: str) -> str:
    """Dot-grouped display form, dddd.dd.dddd."""
    return f"{code10[:4]}.{code10[4:6]}.{code10[6:10]}"


def has_nesoi(text: str | None) -> bool:
    return bool(_NESOI_RE.search(text or ""))


def unwrap_records(payload: Any) -> list[dict]:
    """Pull the record list out of an upstream JSON payload.

    Accepts a bare array, {"results": [...]} or {"data": [...]}.
    """
    if isinstance(payload, list):
        records = payload
    elif isinstance(payload, dict) and isinstance(payload.get("results"), list):
        records = payload["results"]
    elif isinstance(payload, dict) and isinstance(payload.get("data"), list):
        records = payload["data"]
    else:
        return []
    return [r for r in records if isinstance(r, dict)]


class TariffItemNormalizer:
    """Process raw USITC records into NormalizedTariffItem."""

    def normalize(self, raw: dict[str, Any]) -> NormalizedTariffItem:
        """Normalize a single raw record.

        Steps:
        1. Locate the code (ValueError if it has no digits) and capture
           ten-digit completeness before padding
        2. Pad/truncate to code10
        3. Locate description and notes
        4. Locate general rate text and parse it
        5. Flag NESOI catch-all lines
        """
        code_digits = digits_only(first_value(raw, CODE_ACCESSORS) or "")
        if not code_digits:
            raise ValueError(f"Record has no HTS code: {str(raw)[:80]}")
        is_ten_digit = len(code_digits) == 10
        code10 = to_code10(code_digits)

        description = " ".join((first_value(raw, DESCRIPTION_ACCESSORS) or "").split())
        notes = first_value(raw, NOTES_ACCESSORS, strings_only=True)

        raw_rate_text = first_value(raw, GENERAL_RATE_ACCESSORS, strings_only=True)
        parsed = parse_rate(raw_rate_text)

        return NormalizedTariffItem(
            code10=code10,
            display_code=format_code(code10),
            description=description,
            notes=notes,
            rate_type=parsed.rate_type if parsed else None,
            components=parsed.components if parsed else [],
            raw_rate_text=raw_rate_text,
            is_ten_digit=is_ten_digit,
            has_nesoi=has_nesoi(description),
            source_url=SOURCE_URL.format(code=quote(code10)),
        )


_default = TariffItemNormalizer()


def normalize_item(raw: dict[str, Any]) -> NormalizedTariffItem:
    return _default.normalize(raw)
