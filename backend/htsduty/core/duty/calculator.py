"""Duty calculator over parsed rate components.

Ad valorem components apply to the total declared value (unit price x
quantity). Specific components need a physical basis, weight or a count,
and are skipped with a note when the caller didn't supply it. The notes
list is how a caller tells "all parts skipped" from a genuine 0.00.
"""

import math

from htsduty.schemas.tariff import RateComponent


def _positive(x: float | None) -> bool:
    return x is not None and math.isfinite(x) and x > 0


def compute_duty(
    components: list[RateComponent],
    unit_price_usd: float,
    quantity: float | None = None,
    weight_kg: float | None = None,
    notes: list[str] | None = None,
) -> float:
    """Return the duty in USD rounded to cents, appending notes in place."""
    if notes is None:
        notes = []

    units = quantity if _positive(quantity) else 1
    duty = 0.0

    for c in components:
        if c.kind == "percentage":
            duty += unit_price_usd * units * c.value

    for c in components:
        if c.kind != "specific":
            continue
        per = (c.per or "").lower()

        if per == "kg":
            if _positive(weight_kg):
                duty += c.value * weight_kg
            else:
                notes.append(
                    "This line charges per kilogram. Add weight (kg) to include that part."
                )
        elif per in ("pair", "unit"):
            if _positive(quantity):
                duty += c.value * quantity
            else:
                notes.append(
                    f"This line charges per {per}. Add quantity to include that part."
                )
        elif per == "dozen":
            if _positive(quantity):
                duty += c.value * (quantity / 12)
            else:
                notes.append(
                    "This line charges per dozen. Add quantity (it is divided by 12)."
                )
        else:
            notes.append(
                f'Specific duty uses unsupported unit "/{per}"; not included in the total.'
            )

    return round(duty, 2)
