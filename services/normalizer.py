"""Map extracted status rows onto a :class:`~models.records.Reading`."""

from __future__ import annotations

import logging
from typing import Dict, Iterable

from models.records import Reading
from services.extractor import ExtractedField, detect_power_state, extract, numeric_value

logger = logging.getLogger(__name__)

LABEL_FIELDS: Dict[str, str] = {
    "Voltage": "voltage",
    "Current": "current",
    "Active Power": "power",
    "Apparent Power": "apparent_power",
    "Reactive Power": "reactive_power",
    "Power Factor": "factor",
    "Energy Today": "today",
    "Energy Yesterday": "yesterday",
    "Energy Total": "total",
}
"""Status page label -> Reading field. Matching is exact and case-sensitive."""


def normalize(fields: Iterable[ExtractedField], *, on: bool = False) -> Reading:
    """Build a reading from extracted rows.

    Unknown labels are logged and ignored; fields without a row stay at zero.
    When a label repeats, the last row wins.
    """
    values: Dict[str, float] = {}
    for label, value_with_unit in fields:
        value = numeric_value(value_with_unit)
        if value is None:
            continue
        field_name = LABEL_FIELDS.get(label)
        if field_name is None:
            logger.warning(
                "Unable to match status label",
                extra={"label": label, "value": value},
            )
            continue
        values[field_name] = value
    return Reading(on=on, **values)


def parse_status_page(raw: str) -> Reading:
    return normalize(extract(raw), on=detect_power_state(raw))
