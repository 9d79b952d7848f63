"""Tokenizer for the Tasmota ``?m`` status fragment.

The web UI polls ``http://<device>/?m`` and receives a fragment in which each
sensor row is framed by three template tokens rather than real HTML::

    {s}Voltage{m}</td><td style='text-align:left'>237</td><td>&nbsp;</td><td> V{e}

``{s}`` opens a row, ``{m}`` separates the label from the value and ``{e}``
closes the value. Firmware builds differ in the cell markup they put around
the value, so extraction is best effort: rows that do not fit are skipped and
never abort the page.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, NamedTuple, Optional

logger = logging.getLogger(__name__)

ROW_TOKEN = "{s}"
SEPARATOR_TOKEN = "{m}"
TERMINATOR_TOKEN = "{e}"

# Cell markup that newer firmware wraps around the value and unit columns.
NOISE_FRAGMENTS = (
    "</td><td style='text-align:left'>",
    "</td><td>&nbsp;</td><td>",
)

POWER_ON_MARKER = "ON"


class ExtractedField(NamedTuple):
    label: str
    value_with_unit: str


def extract(raw: str) -> List[ExtractedField]:
    """Return every well-formed ``label/value`` row found in ``raw``.

    A row is kept only when its value starts with a parseable number, so each
    returned ``value_with_unit`` is safe to pass to :func:`numeric_value`.
    """
    fields: List[ExtractedField] = []
    for row in _iter_rows(raw):
        split = _split_row(row)
        if split is None:
            continue
        label, value_raw = split
        value_with_unit = _clean_value(value_raw)
        if numeric_value(value_with_unit) is None:
            logger.debug(
                "Skipping row without a numeric value",
                extra={"label": label, "reason": value_with_unit or "empty"},
            )
            continue
        fields.append(ExtractedField(label=label, value_with_unit=value_with_unit))
    return fields


def detect_power_state(raw: str) -> bool:
    """Report whether the relay is on.

    The relay state is rendered as a large ``ON``/``OFF`` banner outside the
    row grammar, so this is a plain case-sensitive substring test.
    """
    return POWER_ON_MARKER in raw


def numeric_value(value_with_unit: str) -> Optional[float]:
    """Parse the leading whitespace-delimited token, dropping any unit."""
    tokens = value_with_unit.split(None, 1)
    # float() accepts digit-grouping underscores; firmware never emits them.
    if not tokens or "_" in tokens[0]:
        return None
    try:
        return float(tokens[0])
    except ValueError:
        return None


def _iter_rows(raw: str) -> Iterator[str]:
    yield from raw.split(ROW_TOKEN)


def _split_row(row: str) -> Optional[tuple[str, str]]:
    label, separator, value = row.partition(SEPARATOR_TOKEN)
    if not separator:
        return None
    return label, value


def _clean_value(value_raw: str) -> str:
    value, _, _ = value_raw.partition(TERMINATOR_TOKEN)
    for fragment in NOISE_FRAGMENTS:
        value = value.replace(fragment, "")
    return value.strip()
