"""Parse per-framework benchmark markdown reports."""

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)

FAILURE_MARKERS = ("❌", "N/A")
DECORATIONS = ("**", "🏆")
MEDALS = ("🥇", "🥈", "🥉")

# First-cell values of header rows, never test names
HEADER_TOKENS = frozenset({"Test", "Rank", "Framework", "Benchmark"})

# Longest suffixes first so "ms" is not read as "s"
UNIT_MULTIPLIERS = (
    ("μs", 1.0),
    ("µs", 1.0),
    ("us", 1.0),
    ("ms", 1_000.0),
    ("s", 1_000_000.0),
)

_SEPARATOR_ROW = re.compile(r"^[\s|:\-]+$")


@dataclass(frozen=True)
class Outcome:
    """One measured result for a (framework, test) pair."""

    time_micros: float = 0.0
    passed: bool = False

    @classmethod
    def failed(cls) -> "Outcome":
        return cls(0.0, False)


def parse_time(time_str: str) -> Optional[float]:
    """Parse a measurement like ``12.34ms`` into microseconds.

    Returns None when the text is not a finite, non-negative number.
    """
    text = time_str.strip()
    multiplier = 1.0
    for suffix, factor in UNIT_MULTIPLIERS:
        if text.endswith(suffix):
            text = text[: -len(suffix)].strip()
            multiplier = factor
            break

    try:
        value = float(text)
    except ValueError:
        logger.debug(f"Failed to parse time {time_str!r}")
        return None

    if not math.isfinite(value) or value < 0:
        logger.debug(f"Ignoring out-of-range time {time_str!r}")
        return None

    return value * multiplier


def parse_value_cell(cell: str, context: str = "") -> Outcome:
    """Turn a table value cell into an Outcome; malformed cells count as failed.

    ``context`` names the test and source file in the warning for a bad cell.
    """
    value = cell.strip()
    if value in FAILURE_MARKERS:
        return Outcome.failed()

    for decoration in DECORATIONS:
        value = value.replace(decoration, "")

    time_micros = parse_time(value)
    if time_micros is None:
        logger.warning(f"Unparseable measurement {cell.strip()!r}{context}, counting as failed")
        return Outcome.failed()
    return Outcome(time_micros, True)


def _is_data_row(cells) -> bool:
    first = cells[0]
    if first in HEADER_TOKENS:
        return False
    return not first.startswith(MEDALS)


def parse_markdown_results(content: str, source: Optional[str] = None) -> Dict[str, Outcome]:
    """Parse one framework's report into test name -> Outcome.

    Only markdown table rows are considered. Separator rows, header rows and
    ranking rows are skipped; the first non-empty cell is the test name and
    the second one holds the measurement. ``source`` (usually the framework
    id) is only used in warnings.
    """
    results: Dict[str, Outcome] = {}

    for line in content.splitlines():
        line = line.strip()
        if not line.startswith("|") or _SEPARATOR_ROW.match(line):
            continue

        cells = [cell.strip() for cell in line.split("|")]
        cells = [cell for cell in cells if cell]
        if len(cells) < 2 or not _is_data_row(cells):
            continue

        test = cells[0]
        context = f" for test {test!r} in {source}" if source else f" for test {test!r}"
        results[test] = parse_value_cell(cells[1], context)

    return results
