"""Keep README files in sync with the combined benchmark report.

Downstream documents carry a pair of HTML comment markers. Everything
between them is replaced with content taken from the combined report:

- ``results`` targets get the full results table and the summary
  (``<!-- BENCHMARK_RESULTS_START/END -->``)
- ``summary`` targets get the summary table only, with version links
  (``<!-- BENCHMARK_SUMMARY_START/END -->``)
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Tuple

from signalbench.config import SyncTarget
from signalbench.report.render_md import RESULTS_HEADING, SUMMARY_HEADING

logger = logging.getLogger(__name__)

RESULTS_MARKERS = ("<!-- BENCHMARK_RESULTS_START -->", "<!-- BENCHMARK_RESULTS_END -->")
SUMMARY_MARKERS = ("<!-- BENCHMARK_SUMMARY_START -->", "<!-- BENCHMARK_SUMMARY_END -->")

LATEST_RESULTS_HEADING = "## Latest Benchmark Results"

UPDATED = "updated"
MISSING_FILE = "missing_file"
MARKERS_NOT_FOUND = "markers_not_found"
MISSING_CONTENT = "missing_content"
UNREADABLE = "unreadable"


@dataclass(frozen=True)
class MarkerReplacement:
    """Result of replacing a marker-delimited region.

    When ``found`` is False the markers were not both present and ``text``
    is the original document.
    """

    text: str
    found: bool


@dataclass(frozen=True)
class SyncOutcome:
    path: Path
    status: str

    @property
    def skipped(self) -> bool:
        return self.status != UPDATED


def replace_between_markers(
    text: str, start_marker: str, end_marker: str, fragment: str
) -> MarkerReplacement:
    """Replace the region between the first start marker and the next end marker.

    Both markers are kept. Running it again with the same fragment gives
    the same document.
    """
    start = text.find(start_marker)
    if start == -1:
        return MarkerReplacement(text, False)

    content_start = start + len(start_marker)
    end = text.find(end_marker, content_start)
    if end == -1:
        return MarkerReplacement(text, False)

    body = fragment.strip("\n")
    new_text = f"{text[:content_start]}\n{body}\n{text[end:]}"
    return MarkerReplacement(new_text, True)


def _heading_pattern(heading: str):
    return re.compile(rf"^{re.escape(heading.strip())}[ \t]*$", re.MULTILINE)


def extract_section(content: str, start_heading: str, end_heading: Optional[str] = None) -> Optional[str]:
    """Text after ``start_heading`` up to ``end_heading``.

    Without ``end_heading`` the section runs to the next heading of the same
    level, or to the end of the document. A missing ``end_heading`` also
    runs to the end of the document. Returns None if the start heading is
    absent.
    """
    match = _heading_pattern(start_heading).search(content)
    if match is None:
        return None

    content_start = match.end()
    content_end = len(content)

    if end_heading is not None:
        end_match = _heading_pattern(end_heading).search(content, content_start)
    else:
        level = len(start_heading.strip()) - len(start_heading.strip().lstrip("#"))
        end_match = re.compile(rf"^{'#' * level}\s", re.MULTILINE).search(content, content_start)

    if end_match is not None:
        content_end = end_match.start()

    return content[content_start:content_end].strip()


def extract_first_table(section: Optional[str]) -> Optional[str]:
    """First markdown table in a block of text."""
    if section is None:
        return None

    table_lines: List[str] = []
    for line in section.splitlines():
        if line.strip().startswith("|"):
            table_lines.append(line)
        elif table_lines:
            break

    return "\n".join(table_lines) if table_lines else None


def link_summary_frameworks(summary_table: str, labels: Mapping[str, str]) -> str:
    """Swap plain framework ids in a summary table for linked labels."""
    lines = []
    for line in summary_table.splitlines():
        cells = line.split("|")
        # cells[0] is the text before the leading pipe, cells[1] the rank
        if len(cells) > 3 and "---" not in line and cells[1].strip() != "Rank":
            framework = cells[2].strip()
            if framework in labels:
                cells[2] = f" {labels[framework]} "
                line = "|".join(cells)
        lines.append(line)
    return "\n".join(lines)


def build_results_fragment(report: str) -> str:
    """Full results and summary content for ``results`` targets."""
    results_section = extract_section(report, RESULTS_HEADING, SUMMARY_HEADING)
    if results_section is None:
        raise ValueError("Could not find Results section in report")

    parts = [LATEST_RESULTS_HEADING, "", results_section]
    summary_section = extract_section(report, SUMMARY_HEADING)
    if summary_section:
        parts.extend(["", summary_section])
    return "\n".join(parts)


def build_summary_fragment(report: str, labels: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Summary table only, for ``summary`` targets."""
    table = extract_first_table(extract_section(report, SUMMARY_HEADING))
    if table is None:
        return None
    return link_summary_frameworks(table, labels or {})


def markers_for(mode: str) -> Tuple[str, str]:
    return RESULTS_MARKERS if mode == "results" else SUMMARY_MARKERS


def sync_document(path: Path, markers: Tuple[str, str], fragment: str) -> SyncOutcome:
    """Rewrite one document in place.

    Missing files, missing markers and documents that cannot be read or
    written are skipped with a warning.
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"{path} not found, skipping")
        return SyncOutcome(path, MISSING_FILE)

    try:
        current = path.read_text(encoding="utf-8")
        replacement = replace_between_markers(current, markers[0], markers[1], fragment)
        if not replacement.found:
            logger.warning(f"Markers {markers[0]} / {markers[1]} not found in {path}, skipping")
            return SyncOutcome(path, MARKERS_NOT_FOUND)

        if replacement.text != current:
            path.write_text(replacement.text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to sync {path}: {e}, skipping")
        return SyncOutcome(path, UNREADABLE)

    return SyncOutcome(path, UPDATED)


def sync_targets(
    report: str,
    targets: Iterable[SyncTarget],
    labels: Optional[Mapping[str, str]] = None,
) -> List[SyncOutcome]:
    """Sync every target from the combined report text.

    Fragments are built before any document is touched, so a report without
    a Results section fails the run without partial writes.
    """
    fragments = {
        "results": build_results_fragment(report),
        "summary": build_summary_fragment(report, labels),
    }

    outcomes = []
    for target in targets:
        fragment = fragments[target.mode]
        if fragment is None:
            logger.warning(f"No {target.mode} content in report, skipping {target.path}")
            outcomes.append(SyncOutcome(target.path, MISSING_CONTENT))
            continue
        outcomes.append(sync_document(target.path, markers_for(target.mode), fragment))

    return outcomes
