"""Checklist and regulation records from textual compliance reports.

The agent renders compliance reports as bullet lists::

    - Monthly Bank Reconciliation (CHK_001): Completed (Last completed 2025-05-31)
    - Vendor Due Diligence (CHK_004): In Progress (Due on 2025-06-15)
    - Sarbanes-Oxley Act (REG_002): Internal controls over financial reporting

Both passes are anchored to the start of a bullet line.  A bullet that
carries a trailing parenthesised status note is a checklist item, any other
``Name (ID): text`` bullet is a regulation.
"""

from __future__ import annotations

import re

from backend.core.schema import ChecklistItem, ComplianceReport, RegulationItem


REPORT_MARKERS = ("CHK_", "REG_")

CHECKLIST_PATTERN = re.compile(
    r"^[ \t]*-[ \t]*(?P<name>[^:\n]{1,200})\((?P<id>[^()\n]{1,100})\):[ \t]*"
    r"(?P<status>[^(\n]{1,200})\((?P<info>[^)\n]{1,200})\)",
    re.MULTILINE,
)
REGULATION_PATTERN = re.compile(
    r"^[ \t]*-[ \t]*(?P<name>[^:\n]{1,200})\((?P<id>[^()\n]{1,100})\):[ \t]*(?P<description>[^\n]{1,2000})",
    re.MULTILINE,
)
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")

STATUS_COMPLETED = "completed"
STATUS_IN_PROGRESS = "inProgress"
STATUS_PENDING = "pending"


def is_compliance_report(text: str | None) -> bool:
    if not text:
        return False
    return "compliance report" in text.lower() or any(marker in text for marker in REPORT_MARKERS)


def classify_status(status: str) -> str:
    lowered = status.lower()
    if "completed" in lowered:
        return STATUS_COMPLETED
    if "in progress" in lowered or "in-progress" in lowered:
        return STATUS_IN_PROGRESS
    return STATUS_PENDING


def parse_compliance_report(text: str | None) -> ComplianceReport:
    report = ComplianceReport()
    if not text:
        return report

    checklist_lines: set[int] = set()
    breakdown = report.status_breakdown
    for match in CHECKLIST_PATTERN.finditer(text):
        status = match.group("status").strip()
        info = match.group("info").strip()
        status_type = classify_status(status)
        if status_type == STATUS_COMPLETED:
            breakdown.completed += 1
        elif status_type == STATUS_IN_PROGRESS:
            breakdown.in_progress += 1
        else:
            breakdown.pending += 1

        date_match = DATE_PATTERN.search(info)
        report.checklists.append(
            ChecklistItem(
                id=match.group("id").strip(),
                name=match.group("name").strip(),
                status=status,
                status_type=status_type,
                date=date_match.group(0) if date_match else None,
                date_info=info,
            )
        )
        checklist_lines.add(match.start())

    # Checklist bullets also fit the regulation shape; each line is reported once.
    for match in REGULATION_PATTERN.finditer(text):
        if match.start() in checklist_lines:
            continue
        report.regulations.append(
            RegulationItem(
                id=match.group("id").strip(),
                name=match.group("name").strip(),
                description=match.group("description").strip(),
            )
        )
    return report
