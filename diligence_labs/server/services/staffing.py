"""
Staffing rules for admin team assignments.

Consultation sessions and report requests are worked by admin team
members. These helpers suggest how many people and hours an item needs
and turn open assignments into a workload figure.
"""

from typing import Iterable, NamedTuple, Optional

from diligence_labs.core.models.domain.enums import AssignmentStatus, ReportType, WorkItemType

WEEKLY_HOURS = 40

DEFAULT_TEAM_SIZE = 1
DEFAULT_HOURS = 8

SESSION_STAFFING = {
    "STRATEGIC_ADVISORY": (1, 2),
    "DUE_DILIGENCE": (2, 4),
    "TOKEN_LAUNCH": (2, 3),
    "TOKENOMICS_DESIGN": (1, 3),
}

DUE_DILIGENCE_REPORT_TEAM = 2
DUE_DILIGENCE_REPORT_HOURS = 16

OPEN_STATUSES = (AssignmentStatus.ASSIGNED.value, AssignmentStatus.IN_PROGRESS.value)


class Staffing(NamedTuple):
    team_size: int
    hours: int


def suggest_staffing(item_type: str, kind: Optional[str]) -> Staffing:
    """
    Suggested team size and hours for a work item.

    ``kind`` is the consultation type of a session or the type of a report.
    Due-diligence reports always get at least two people and 16 hours.
    """
    if item_type == WorkItemType.SESSION.value:
        return Staffing(*SESSION_STAFFING.get(kind or "", (DEFAULT_TEAM_SIZE, DEFAULT_HOURS)))
    if kind == ReportType.DUE_DILIGENCE.value:
        return Staffing(DUE_DILIGENCE_REPORT_TEAM, DUE_DILIGENCE_REPORT_HOURS)
    return Staffing(DEFAULT_TEAM_SIZE, DEFAULT_HOURS)


def is_open(status: str) -> bool:
    return status in OPEN_STATUSES


def workload_percent(assigned_hours: Iterable[int]) -> int:
    """Average share of a working week taken by open assignments, per member."""
    hours = list(assigned_hours)
    if not hours:
        return 0
    return round(sum(h / WEEKLY_HOURS * 100 for h in hours) / len(hours))
