from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from tallycheck.errors import ValidationError
from tallycheck.models import AttendanceRecord, AttendanceStatus, CheckInMethod


def attendance_rate(present: int, total: int) -> int:
    """Whole-number percentage, half rounded up; an empty roster rates 0."""

    if total <= 0:
        return 0
    return math.floor(present / total * 100 + 0.5)


@dataclass(slots=True, frozen=True)
class AttendanceSummary:
    total: int
    present: int
    late: int
    absent: int
    rate: int
    by_method: dict[str, int] = field(default_factory=dict)


def summarize(records: Iterable[AttendanceRecord], expected_total: int | None = None) -> AttendanceSummary:
    """Reduce attendance records for a session or a day.

    ``verified`` counts as present and ``pending`` as late. Everything else,
    including explicit ``absent`` rows and students without a row when
    ``expected_total`` is given, counts as absent.
    """

    rows = list(records)
    statuses = Counter(record.status for record in rows)
    methods = Counter(record.method for record in rows if record.check_in_time is not None)

    present = statuses[AttendanceStatus.VERIFIED]
    late = statuses[AttendanceStatus.PENDING]

    total = len(rows)
    if expected_total is not None:
        if expected_total < total:
            raise ValidationError("Expected roster size is smaller than the number of records.")
        total = expected_total

    return AttendanceSummary(
        total=total,
        present=present,
        late=late,
        absent=total - present - late,
        rate=attendance_rate(present, total),
        by_method={method.value: methods[method] for method in CheckInMethod},
    )
