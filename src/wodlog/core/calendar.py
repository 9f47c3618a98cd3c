"""Pure month-grid calendar logic - no I/O dependencies."""

import calendar as _calendar
from dataclasses import dataclass
from datetime import date, timedelta

from .entries import WodEntry, count_by_date

GRID_COLUMNS = 7
GRID_CELLS = 35  # 5 rows x 7 columns
WEEKDAY_HEADERS = ["S", "M", "T", "W", "T", "F", "S"]


@dataclass
class DayCell:
    """One cell of the month grid."""

    date: date
    is_current_month: bool
    is_today: bool
    wod_count: int

    @property
    def iso(self) -> str:
        return self.date.isoformat()


def sunday_offset(d: date) -> int:
    """Day-of-week index with Sunday as 0."""
    return (d.weekday() + 1) % 7


def build_month_grid(
    month: int,
    year: int,
    entries: list[WodEntry],
    today: date | None = None,
) -> list[DayCell]:
    """
    Build the calendar cells for a month.

    Pure function - no I/O.

    Args:
        month: Month to display (1-12)
        year: Year to display
        entries: Entries used for the per-day counts
        today: Date highlighted as today (defaults to date.today())

    Returns:
        Cells in display order, Sunday-first. Previous-month lead cells, then
        every day of the month, then next-month cells up to 35. The grid never
        exceeds 35 cells, so months that would need a sixth row lose their
        trailing days.
    """
    today = today or date.today()
    first = date(year, month, 1)
    days_in_month = _calendar.monthrange(year, month)[1]
    lead = sunday_offset(first)
    counts = count_by_date(entries)

    cells = []
    for i in range(lead):
        d = first - timedelta(days=lead - i)
        cells.append(DayCell(date=d, is_current_month=False, is_today=False, wod_count=0))

    for day in range(1, days_in_month + 1):
        d = date(year, month, day)
        cells.append(
            DayCell(
                date=d,
                is_current_month=True,
                is_today=d == today,
                wod_count=counts.get(d.isoformat(), 0),
            )
        )

    next_first = first + timedelta(days=days_in_month)
    remaining = GRID_CELLS - len(cells)
    for i in range(remaining):
        d = next_first + timedelta(days=i)
        cells.append(DayCell(date=d, is_current_month=False, is_today=False, wod_count=0))

    return cells[:GRID_CELLS]


def grid_rows(cells: list[DayCell]) -> list[list[DayCell]]:
    """Split cells into weeks."""
    return [cells[i : i + GRID_COLUMNS] for i in range(0, len(cells), GRID_COLUMNS)]


def previous_month(month: int, year: int) -> tuple[int, int]:
    if month == 1:
        return 12, year - 1
    return month - 1, year


def next_month(month: int, year: int) -> tuple[int, int]:
    if month == 12:
        return 1, year + 1
    return month + 1, year
