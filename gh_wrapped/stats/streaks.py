from collections.abc import Sequence

from gh_wrapped.stats.models import CalendarDay
from gh_wrapped.stats.models import ProductivityAnalysis
from gh_wrapped.stats.models import StreakStats


WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def calculate_streaks(calendar: Sequence[CalendarDay]) -> StreakStats:
    """Compute current and longest runs of active days.

    The current streak is anchored at the latest date in the calendar,
    not at today's date.
    """

    current_streak = 0
    for day in sorted(calendar, key=lambda item: item.date, reverse=True):
        if day.count <= 0:
            break
        current_streak += 1

    longest_streak = 0
    running_streak = 0
    total_active_days = 0
    for day in sorted(calendar, key=lambda item: item.date):
        if day.count > 0:
            running_streak += 1
            total_active_days += 1
            longest_streak = max(longest_streak, running_streak)
        else:
            running_streak = 0

    return StreakStats(
        current_streak=current_streak,
        longest_streak=longest_streak,
        total_active_days=total_active_days,
    )


def most_productive_day(calendar: Sequence[CalendarDay]) -> str:
    """Return the weekday name with the most contributions.

    Ties go to the earliest weekday starting from Sunday, so an empty or
    inactive calendar yields "Sunday".
    """

    totals = [0] * len(WEEKDAY_NAMES)
    for day in calendar:
        totals[day.weekday] += day.count
    return WEEKDAY_NAMES[totals.index(max(totals))]


def most_productive_month(calendar: Sequence[CalendarDay]) -> str:
    """Return the month name with the most contributions.

    Months are keyed by `YYYY-MM`; ties go to the earliest key. An empty
    calendar yields "January".
    """

    totals: dict[str, int] = {}
    for day in calendar:
        month_key = day.date.isoformat()[:7]
        totals[month_key] = totals.get(month_key, 0) + day.count

    if not totals:
        return MONTH_NAMES[0]

    best_key = max(sorted(totals), key=lambda key: totals[key])
    return MONTH_NAMES[int(best_key[5:7]) - 1]


def analyze(calendar: Sequence[CalendarDay]) -> ProductivityAnalysis:
    return ProductivityAnalysis(
        streak_stats=calculate_streaks(calendar),
        most_productive_day=most_productive_day(calendar),
        most_productive_month=most_productive_month(calendar),
    )
