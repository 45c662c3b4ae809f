"""Calendar helpers shared by the analyzers."""

from datetime import date, datetime, timedelta

from boundary_insights.models import TimeOfDay

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def week_start(moment: datetime) -> date:
    """Monday of the week containing the moment."""
    day = moment.date()
    return day - timedelta(days=day.weekday())


def time_of_day_for_hour(hour: int) -> TimeOfDay:
    if 5 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 17:
        return TimeOfDay.AFTERNOON
    if 17 <= hour < 21:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT
