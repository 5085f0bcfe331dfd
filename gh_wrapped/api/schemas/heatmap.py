from datetime import date

from pydantic import BaseModel


class HeatmapDay(BaseModel):
    """Single day item used in the calendar heatmap response."""

    date: date
    weekday: int
    count: int
    level: int


class HeatmapWeek(BaseModel):
    """Week bucket closed on Saturday or at the end of the year so far."""

    week_start: date
    days: list[HeatmapDay]


class HeatmapResponse(BaseModel):
    """Contribution calendar grouped for heatmap rendering."""

    username: str
    total: int
    weeks: list[HeatmapWeek]
