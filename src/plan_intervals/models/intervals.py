"""Intervals.icu API event models.

Reference: https://intervals.icu/api/v1/docs/swagger-ui/index.html
Forum guide: https://forum.intervals.icu/t/api-access-to-intervals-icu/609
"""

from pydantic import BaseModel, Field


class IntervalsEvent(BaseModel):
    """A calendar event (planned workout or note) for Intervals.icu.

    Upload via: POST /api/v1/athlete/{id}/events
    """

    external_id: str | None = Field(
        default=None,
        description="Stable ID of the source workout, lets re-uploads be recognised",
    )
    category: str = Field(default="WORKOUT", description="WORKOUT or NOTE")
    start_date_local: str = Field(description="ISO datetime: YYYY-MM-DDT00:00:00")
    name: str
    description: str = Field(
        description="Workout steps in Intervals.icu text format. "
        "Server parses this to generate visual step blocks."
    )
    type: str | None = Field(
        default=None, description="Run, Ride, Swim, WeightTraining. Omitted for notes."
    )
    moving_time: int | None = Field(default=None, description="Planned duration in seconds")
    distance: float | None = Field(default=None, description="Planned distance in metres")
