"""Argument models for LLM function calling; the JSON schemas are generated from them."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolArguments(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WeatherArguments(ToolArguments):
    city: str


class LocalTimeArguments(ToolArguments):
    location: str


class ScheduleWhen(ToolArguments):
    type: Literal["scheduled", "delayed", "cron", "no-schedule"] = Field(
        ...,
        description="'scheduled' for a date and time, 'delayed' for a delay in seconds, "
        "'cron' for a recurring cron expression, 'no-schedule' if the input has no schedule",
    )
    date: Optional[datetime] = Field(default=None, description="ISO 8601 date and time, for type 'scheduled'")
    delay_in_seconds: Optional[int] = Field(
        default=None, alias="delayInSeconds", description="Delay in seconds, for type 'delayed'"
    )
    cron: Optional[str] = Field(default=None, description="Cron expression, for type 'cron'")


class ScheduleTaskArguments(ToolArguments):
    description: str = Field(..., description="What should happen when the task runs")
    when: ScheduleWhen


class NoArguments(ToolArguments):
    pass


class CancelTaskArguments(ToolArguments):
    task_id: str = Field(..., alias="taskId", description="The ID of the task to cancel")


class BrowseArguments(ToolArguments):
    urls: List[str] = Field(..., description="URLs to visit, processed in order")


class CourseArguments(ToolArguments):
    course_name: str = Field(..., alias="courseName", description="Name of the golf course")


class TeeTimesArguments(CourseArguments):
    date: Optional[str] = Field(default=None, description="ISO date string, e.g. 2024-06-01")
