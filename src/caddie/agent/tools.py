"""
Tools for the chat agent.

Tools either require human confirmation or execute automatically. Confirm-required
tools are listed without an execute function; their logic is in EXECUTIONS.
"""

from datetime import datetime
from typing import Any, Dict

from .context import ToolContext
from .registry import ToolDefinition, ToolFunction, ToolMode, ToolRegistry
from .tool_schemas import (
    BrowseArguments,
    CancelTaskArguments,
    CourseArguments,
    LocalTimeArguments,
    NoArguments,
    ScheduleTaskArguments,
    TeeTimesArguments,
    WeatherArguments,
)
from ..discovery.search import resolve_official_site
from ..discovery.tee_times import resolve_tee_times_url
from ..logging import get_logger

logger = get_logger(__name__)

# Scheduler callback on the agent that receives scheduled task descriptions
SCHEDULED_TASK_CALLBACK = "execute_task"


def get_local_time(args: LocalTimeArguments, context: ToolContext) -> str:
    logger.info(f"Getting local time for {args.location}")
    return "10am"


def schedule_task(args: ScheduleTaskArguments, context: ToolContext) -> str:
    scheduler = context.require_scheduler()
    when = args.when

    if when.type == "no-schedule":
        return "Not a valid schedule input"

    if when.type == "scheduled":
        value = when.date
    elif when.type == "delayed":
        value = when.delay_in_seconds
    else:
        value = when.cron
    if value is None:
        raise ValueError(f"not a valid schedule input: missing value for type {when.type}")

    try:
        scheduler.schedule(value, SCHEDULED_TASK_CALLBACK, args.description)
    except Exception as e:
        logger.error(f"Error scheduling task: {e}")
        return f"Error scheduling task: {e}"

    shown = value.isoformat() if isinstance(value, datetime) else value
    return f'Task scheduled for type "{when.type}" : {shown}'


def get_scheduled_tasks(args: NoArguments, context: ToolContext) -> Any:
    scheduler = context.require_scheduler()
    try:
        tasks = scheduler.get_schedules()
        if not tasks:
            return "No scheduled tasks found."
        return [task.to_dict() for task in tasks]
    except Exception as e:
        logger.error(f"Error listing scheduled tasks: {e}")
        return f"Error listing scheduled tasks: {e}"


def cancel_scheduled_task(args: CancelTaskArguments, context: ToolContext) -> str:
    scheduler = context.require_scheduler()
    try:
        scheduler.cancel_schedule(args.task_id)
        return f"Task {args.task_id} has been successfully canceled."
    except Exception as e:
        logger.error(f"Error canceling scheduled task: {e}")
        return f"Error canceling task {args.task_id}: {e}"


def browse(args: BrowseArguments, context: ToolContext) -> Any:
    browser = context.require_browser()
    try:
        return browser.browse(args.urls)
    except Exception as e:
        logger.error(f"Error during browsing: {e}")
        return f"Error during browsing: {e}"


def find_golf_course_website(args: CourseArguments, context: ToolContext) -> str:
    browser = context.require_browser()
    try:
        site = resolve_official_site(browser, args.course_name, cache=context.cache)
        return site.url or site.reason
    except Exception as e:
        logger.error(f"Error finding golf course website: {e}")
        return f"Error finding golf course website: {e}"


def find_tee_times(args: TeeTimesArguments, context: ToolContext) -> str:
    browser = context.require_browser()
    try:
        result = resolve_tee_times_url(browser, args.course_name, date=args.date, cache=context.cache)
        return result.message()
    except Exception as e:
        logger.error(f"[TEE_TIMES] Unexpected error: {e}", exc_info=True)
        return f"Unexpected error: {e}"


def get_weather_information(args: WeatherArguments, context: ToolContext) -> str:
    logger.info(f"Getting weather information for {args.city}")
    return f"The weather in {args.city} is sunny"


TOOLS = [
    ToolDefinition(
        name="getWeatherInformation",
        description="show the weather in a given city to the user",
        parameters=WeatherArguments,
        mode=ToolMode.CONFIRM_REQUIRED,
    ),
    ToolDefinition(
        name="getLocalTime",
        description="get the local time for a specified location",
        parameters=LocalTimeArguments,
        mode=ToolMode.AUTONOMOUS,
        execute=get_local_time,
    ),
    ToolDefinition(
        name="scheduleTask",
        description="A tool to schedule a task to be executed at a later time",
        parameters=ScheduleTaskArguments,
        mode=ToolMode.AUTONOMOUS,
        execute=schedule_task,
    ),
    ToolDefinition(
        name="getScheduledTasks",
        description="List all tasks that have been scheduled",
        parameters=NoArguments,
        mode=ToolMode.AUTONOMOUS,
        execute=get_scheduled_tasks,
    ),
    ToolDefinition(
        name="cancelScheduledTask",
        description="Cancel a scheduled task using its ID",
        parameters=CancelTaskArguments,
        mode=ToolMode.AUTONOMOUS,
        execute=cancel_scheduled_task,
    ),
    ToolDefinition(
        name="browse",
        description="Browse the web and extract the links of each page.",
        parameters=BrowseArguments,
        mode=ToolMode.AUTONOMOUS,
        execute=browse,
    ),
    ToolDefinition(
        name="findGolfCourseWebsite",
        description="Find the official website URL of a golf course by searching Google",
        parameters=CourseArguments,
        mode=ToolMode.AUTONOMOUS,
        execute=find_golf_course_website,
    ),
    ToolDefinition(
        name="findTeeTimes",
        description="Find the tee times page URL for a golf course, optionally for a specific date",
        parameters=TeeTimesArguments,
        mode=ToolMode.AUTONOMOUS,
        execute=find_tee_times,
    ),
]

# Logic for the confirm-required tools above, run only after a human approved the call
EXECUTIONS: Dict[str, ToolFunction] = {
    "getWeatherInformation": get_weather_information,
}


def default_registry() -> ToolRegistry:
    return ToolRegistry(TOOLS, EXECUTIONS)
