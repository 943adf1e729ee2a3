"""
Task scheduler - runs agent callbacks at a time, after a delay or on a cron schedule.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from ..logging import get_logger

logger = get_logger(__name__)

When = Union[datetime, int, str]


@dataclass
class Schedule:
    """A scheduled callback as reported to the model."""

    id: str
    callback: str
    payload: Any
    type: str  # "scheduled" | "delayed" | "cron"
    time: Optional[datetime] = None
    delay_in_seconds: Optional[int] = None
    cron: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "callback": self.callback,
            "payload": self.payload,
            "type": self.type,
            "time": self.time.isoformat() if self.time else None,
            "delayInSeconds": self.delay_in_seconds,
            "cron": self.cron,
        }


class TaskScheduler:
    """
    Schedules named callbacks on a target object.

    Example triggers:
    - datetime(2025, 6, 1, 9, 0) -> run once at that time
    - 3600 -> run once in an hour
    - "0 9 * * *" -> every day at 9am
    """

    def __init__(self, target: Any, scheduler: Optional[BackgroundScheduler] = None):
        self.target = target
        self.scheduler = scheduler or BackgroundScheduler()
        self.schedules: Dict[str, Schedule] = {}

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Scheduler started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    def schedule(self, when: When, callback: str, payload: Any = None) -> Schedule:
        """
        Schedule target.<callback>(payload).

        Raises:
            ValueError: Unknown callback or invalid trigger
        """
        func = getattr(self.target, callback, None)
        if not callable(func):
            raise ValueError(f"Unknown callback: {callback}")

        schedule_id = uuid.uuid4().hex[:12]
        if isinstance(when, datetime):
            trigger = DateTrigger(run_date=when)
            record = Schedule(id=schedule_id, callback=callback, payload=payload, type="scheduled", time=when)
        elif isinstance(when, int) and not isinstance(when, bool):
            if when < 0:
                raise ValueError(f"Delay must not be negative: {when}")
            run_date = datetime.now() + timedelta(seconds=when)
            trigger = DateTrigger(run_date=run_date)
            record = Schedule(
                id=schedule_id, callback=callback, payload=payload,
                type="delayed", time=run_date, delay_in_seconds=when,
            )
        elif isinstance(when, str):
            trigger = CronTrigger.from_crontab(when)
            record = Schedule(id=schedule_id, callback=callback, payload=payload, type="cron", cron=when)
        else:
            raise ValueError(f"Not a valid schedule input: {when!r}")

        self.scheduler.add_job(func, trigger=trigger, args=[payload], id=schedule_id)
        self.schedules[schedule_id] = record
        logger.info(f"Scheduled {callback} ({record.type}) with id {schedule_id}")
        return record

    def get_schedules(self) -> List[Schedule]:
        """Schedules that still have a pending run."""
        live = {job.id for job in self.scheduler.get_jobs()}
        for schedule_id in list(self.schedules):
            if schedule_id not in live:
                del self.schedules[schedule_id]
        return list(self.schedules.values())

    def cancel_schedule(self, schedule_id: str) -> None:
        """
        Raises:
            KeyError: No schedule with that id
        """
        try:
            self.scheduler.remove_job(schedule_id)
        except JobLookupError:
            self.schedules.pop(schedule_id, None)
            raise KeyError(schedule_id)
        self.schedules.pop(schedule_id, None)
        logger.info(f"Canceled schedule {schedule_id}")
