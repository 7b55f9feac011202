"""Named-job scheduling facade."""

from .jobs import JobManager, ScheduledJob

__all__ = ["JobManager", "ScheduledJob"]
