"""Scheduled pipeline jobs."""

from narrative.jobs.scheduler import create_scheduler, register_jobs

__all__ = ["create_scheduler", "register_jobs"]
