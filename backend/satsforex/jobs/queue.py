from __future__ import annotations

from redis import Redis
from rq import Queue
from rq.job import Job

from satsforex.config.settings import settings
from satsforex.jobs.refresh import run_refresh


def get_redis_connection() -> Redis:
    return Redis.from_url(settings.redis_url)


def get_queue(name: str | None = None) -> Queue:
    queue_name = name or settings.refresh_queue_name
    return Queue(name=queue_name, connection=get_redis_connection())


def enqueue_refresh() -> Job:
    queue = get_queue()
    return queue.enqueue(run_refresh)
