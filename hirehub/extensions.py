import threading
from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy
from redis import Redis
from rq import Queue
from flask import current_app

from .errors import TransientIOError

RQ_KEYS = {'job_timeout', 'timeout', 'at_front', 'depends_on', 'result_ttl', 'ttl', 'meta', 'description'}


class RQWrapper:
    def __init__(self):
        self.redis = None
        self.queue = None

    def init_app(self, app):
        url = app.config.get("REDIS_URL")
        if not url:
            app.logger.info('REDIS_URL not set, jobs run synchronously')
            self.redis = None
            self.queue = None
            return
        try:
            self.redis = Redis.from_url(url)
            self.queue = Queue("default", connection=self.redis)
        except Exception:
            # no redis server (dev machine): leave queue as None and run inline
            app.logger.exception('Redis/RQ init failed, falling back to sync execution')
            self.redis = None
            self.queue = None

    def _run_inline(self, args, kwargs):
        func = args[0] if args else None
        func_args = args[1:] if len(args) > 1 else ()
        safe_kwargs = {k: v for k, v in kwargs.items() if k not in RQ_KEYS}
        if func:
            return func(*func_args, **safe_kwargs)
        return None

    def enqueue(self, *args, **kwargs):
        # Prefer enqueueing to RQ, but call the function synchronously if
        # Redis/RQ is not reachable.
        if not self.queue:
            return self._run_inline(args, kwargs)

        try:
            return self.queue.enqueue(*args, **kwargs)
        except Exception:
            current_app.logger.exception('RQ enqueue failed, falling back to sync execution')
            return self._run_inline(args, kwargs)


db = SQLAlchemy()
rq = RQWrapper()

_local_locks = {}
_local_locks_guard = threading.Lock()


@contextmanager
def applicant_lock(applicant_id, timeout=300):
    """Serialize work on one applicant across workers.

    Uses a Redis lock when RQ is backed by Redis, an in-process lock otherwise.
    """
    if rq.redis is not None:
        lock = rq.redis.lock(f"hirehub:applicant:{applicant_id}", timeout=timeout, blocking_timeout=timeout)
        if not lock.acquire():
            raise TransientIOError(f"could not lock applicant {applicant_id}")
        try:
            yield
        finally:
            lock.release()
        return

    with _local_locks_guard:
        lock = _local_locks.setdefault(applicant_id, threading.Lock())
    with lock:
        yield
