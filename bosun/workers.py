"""
Bosun worker pool: bounded, fixed-size offload for asynchronous commands.

WorkerPool wraps concurrent.futures.ThreadPoolExecutor and adds a capacity
bound (queued + running tasks) with an overflow policy:
- "block": the submitter waits until a slot frees up.
- "reject": submit() raises RejectedTaskError (TASK_REJECTED) at once.

No cancellation and no timeouts; submit() returns the Future.
"""
import concurrent.futures
import logging
import threading

from .faults import *
from .utils import *

logger = logging.getLogger(__name__)

OVERFLOW_POLICIES = ("block", "reject")


class WorkerPool:
    def __init__(self, workers=4, /, *, capacity=Unset, overflow="block", name="bosun"):
        """
        Parameters
        - workers: int >= 1, fixed number of threads.
        - capacity: int >= workers, or None for unbounded (default 64).
        - overflow: "block" or "reject".
        - name: thread name prefix.
        """
        if not isinstance(workers, int) or isinstance(workers, bool):
            raise TypeError("worker-pool 'workers' must be an integer")
        elif workers < 1:
            raise ValueError("worker-pool 'workers' must be at least 1")

        capacity = coalesce(capacity, max(64, workers))
        if capacity is not None:
            if not isinstance(capacity, int) or isinstance(capacity, bool):
                raise TypeError("worker-pool 'capacity' must be an integer or None")
            elif capacity < workers:
                raise ValueError("worker-pool 'capacity' cannot be lower than 'workers'")

        if overflow not in OVERFLOW_POLICIES:
            raise ValueError(f"worker-pool 'overflow' must be one of {', '.join(map(repr, OVERFLOW_POLICIES))}")

        self._workers = workers
        self._capacity = capacity
        self._overflow = overflow
        self._slots = threading.BoundedSemaphore(capacity) if capacity is not None else None
        self._lock = threading.Lock()
        self._closed = False
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix=name)

    workers = property(lambda self: self._workers)
    capacity = property(lambda self: self._capacity)
    overflow = property(lambda self: self._overflow)
    closed = property(lambda self: self._closed)

    def _reject(self, reason, hint):
        trigger(RejectedTaskError(
            reason,
            title="task rejected",
            code=FaultCode.TASK_REJECTED,
            hint=hint,
            capacity=self._capacity,
        ))

    def submit(self, function, /, *args, **kwargs):
        """
        Schedule function(*args, **kwargs) and return its Future.

        Raises RejectedTaskError when the pool is shut down, or when it is
        full and the overflow policy is "reject".
        """
        if self._closed:
            self._reject("worker pool is shut down", "create a new pool or dispatcher")

        if self._slots is not None:
            if not self._slots.acquire(blocking=self._overflow == "block"):
                logger.debug("worker pool full (%d tasks), rejecting", self._capacity)
                self._reject(
                    "worker pool is full (%d tasks)" % self._capacity,
                    "raise the pool capacity or use the 'block' overflow policy",
                )

        try:
            with self._lock:
                if self._closed:
                    self._reject("worker pool is shut down", "create a new pool or dispatcher")
                future = self._executor.submit(function, *args, **kwargs)
        except BaseException:
            if self._slots is not None:
                self._slots.release()
            raise

        if self._slots is not None:
            future.add_done_callback(lambda _: self._slots.release())
        return future

    def shutdown(self, wait=True):
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, *unused):
        self.shutdown()

    def __repr__(self):
        return f"worker-pool(workers={self._workers!r}, capacity={self._capacity!r}, overflow={self._overflow!r})"


__all__ = (
    "WorkerPool",
)
