"""
=============================================================================
WORKER POOL
=============================================================================

Connections are served by a fixed set of reusable threads pulling from a
bounded queue, not a thread per connection.

    accept loop ──submit()──► [ queue (bounded) ] ──get()──► Worker 0..N

    ┌──────────────┬───────────────────────────────────────────────────────┐
    │ queue full   │ submit() returns False; the server answers 503        │
    │ all busy     │ one more worker is started, up to max_workers         │
    │ shutdown()   │ one None per worker; each exits when it takes one      │
    └──────────────┴───────────────────────────────────────────────────────┘

A task that raises is logged and counted; the worker keeps running.

=============================================================================
"""

import queue
import threading
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A deferred call."""

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)


class Worker(threading.Thread):
    """Daemon thread running tasks until it receives None."""

    def __init__(self, task_queue: "queue.Queue[Optional[Task]]", worker_id: int, idle_timeout: float = 1.0):
        super().__init__(name=f"crudapi-worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout
        self.state = WorkerState.IDLE
        self.tasks_completed = 0
        self.tasks_failed = 0
        self._stop_event = threading.Event()

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")
        while not self._stop_event.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._execute(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute(self, task: Task) -> None:
        self.state = WorkerState.BUSY
        started = time.perf_counter()
        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
        except Exception as e:
            logger.exception(f"Worker {self.worker_id} task failed: {e}")
            self.tasks_failed += 1
        finally:
            self.state = WorkerState.IDLE
            logger.debug(
                f"Worker {self.worker_id} finished task in {time.perf_counter() - started:.3f}s"
            )

    def stop(self) -> None:
        self._stop_event.set()


class ThreadPool:
    """
    Bounded pool of worker threads.

        pool = ThreadPool(min_workers=4, max_workers=16)
        pool.start()
        if not pool.submit(handle, args=(conn,)):
            reject(conn)
        pool.shutdown()
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 100,
        idle_timeout: float = 1.0,
    ):
        if min_workers < 1 or max_workers < min_workers:
            raise ValueError("need 1 <= min_workers <= max_workers")

        self.min_workers = min_workers
        self.max_workers = max_workers
        self.idle_timeout = idle_timeout

        self._queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: List[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._closing = False

    def start(self) -> None:
        with self._lock:
            if self._started:
                return
            logger.info(f"Starting thread pool with {self.min_workers} workers")
            for _ in range(self.min_workers):
                self._spawn()
            self._started = True
            self._closing = False

    def _spawn(self) -> Worker:
        # Caller holds self._lock.
        worker = Worker(self._queue, len(self._workers), self.idle_timeout)
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Queue a call without blocking.

        Returns:
            False when the queue is full.

        Raises:
            RuntimeError: The pool is not running.
        """
        if not self._started or self._closing:
            raise RuntimeError("Thread pool is not running")

        try:
            self._queue.put_nowait(Task(func, args, kwargs or {}))
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self) -> None:
        with self._lock:
            if len(self._workers) >= self.max_workers or self._queue.empty():
                return
            if all(w.state == WorkerState.BUSY for w in self._workers):
                logger.debug(f"Scaling up to {len(self._workers) + 1} workers")
                self._spawn()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """
        Stop every worker after the tasks already queued.

        Args:
            wait: Join the worker threads.
            timeout: Overall limit for joining, in seconds.
        """
        with self._lock:
            if not self._started:
                return
            self._closing = True
            workers = list(self._workers)

        logger.info("Shutting down thread pool...")
        for _ in workers:
            # Blocks while the queue is full; workers are still draining it.
            self._queue.put(None)

        if wait:
            deadline = None if timeout is None else time.monotonic() + timeout
            for worker in workers:
                remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
                worker.join(remaining)
                if worker.is_alive():
                    logger.warning(f"Worker {worker.worker_id} did not stop in time")
                    worker.stop()

        totals = self.stats()
        with self._lock:
            self._workers.clear()
            self._started = False
        logger.info(
            f"Thread pool shutdown complete: {totals['completed']} tasks completed, "
            f"{totals['failed']} failed"
        )

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "workers": len(self._workers),
                "busy": sum(1 for w in self._workers if w.state == WorkerState.BUSY),
                "queued": self._queue.qsize(),
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            }
