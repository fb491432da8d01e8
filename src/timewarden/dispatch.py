from __future__ import annotations

"""Runs gateway calls off the GUI thread and delivers results back onto it.

``submit(job, on_success, on_failure)`` is the only contract the poller and
the store rely on. Callbacks always run on the thread that owns the invoker,
so state is only ever mutated there.
"""

import logging
from typing import Any, Callable

from PyQt6.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal

from .gateway import RemoteCallError

logger = logging.getLogger(__name__)

Job = Callable[[], Any]
SuccessCallback = Callable[[Any], None]
FailureCallback = Callable[[RemoteCallError], None]


def run_job(job: Job) -> tuple[bool, Any]:
    """Execute ``job`` and normalise any failure into a ``RemoteCallError``."""
    try:
        return True, job()
    except RemoteCallError as e:
        return False, e
    except Exception as e:
        logger.exception("unexpected error in remote job")
        return False, RemoteCallError(getattr(job, "__name__", "job"), e)


class _CallTask(QRunnable):
    def __init__(self, invoker: "ThreadPoolInvoker", job: Job, on_success, on_failure):
        super().__init__()
        self._invoker = invoker
        self._job = job
        self._on_success = on_success
        self._on_failure = on_failure

    def run(self) -> None:  # worker thread
        ok, payload = run_job(self._job)
        callback = self._on_success if ok else self._on_failure
        self._invoker._completed.emit(self, (callback, payload))


class ThreadPoolInvoker(QObject):
    _completed = pyqtSignal(object, object)  # task, (callback, payload)

    def __init__(self, pool: QThreadPool | None = None):
        super().__init__()
        self._pool = pool or QThreadPool.globalInstance()
        self._tasks: set[_CallTask] = set()
        self._completed.connect(self._deliver)

    def submit(self, job: Job, on_success: SuccessCallback, on_failure: FailureCallback) -> None:
        task = _CallTask(self, job, on_success, on_failure)
        task.setAutoDelete(False)
        self._tasks.add(task)
        self._pool.start(task)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def _deliver(self, task: _CallTask, packed: tuple) -> None:
        self._tasks.discard(task)
        callback, payload = packed
        callback(payload)


__all__ = ["ThreadPoolInvoker", "run_job"]
