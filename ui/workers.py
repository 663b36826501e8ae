import logging

from PySide6.QtCore import QObject, QThread, Signal, Slot

logger = logging.getLogger(__name__)


class TaskWorker(QObject):
    finished = Signal(object)
    failed = Signal(object)

    def __init__(self, fn, *args, **kwargs):
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs

    def run(self):
        try:
            result = self.fn(*self.args, **self.kwargs)
        except Exception as exc:
            logger.exception("Background task %s failed", getattr(self.fn, "__name__", self.fn))
            self.failed.emit(exc)
            return
        self.finished.emit(result)


class _Relay(QObject):
    """Lives in the GUI thread so callbacks run there, not in the worker."""

    def __init__(self, on_done, on_fail, parent=None):
        super().__init__(parent)
        self.on_done = on_done
        self.on_fail = on_fail

    @Slot(object)
    def done(self, result):
        if self.on_done:
            self.on_done(result)

    @Slot(object)
    def fail(self, exc):
        if self.on_fail:
            self.on_fail(exc)


class TaskRunner(QObject):
    """Starts ``TaskWorker`` jobs on their own QThread and keeps them alive until they end."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._jobs: set = set()

    def start(self, fn, *args, on_done=None, on_fail=None, **kwargs):
        thread = QThread()
        worker = TaskWorker(fn, *args, **kwargs)
        relay = _Relay(on_done, on_fail)
        worker.moveToThread(thread)

        thread.started.connect(worker.run)
        worker.finished.connect(relay.done)
        worker.failed.connect(relay.fail)
        worker.finished.connect(thread.quit)
        worker.failed.connect(thread.quit)
        thread.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)

        job = (thread, worker, relay)
        self._jobs.add(job)
        thread.finished.connect(lambda: self._jobs.discard(job))
        thread.start()
        return job

    def wait_all(self, timeout_ms: int = 3000):
        for thread, _worker, _relay in list(self._jobs):
            thread.quit()
            thread.wait(timeout_ms)
