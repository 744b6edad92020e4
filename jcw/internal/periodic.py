import threading
import typing  # noqa:F401

from .logger import get_logger


log = get_logger(__name__)


class PeriodicThread(threading.Thread):
    """Periodic thread.

    This class can be used to instantiate a worker thread that will run its `target` function every `interval`
    seconds.
    """

    def __init__(
        self,
        interval,  # type: float
        target,  # type: typing.Callable[[], typing.Any]
        name=None,  # type: typing.Optional[str]
        on_shutdown=None,  # type: typing.Optional[typing.Callable[[], typing.Any]]
    ):
        # type: (...) -> None
        """Create a periodic thread.

        :param interval: The interval in seconds to wait between execution of the periodic function.
        :param target: The periodic function to execute every interval.
        :param name: The name of the thread.
        :param on_shutdown: The function to call when the thread shuts down.
        """
        super(PeriodicThread, self).__init__(name=name)
        self._target = target
        self._on_shutdown = on_shutdown
        self.interval = interval
        self.quit = threading.Event()
        self.daemon = True

    def stop(self):
        """Stop the thread."""
        if self.is_alive():
            self.quit.set()

    def run(self):
        """Run the target function periodically."""
        while not self.quit.wait(self.interval):
            self._target()
        if self._on_shutdown is not None:
            self._on_shutdown()


class PeriodicWorkerThread(object):
    """Periodic worker thread.

    Runs `run_periodic` every `interval` seconds and `on_shutdown` once the worker is stopped.
    """

    _DEFAULT_INTERVAL = 1.0

    def __init__(
        self,
        interval=_DEFAULT_INTERVAL,  # type: float
        name=None,  # type: typing.Optional[str]
        daemon=True,  # type: bool
    ):
        # type: (...) -> None
        self._thread = PeriodicThread(interval, target=self.run_periodic, name=name, on_shutdown=self.on_shutdown)
        self._thread.daemon = daemon
        self.started = False

    def start(self):
        # type: () -> None
        """Start the periodic worker."""
        log.debug("Starting %s thread", self._thread.name)
        self._thread.start()
        self.started = True

    def stop(self):
        # type: () -> None
        """Stop the worker."""
        log.debug("Stopping %s thread", self._thread.name)
        self._thread.stop()

    def is_alive(self):
        # type: () -> bool
        return self._thread.is_alive()

    def join(self, timeout=None):
        # type: (typing.Optional[float]) -> None
        return self._thread.join(timeout)

    def run_periodic(self):
        # type: () -> None
        """Method executed every interval."""

    def on_shutdown(self):
        # type: () -> None
        """Method ran on worker shutdown."""
