"""
Bridge from framework notifications to spans.

For every subscribed notification name the bridge connects a receiver to the
matching blinker signal. What the receiver does depends on the other names::

    subscribe_to = ["start_processing.orders", "process_action.orders"]

Both halves of the ``start_processing``/``process_action`` pair are subscribed, so
``start_processing.orders`` opens a span (child of the active span, if any) and
``process_action.orders`` sent with the same correlation id finishes it. Each
notification is logged on the span.

A name whose pair partner is not subscribed, or that has no pair at all, only
annotates: its payload is logged on the active span when there is one.
Error signals such as ``got-request-exception`` tag the open span of their pair.

Receivers never raise: a notification that cannot be handled is dropped and the
failure is logged at debug level.
"""
import collections
import threading
from typing import Any  # noqa:F401
from typing import Callable  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Iterable  # noqa:F401
from typing import List  # noqa:F401
from typing import Tuple  # noqa:F401

from opentracing.ext import tags

from . import events
from .constants import COMPONENT
from .constants import EVENT_TAG
from .contrib.trace_utils import set_error
from .internal.logger import get_logger
from .tracer import global_tracer


log = get_logger(__name__)


def _set_error(span, notification):
    # type: (Any, events.Notification) -> None
    if isinstance(notification.exception, BaseException):
        set_error(span, notification.exception)
    else:
        set_error(span, kind=notification.error_kind, message=notification.error_message)


class EventBridge(object):
    """Turn start/finish notification pairs into spans."""

    def __init__(self, subscribe_to=(), tracer_getter=global_tracer):
        # type: (Iterable[str], Callable[[], Any]) -> None
        self.subscribe_to = list(subscribe_to)
        self._tracer_getter = tracer_getter
        self._lock = threading.Lock()
        # (pair start name, correlation id) -> stack of (span, start time)
        self._open = collections.defaultdict(list)  # type: Dict[Tuple[str, Any], List[Tuple[Any, float]]]
        self._receivers = []  # type: List[Tuple[Any, Callable]]
        self.enabled = False

    @property
    def subscribed(self):
        # type: () -> List[str]
        return [signal.name for signal, _ in self._receivers]

    def _receiver_for(self, name):
        # type: (str) -> Callable
        subscribed = set(self.subscribe_to)
        pair = events.pair_for(name)

        if events.error_signal_start(name) in subscribed:
            handler = self._on_error
        elif pair is not None and pair.start in subscribed and pair.finish in subscribed:
            handler = self._on_start if name == pair.start else self._on_finish
        else:
            handler = self._on_annotate

        def receiver(sender, **payload):
            if not self.enabled:
                return
            try:
                handler(events.Notification.from_signal(name, sender, payload))
            except Exception:
                log.debug("bridge: failed to handle notification %s", name, exc_info=True)

        return receiver

    def subscribe(self):
        # type: () -> None
        """Connect one receiver per subscribed name. Does nothing when called twice."""
        if self._receivers:
            return
        for name in dict.fromkeys(self.subscribe_to):
            signal = events.signal_for(name)
            receiver = self._receiver_for(name)
            signal.connect(receiver, weak=False)
            self._receivers.append((signal, receiver))
        self.enabled = bool(self._receivers)
        log.debug("bridge: subscribed to %s", self.subscribed)

    def unsubscribe(self):
        # type: () -> None
        for signal, receiver in self._receivers:
            signal.disconnect(receiver)
        self._receivers = []
        self.enabled = False

    def pending(self):
        # type: () -> int
        """Number of spans opened and not yet finished."""
        with self._lock:
            return sum(len(stack) for stack in self._open.values())

    def close(self):
        # type: () -> None
        """Disconnect every receiver and finish the spans still open."""
        self.unsubscribe()
        with self._lock:
            leftovers = [span for stack in self._open.values() for span, _ in stack]
            self._open.clear()
        for span in leftovers:
            span.log_kv({"event": "abandoned"})
            span.finish()

    def _key(self, pair, notification):
        key = (pair.start, notification.correlation_id)
        # raises TypeError for an unhashable correlation id
        hash(key)
        return key

    def _on_start(self, notification):
        # type: (events.Notification) -> None
        pair = events.pair_for(notification.name)
        key = self._key(pair, notification)
        tracer = self._tracer_getter()
        span = tracer.start_span(
            operation_name=pair.operation_name,
            child_of=tracer.active_span,
            tags={tags.COMPONENT: COMPONENT, EVENT_TAG: notification.name},
            start_time=notification.timestamp,
        )
        span.log_kv(notification.log_fields())
        with self._lock:
            self._open[key].append((span, notification.timestamp))

    def _on_finish(self, notification):
        # type: (events.Notification) -> None
        pair = events.pair_for(notification.name)
        key = self._key(pair, notification)
        with self._lock:
            stack = self._open.get(key)
            if not stack:
                log.debug("bridge: %s without a matching %s, ignored", notification.name, pair.start)
                return
            span, started = stack.pop()
            if not stack:
                del self._open[key]

        span.log_kv(notification.log_fields())
        if notification.exception is not None:
            _set_error(span, notification)
        span.finish(finish_time=notification.timestamp)
        log.debug("bridge: %s finished after %.3fs", pair.operation_name, notification.timestamp - started)

    def _on_error(self, notification):
        # type: (events.Notification) -> None
        start = events.error_signal_start(notification.name)
        with self._lock:
            stack = self._open.get((start, notification.correlation_id))
            span = stack[-1][0] if stack else None
        if span is None:
            return
        _set_error(span, notification)

    def _on_annotate(self, notification):
        # type: (events.Notification) -> None
        span = self._tracer_getter().active_span
        if span is None:
            return
        span.log_kv(notification.log_fields())
        if notification.exception is not None:
            _set_error(span, notification)
