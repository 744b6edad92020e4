"""
Framework notifications as seen by the event bridge.

Notifications travel over blinker signals. Flask's own signals (``request-started``,
``template-rendered``, ...) are looked up by name in :mod:`flask.signals`, any other
name resolves to the named signal of blinker's default namespace, so application
code can publish its own events::

    from jcw import events

    events.publish("start_processing.orders", sender=self, controller="orders")
    ...
    events.publish("process_action.orders", sender=self, status=200)

Start and finish notifications are joined on a correlation id. It is taken from the
``correlation_id`` (or ``transaction_id``) keyword when one is sent, and from the
current correlation context otherwise.
"""
import contextlib
import contextvars
import threading
import time
from typing import Any
from typing import Dict
from typing import Iterator
from typing import Optional
import uuid

import attr
import blinker

from .internal.utils.formats import to_text


CORRELATION_KEYS = ("correlation_id", "transaction_id")
EXCEPTION_KEYS = ("exception_object", "exception")

_correlation_id = contextvars.ContextVar("jcw_correlation_id", default=None)  # type: contextvars.ContextVar


def current_correlation_id():
    # type: () -> Any
    """The correlation id of the running code, the thread identity when none was set."""
    value = _correlation_id.get()
    if value is None:
        return threading.get_ident()
    return value


@contextlib.contextmanager
def correlation_context(value=None):
    # type: (Optional[Any]) -> Iterator[Any]
    """Scope a correlation id, a fresh one when ``value`` is not given."""
    if value is None:
        value = uuid.uuid4().hex
    token = _correlation_id.set(value)
    try:
        yield value
    finally:
        _correlation_id.reset(token)


def _exception_from(payload):
    for key in EXCEPTION_KEYS:
        value = payload.get(key)
        if value is None:
            continue
        if isinstance(value, BaseException):
            return value
        # ("ZeroDivisionError", "divided by 0") as sent by instrumenters
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return value
    return None


@attr.s(slots=True, frozen=True)
class Notification(object):
    """A single framework notification."""

    name = attr.ib(type=str)
    sender = attr.ib(default=None)
    payload = attr.ib(factory=dict)
    correlation_id = attr.ib(default=None)
    exception = attr.ib(default=None)
    timestamp = attr.ib(factory=time.time)

    @classmethod
    def from_signal(cls, name, sender, payload):
        # type: (str, Any, Dict[str, Any]) -> Notification
        payload = dict(payload)
        correlation_id = None
        for key in CORRELATION_KEYS:
            if payload.get(key) is not None:
                correlation_id = payload.pop(key)
                break
        if correlation_id is None:
            correlation_id = current_correlation_id()

        return cls(
            name=name,
            sender=sender,
            payload=payload,
            correlation_id=correlation_id,
            exception=_exception_from(payload),
        )

    @property
    def error_kind(self):
        # type: () -> Optional[str]
        if self.exception is None:
            return None
        if isinstance(self.exception, BaseException):
            return type(self.exception).__name__
        return to_text(self.exception[0])

    @property
    def error_message(self):
        # type: () -> Optional[str]
        if self.exception is None:
            return None
        if isinstance(self.exception, BaseException):
            return to_text(self.exception)
        return to_text(self.exception[1])

    def log_fields(self):
        # type: () -> Dict[str, Any]
        """Key/values logged on a span for this notification.

        Entries with a non string key, an exception, or a value that cannot be
        rendered are left out.
        """
        fields = {"event": self.name}  # type: Dict[str, Any]
        for key, value in self.payload.items():
            if not isinstance(key, str) or key in EXCEPTION_KEYS or key in fields:
                continue
            if value is None or isinstance(value, (str, bool, int, float)):
                fields[key] = value
                continue
            text = to_text(value)
            if text is not None:
                fields[key] = text
        return fields


@attr.s(slots=True, frozen=True)
class EventPair(object):
    """A start notification and the finish notification closing it."""

    start = attr.ib(type=str)
    finish = attr.ib(type=str)
    operation_name = attr.ib(type=str)


START_PROCESSING_PREFIX = "start_processing."
PROCESS_ACTION_PREFIX = "process_action."

_pairs = {}  # type: Dict[str, EventPair]
_error_signals = {}  # type: Dict[str, str]


def register_pair(start, finish, operation_name=None):
    # type: (str, str, Optional[str]) -> EventPair
    pair = EventPair(start=start, finish=finish, operation_name=operation_name or finish)
    _pairs[start] = pair
    _pairs[finish] = pair
    return pair


def register_error_signal(name, start):
    # type: (str, str) -> None
    """Notifications named ``name`` mark the open span of the pair starting with ``start`` as errored."""
    _error_signals[name] = start


def pair_for(name):
    # type: (str) -> Optional[EventPair]
    """The pair ``name`` belongs to, as start or finish, if any."""
    pair = _pairs.get(name)
    if pair is not None:
        return pair

    if name.startswith(START_PROCESSING_PREFIX):
        namespace = name[len(START_PROCESSING_PREFIX) :]
        return EventPair(start=name, finish=PROCESS_ACTION_PREFIX + namespace, operation_name=PROCESS_ACTION_PREFIX + namespace)
    if name.startswith(PROCESS_ACTION_PREFIX):
        namespace = name[len(PROCESS_ACTION_PREFIX) :]
        return EventPair(start=START_PROCESSING_PREFIX + namespace, finish=name, operation_name=name)
    return None


def error_signal_start(name):
    # type: (str) -> Optional[str]
    return _error_signals.get(name)


register_pair("request-started", "request-finished", "flask.request")
register_pair("before-render-template", "template-rendered", "flask.render_template")
register_pair("appcontext-pushed", "appcontext-popped", "flask.appcontext")
register_error_signal("got-request-exception", "request-started")


def _flask_signals():
    # type: () -> Dict[str, blinker.NamedSignal]
    try:
        from flask import signals
    except ImportError:
        return {}
    return {s.name: s for s in vars(signals).values() if isinstance(s, blinker.NamedSignal)}


def signal_for(name):
    # type: (str) -> blinker.NamedSignal
    """The blinker signal notifications called ``name`` are sent on."""
    flask_signal = _flask_signals().get(name)
    if flask_signal is not None:
        return flask_signal
    return blinker.signal(name)


def publish(name, sender=None, **payload):
    """Send the notification ``name`` to its subscribers."""
    return signal_for(name).send(sender, **payload)
