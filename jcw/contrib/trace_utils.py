"""
Helpers shared by the integrations.
"""
from typing import Any  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Optional  # noqa:F401

from opentracing.ext import tags

from ..tracer import global_tracer
from ..tracer import is_global_tracer_registered


class NotWrappedError(Exception):
    pass


def unwrap(obj, attr):
    # type: (Any, str) -> None
    try:
        setattr(obj, attr, getattr(obj, attr).__wrapped__)
    except AttributeError:
        raise NotWrappedError("{}.{} is not wrapped".format(obj, attr))


def active_tracer():
    """The global tracer, or ``None`` while no tracer is installed."""
    if not is_global_tracer_registered():
        return None
    return global_tracer()


def set_error(span, exc=None, kind=None, message=None):
    # type: (Any, Optional[BaseException], Optional[str], Optional[str]) -> None
    """Tag ``span`` as errored and log the error on it.

    ``kind`` and ``message`` default to the type name and the text of ``exc``.
    """
    span.set_tag(tags.ERROR, True)
    fields = {"event": tags.ERROR}  # type: Dict[str, Any]
    if exc is not None:
        fields["error.kind"] = type(exc).__name__
        fields["error.object"] = exc
        fields["message"] = str(exc)
    if kind is not None:
        fields["error.kind"] = kind
    if message is not None:
        fields["message"] = message
    span.log_kv(fields)
