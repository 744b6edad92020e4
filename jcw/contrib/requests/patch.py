from urllib import parse

from opentracing import Format
from opentracing.ext import tags
import requests
from wrapt import wrap_function_wrapper as _w

from ...constants import PATCH_FLAG
from ...internal.logger import get_logger
from ...internal.utils import ArgumentError
from ...internal.utils import get_argument_value
from ..trace_utils import active_tracer
from ..trace_utils import unwrap as _u


log = get_logger(__name__)

COMPONENT = "requests"
OPERATION_NAME = "requests.request"


def get_version():
    # type: () -> str
    return getattr(requests, "__version__", "")


def patch():
    """Activate http calls tracing"""
    if getattr(requests, PATCH_FLAG, False):
        return
    setattr(requests, PATCH_FLAG, True)

    _w("requests", "Session.send", _wrap_send)


def unpatch():
    """Disable traced sessions"""
    if not getattr(requests, PATCH_FLAG, False):
        return
    setattr(requests, PATCH_FLAG, False)

    _u(requests.Session, "send")


def _wrap_send(func, instance, args, kwargs):
    """Trace the `Session.send` instance method"""
    tracer = active_tracer()
    if tracer is None:
        return func(*args, **kwargs)

    try:
        request = get_argument_value(args, kwargs, 0, "request")
    except ArgumentError:
        return func(*args, **kwargs)

    url = request.url
    span_tags = {
        tags.COMPONENT: COMPONENT,
        tags.SPAN_KIND: tags.SPAN_KIND_RPC_CLIENT,
        tags.HTTP_METHOD: (request.method or "").upper(),
        tags.HTTP_URL: url,
    }
    hostname = parse.urlsplit(url).hostname
    if hostname:
        span_tags[tags.PEER_HOSTNAME] = hostname

    with tracer.start_active_span(OPERATION_NAME, tags=span_tags) as scope:
        span = scope.span
        try:
            tracer.inject(span.context, Format.HTTP_HEADERS, request.headers)
        except Exception:
            log.debug("requests: error injecting tracing headers", exc_info=True)

        response = func(*args, **kwargs)
        span.set_tag(tags.HTTP_STATUS_CODE, response.status_code)
        if response.status_code >= 500:
            span.set_tag(tags.ERROR, True)
        return response
