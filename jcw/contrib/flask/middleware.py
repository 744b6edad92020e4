"""
WSGI middleware tracing the requests served by a Flask application.
"""
from wsgiref.util import request_uri

from opentracing import Format
from opentracing import InvalidCarrierException
from opentracing import SpanContextCorruptedException
from opentracing import UnsupportedFormatException
from opentracing.ext import tags

from ...constants import PATCH_FLAG
from ...events import correlation_context
from ...internal.logger import get_logger
from ..trace_utils import active_tracer


log = get_logger(__name__)

COMPONENT = "flask"


def _headers_from_environ(environ):
    return {
        key[5:].replace("_", "-").lower(): value for key, value in environ.items() if key.startswith("HTTP_")
    }


def _extract_parent(tracer, environ):
    try:
        return tracer.extract(Format.HTTP_HEADERS, _headers_from_environ(environ))
    except (InvalidCarrierException, SpanContextCorruptedException, UnsupportedFormatException):
        log.debug("flask: ignoring invalid tracing headers", exc_info=True)
        return None


class TraceMiddleware(object):
    """Wrap each request in a server span, made active while the application runs."""

    def __init__(self, wsgi_app):
        self.wsgi_app = wsgi_app

    def __call__(self, environ, start_response):
        tracer = active_tracer()
        if tracer is None:
            return self.wsgi_app(environ, start_response)

        method = environ.get("REQUEST_METHOD", "GET")
        span_tags = {
            tags.COMPONENT: COMPONENT,
            tags.SPAN_KIND: tags.SPAN_KIND_RPC_SERVER,
            tags.HTTP_METHOD: method,
            tags.HTTP_URL: request_uri(environ),
        }

        with correlation_context():
            with tracer.start_active_span(method, child_of=_extract_parent(tracer, environ), tags=span_tags) as scope:
                span = scope.span

                def _start_response(status, headers, exc_info=None):
                    try:
                        span.set_tag(tags.HTTP_STATUS_CODE, int(status.split(" ", 1)[0]))
                    except ValueError:
                        log.debug("flask: unexpected status line %r", status)
                    return start_response(status, headers, exc_info)

                # the scope tags the span when the application raises
                return self.wsgi_app(environ, _start_response)


def install(app):
    """Put :class:`TraceMiddleware` in front of ``app``. Installing twice has no effect."""
    if getattr(app, PATCH_FLAG, False):
        return
    setattr(app, PATCH_FLAG, True)
    app.wsgi_app = TraceMiddleware(app.wsgi_app)


def uninstall(app):
    if not getattr(app, PATCH_FLAG, False):
        return
    setattr(app, PATCH_FLAG, False)
    if isinstance(app.wsgi_app, TraceMiddleware):
        app.wsgi_app = app.wsgi_app.wsgi_app
