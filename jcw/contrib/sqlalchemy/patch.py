from opentracing.ext import tags
import sqlalchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

from ...constants import PATCH_FLAG
from ...internal.logger import get_logger
from ..trace_utils import active_tracer
from ..trace_utils import set_error


log = get_logger(__name__)

COMPONENT = "sqlalchemy"
OPERATION_NAME = "sqlalchemy.query"

# Attribute of the execution context holding the query span
SPAN_ATTR = "_jcw_span"


def get_version():
    # type: () -> str
    return getattr(sqlalchemy, "__version__", "")


def patch():
    if getattr(sqlalchemy.engine, PATCH_FLAG, False):
        return
    setattr(sqlalchemy.engine, PATCH_FLAG, True)

    event.listen(Engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(Engine, "after_cursor_execute", _after_cursor_execute)
    event.listen(Engine, "handle_error", _handle_error)


def unpatch():
    if not getattr(sqlalchemy.engine, PATCH_FLAG, False):
        return
    setattr(sqlalchemy.engine, PATCH_FLAG, False)

    event.remove(Engine, "before_cursor_execute", _before_cursor_execute)
    event.remove(Engine, "after_cursor_execute", _after_cursor_execute)
    event.remove(Engine, "handle_error", _handle_error)


def _span_tags(conn, statement):
    span_tags = {
        tags.COMPONENT: COMPONENT,
        tags.SPAN_KIND: tags.SPAN_KIND_RPC_CLIENT,
        tags.DATABASE_TYPE: "sql",
        tags.DATABASE_STATEMENT: statement,
    }
    url = conn.engine.url
    if url.database:
        span_tags[tags.DATABASE_INSTANCE] = url.database
    if url.username:
        span_tags[tags.DATABASE_USER] = url.username
    span_tags["db.system"] = url.get_backend_name()
    return span_tags


def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    tracer = active_tracer()
    if tracer is None or context is None:
        return
    try:
        span = tracer.start_span(OPERATION_NAME, child_of=tracer.active_span, tags=_span_tags(conn, statement))
        setattr(context, SPAN_ATTR, span)
    except Exception:
        log.debug("sqlalchemy: error starting query span", exc_info=True)


def _finish(context):
    span = getattr(context, SPAN_ATTR, None)
    if span is None:
        return None
    setattr(context, SPAN_ATTR, None)
    return span


def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    span = _finish(context)
    if span is None:
        return
    rowcount = getattr(cursor, "rowcount", -1)
    if isinstance(rowcount, int) and rowcount >= 0:
        span.set_tag("db.row_count", rowcount)
    span.finish()


def _handle_error(exception_context):
    span = _finish(exception_context.execution_context)
    if span is None:
        return
    set_error(span, exception_context.original_exception)
    span.finish()
