from opentracing.ext import tags
import peewee
from wrapt import wrap_function_wrapper as _w

from ...constants import PATCH_FLAG
from ...internal.utils import ArgumentError
from ...internal.utils import get_argument_value
from ..trace_utils import active_tracer
from ..trace_utils import unwrap as _u


COMPONENT = "peewee"
OPERATION_NAME = "peewee.query"


def get_version():
    # type: () -> str
    return getattr(peewee, "__version__", "")


def patch():
    if getattr(peewee, PATCH_FLAG, False):
        return
    setattr(peewee, PATCH_FLAG, True)

    _w("peewee", "Database.execute_sql", _wrap_execute_sql)


def unpatch():
    if not getattr(peewee, PATCH_FLAG, False):
        return
    setattr(peewee, PATCH_FLAG, False)

    _u(peewee.Database, "execute_sql")


def _wrap_execute_sql(func, instance, args, kwargs):
    tracer = active_tracer()
    if tracer is None:
        return func(*args, **kwargs)

    try:
        sql = get_argument_value(args, kwargs, 0, "sql")
    except ArgumentError:
        return func(*args, **kwargs)

    span_tags = {
        tags.COMPONENT: COMPONENT,
        tags.SPAN_KIND: tags.SPAN_KIND_RPC_CLIENT,
        tags.DATABASE_TYPE: "sql",
        tags.DATABASE_STATEMENT: sql,
        "db.system": type(instance).__name__,
    }
    if isinstance(instance.database, str):
        span_tags[tags.DATABASE_INSTANCE] = instance.database

    with tracer.start_active_span(OPERATION_NAME, tags=span_tags):
        return func(*args, **kwargs)
