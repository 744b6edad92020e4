"""
Trace SQL statements run by peewee databases (``Database.execute_sql``).

Enabled by :func:`jcw.configure` when ``trace_sql_request`` is set and ``orm``
is ``"peewee"``.
"""
from .patch import get_version
from .patch import patch
from .patch import unpatch


__all__ = ["get_version", "patch", "unpatch"]
