"""
Trace SQL statements run through SQLAlchemy engines.

Listeners are registered on the :class:`sqlalchemy.engine.Engine` class, so engines
created before or after :func:`patch` are traced alike. Enabled by
:func:`jcw.configure` when ``trace_sql_request`` is set and ``orm`` is
``"sqlalchemy"``.
"""
from .patch import get_version
from .patch import patch
from .patch import unpatch


__all__ = ["get_version", "patch", "unpatch"]
