"""
The ``requests`` integration traces all HTTP requests made with the ``requests``
library.

Each request runs in a client span named ``requests.request``, child of the active
span, and carries the span context in its headers so the called service can
continue the trace. :func:`jcw.configure` enables it together with tracing, or::

    from jcw.contrib.requests import patch
    patch()
"""
from .patch import get_version
from .patch import patch
from .patch import unpatch


__all__ = ["get_version", "patch", "unpatch"]
