"""
Jaeger tracing for Flask applications.

``jcw.configure(app, ...)`` builds a Jaeger tracer, makes it the global
OpenTracing tracer, traces incoming requests, outgoing ``requests`` calls and,
optionally, SQL statements, and turns framework notifications into spans.
"""
from ._version import __version__
from .settings import ORM
from .settings import Config
from .settings import TCPConnection
from .settings import UDPConnection
from .tracer import global_tracer
from .wrapper import configure
from .wrapper import get_config


__all__ = [
    "__version__",
    "Config",
    "ORM",
    "TCPConnection",
    "UDPConnection",
    "configure",
    "get_config",
    "global_tracer",
]
