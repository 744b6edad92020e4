"""
The Flask integration traces every request served by the application.

:func:`jcw.configure` installs it when tracing is enabled. It can also be
installed by hand::

    from flask import Flask
    from jcw.contrib.flask import install

    app = Flask(__name__)
    install(app)

Incoming ``uber-trace-id`` headers (or whatever the installed tracer extracts from
HTTP headers) become the parent of the request span.
"""
from .middleware import TraceMiddleware
from .middleware import install
from .middleware import uninstall


__all__ = ["TraceMiddleware", "install", "uninstall"]
