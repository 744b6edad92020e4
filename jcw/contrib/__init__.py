"""
Instrumentation switched on by :func:`jcw.configure`.

Each integration exposes ``patch()`` and ``unpatch()``, both safe to call more
than once. The Flask integration is a WSGI middleware installed on the application.
"""
