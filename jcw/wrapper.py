"""
Configuration entry point.

Call :func:`configure` once when the application starts::

    import jcw

    def tracing(config):
        config.enabled = True
        config.service_name = "billing"
        config.connection = {"protocol": "tcp", "url": "http://jaeger:14268/api/traces", "headers": {}}
        config.trace_sql_request = True
        config.orm = "sqlalchemy"
        config.subscribe_to = ["request-started", "request-finished"]

    jcw.configure(app, tracing)

Settings are read, lowest precedence first, from the ``JAEGER_*`` environment
variables, the ``JAEGER_*`` keys of ``app.config`` named after a setting
(``JAEGER_SERVICE_NAME``, ``JAEGER_SUBSCRIBE_TO``, ...), the keyword arguments
and finally the callback. The configuration is frozen once ``configure`` returns.
"""
from typing import Any  # noqa:F401
from typing import Callable  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Optional  # noqa:F401

from . import _monkey
from .bridge import EventBridge
from .internal.logger import get_logger
from .settings import Config
from .tracer import install_tracer
from .tracer import reset_global_tracer


log = get_logger(__name__)


class _State(object):
    config = None  # type: Optional[Config]
    app = None  # type: Any
    tracer = None  # type: Any
    bridge = None  # type: Optional[EventBridge]


_state = _State()


def _find_framework():
    try:
        import flask
    except ImportError:
        return None
    return flask


def _resolve_app(flask, app):
    if app is not None:
        return app
    if flask.has_app_context():
        return flask.current_app._get_current_object()
    raise RuntimeError("Flask application not found")


def _app_settings(app):
    # type: (Any) -> Dict[str, Any]
    app_config = getattr(app, "config", None)
    if app_config is None or not hasattr(app_config, "get_namespace"):
        return {}
    names = Config.setting_names()
    return {key: value for key, value in app_config.get_namespace("JAEGER_").items() if key in names}


def get_config():
    # type: () -> Optional[Config]
    """The configuration applied by the last :func:`configure` call."""
    return _state.config


def get_bridge():
    # type: () -> Optional[EventBridge]
    return _state.bridge


def configure(app=None, callback=None, **settings):
    # type: (Any, Optional[Callable[[Config], Any]], Any) -> Config
    """Configure tracing and wire it into ``app``.

    :param app: the Flask application, defaults to the current application
    :param callback: called with the :class:`~jcw.settings.Config` to fill in
    :param settings: settings applied before the callback runs
    :raises RuntimeError: tracing is enabled and Flask is not installed, or no
        application is available
    """
    config = Config.from_env()
    if app is not None:
        config.update(_app_settings(app))
    config.update(**settings)
    if callback is not None:
        callback(config)
    config.freeze()

    _teardown_bridge()
    _state.config = config

    if not config.enabled:
        log.info("tracing disabled")
        return config

    flask = _find_framework()
    if flask is None:
        raise RuntimeError("Flask not found")
    app = _resolve_app(flask, app)

    _state.app = app
    previous, _state.tracer = _state.tracer, install_tracer(config)
    if previous is not _state.tracer:
        _close_tracer(previous)
    _monkey.install_middleware(app, config)
    _monkey.install_http_client(config)
    _monkey.install_orm(config)

    bridge = EventBridge(config.subscribe_to)
    bridge.subscribe()
    _state.bridge = bridge

    log.info(
        "tracing enabled for service %r (%s), sql tracing: %s, subscribed to %s",
        config.service_name,
        getattr(config.connection, "protocol", config.connection),
        config.orm if config.trace_sql_request else "off",
        bridge.subscribed,
    )
    return config


def _teardown_bridge():
    bridge, _state.bridge = _state.bridge, None
    if bridge is not None:
        bridge.close()


def _close_tracer(tracer):
    if tracer is None:
        return
    try:
        tracer.close()
    except Exception:
        log.debug("error closing tracer", exc_info=True)


def reset():
    # type: () -> None
    """Undo :func:`configure`: close the bridge, revert instrumentation and drop the global tracer."""
    _teardown_bridge()
    _monkey.uninstall(_state.app)
    tracer, _state.tracer = _state.tracer, None
    _close_tracer(tracer)
    reset_global_tracer()
    _state.app = None
    _state.config = None
