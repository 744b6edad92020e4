import importlib
from typing import TYPE_CHECKING  # noqa:F401

from .internal.logger import get_logger
from .settings import ORM


if TYPE_CHECKING:  # pragma: no cover
    from typing import Any  # noqa:F401

    from .settings import Config  # noqa:F401


log = get_logger(__name__)

# Integration module instrumenting each supported ORM
ORM_INTEGRATIONS = {
    ORM.SQLALCHEMY: "sqlalchemy",
    ORM.PEEWEE: "peewee",
}

HTTP_CLIENT_INTEGRATION = "requests"


def _patch_integration(name):
    # type: (str) -> None
    """Import ``jcw.contrib.<name>`` and call its ``patch()``.

    Failures, such as the instrumented library not being installed, are logged
    and never reach the application.
    """
    try:
        module = importlib.import_module("jcw.contrib.%s" % name)
        module.patch()
    except Exception as e:
        log.error("failed to enable jcw support for %s: %s", name, str(e))
        return
    log.debug("integration %r patched (version %s)", name, module.get_version())


def _unpatch_integration(name):
    # type: (str) -> None
    module = importlib.import_module("jcw.contrib.%s" % name)
    module.unpatch()


def install_middleware(app, config):
    # type: (Any, Config) -> None
    if not config.enabled:
        return
    from .contrib.flask import install

    install(app)
    log.debug("trace middleware installed on %r", app)


def install_http_client(config):
    # type: (Config) -> None
    if not config.enabled:
        return
    _patch_integration(HTTP_CLIENT_INTEGRATION)


def install_orm(config):
    # type: (Config) -> None
    if not config.enabled or not config.trace_sql_request:
        return
    try:
        name = ORM_INTEGRATIONS.get(config.orm)
    except TypeError:
        name = None
    if name is None:
        log.debug("no sql instrumentation for orm %r", config.orm)
        return
    _patch_integration(name)


def uninstall(app=None):
    # type: (Any) -> None
    """Revert every installer. Only meant for tests and shutdown."""
    if app is not None:
        from .contrib.flask import uninstall as uninstall_middleware

        uninstall_middleware(app)
    for name in (HTTP_CLIENT_INTEGRATION,) + tuple(ORM_INTEGRATIONS.values()):
        try:
            _unpatch_integration(name)
        except ImportError:
            # library not installed, nothing was patched
            pass
