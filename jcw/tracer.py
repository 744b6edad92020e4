"""
Building the Jaeger tracer and owning the process-wide OpenTracing tracer slot.

The slot lives in the ``opentracing`` module (``opentracing.tracer``); every
integration reads it through :func:`global_tracer` at call time so that a
reset between tests, or a later ``configure`` call, is picked up immediately.
"""
from typing import Optional

import jaeger_client
from jaeger_client.sampler import ConstSampler
import opentracing

from .exceptions import ConfigException
from .internal.logger import get_logger
from .reporter import HTTPReporter
from .settings import Config  # noqa:F401
from .settings import TCPConnection
from .settings import UDPConnection


log = get_logger(__name__)


def global_tracer():
    # type: () -> opentracing.Tracer
    """Returns the process-wide tracer, a no-op tracer until one is installed."""
    return opentracing.global_tracer()


def set_global_tracer(tracer):
    # type: (opentracing.Tracer) -> None
    """Sets the process-wide tracer. The last call wins."""
    opentracing.set_global_tracer(tracer)


def is_global_tracer_registered():
    # type: () -> bool
    return opentracing.is_global_tracer_registered()


def reset_global_tracer():
    # type: () -> None
    """Put the no-op tracer back in the global slot."""
    opentracing.tracer = opentracing.Tracer()
    opentracing.is_tracer_registered = False


def _udp_settings(config):
    # type: (Config) -> dict
    connection = config.connection
    return {
        "local_agent": {
            "reporting_host": connection.host,
            "reporting_port": connection.port,
        },
        "reporter_flush_interval": config.flush_interval,
        "sampler": {"type": "const", "param": 1},
        "tags": dict(config.tags),
        "logging": False,
    }


def build_tracer(config):
    # type: (Config) -> opentracing.Tracer
    """Build a Jaeger tracer for the connection described by ``config``.

    Errors raised by the Jaeger client for bad hosts, ports or urls are not handled here.
    """
    connection = config.connection

    if isinstance(connection, UDPConnection):
        log.debug("building udp tracer for %s:%s", connection.host, connection.port)
        jaeger_config = jaeger_client.Config(
            config=_udp_settings(config),
            service_name=config.service_name,
        )
        return jaeger_config.new_tracer()

    if isinstance(connection, TCPConnection):
        log.debug("building http tracer for %s", connection.url)
        reporter = HTTPReporter(
            url=connection.url,
            headers=connection.headers,
            flush_interval=config.flush_interval,
        )
        return jaeger_client.Tracer(
            service_name=config.service_name,
            reporter=reporter,
            sampler=ConstSampler(True),
            tags=dict(config.tags),
        )

    raise ConfigException("unsupported connection %r, expected a udp or tcp connection" % (connection,))


def install_tracer(config):
    # type: (Config) -> Optional[opentracing.Tracer]
    """Build the tracer and set it as the global tracer.

    Does nothing, and leaves the global slot untouched, when tracing is disabled.
    """
    if not config.enabled:
        log.debug("tracing disabled, no tracer installed")
        return None

    tracer = build_tracer(config)
    set_global_tracer(tracer)
    log.info("tracer installed for service %r", config.service_name)
    return tracer
