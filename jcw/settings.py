"""
Settings for the Jaeger client wrapper.

A :class:`Config` starts out with defaults that keep tracing disabled::

    from jcw.settings import Config

    config = Config()
    config.enabled = True
    config.service_name = "billing"
    config.connection = {"protocol": "udp", "host": "jaeger-agent", "port": 6831}
    config.freeze()

Values are only coerced, never validated: a connection with an unknown protocol
is stored as given and rejected when the tracer gets built.
"""
import enum
from typing import Any
from typing import Dict
from typing import Mapping

import attr
from envier import En

from .constants import DEFAULT_AGENT_HOST
from .constants import DEFAULT_AGENT_PORT
from .constants import DEFAULT_FLUSH_INTERVAL
from .constants import DEFAULT_SERVICE_NAME
from .exceptions import ConfigException
from .internal.logger import get_logger
from .internal.utils.formats import asbool
from .internal.utils.formats import parse_list_str
from .internal.utils.formats import parse_tags_str


log = get_logger(__name__)


class ORM(str, enum.Enum):
    NONE = "none"
    SQLALCHEMY = "sqlalchemy"
    PEEWEE = "peewee"


@attr.s(slots=True)
class UDPConnection(object):
    """Spans are emitted to a Jaeger agent over UDP."""

    protocol = "udp"

    host = attr.ib(default=DEFAULT_AGENT_HOST)
    port = attr.ib(default=DEFAULT_AGENT_PORT)


@attr.s(slots=True)
class TCPConnection(object):
    """Spans are posted to a Jaeger collector endpoint over HTTP."""

    protocol = "tcp"

    url = attr.ib(default=None)
    headers = attr.ib(factory=dict)


def _coerce_connection(value):
    if isinstance(value, (UDPConnection, TCPConnection)) or not isinstance(value, Mapping):
        return value

    protocol = str(value.get("protocol", "udp")).lower()
    if protocol == "udp":
        port = value.get("port", DEFAULT_AGENT_PORT)
        if isinstance(port, str) and port.isdigit():
            port = int(port)
        return UDPConnection(host=value.get("host", DEFAULT_AGENT_HOST), port=port)
    if protocol == "tcp":
        return TCPConnection(url=value.get("url"), headers=dict(value.get("headers") or {}))
    return dict(value)


def _coerce_number(value):
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            try:
                return float(value)
            except ValueError:
                return value
    return value


def _coerce_tags(value):
    if value is None:
        return {}
    if isinstance(value, str):
        return parse_tags_str(value)
    if isinstance(value, Mapping):
        return {str(k): v for k, v in value.items()}
    return value


def _coerce_names(value):
    if value is None:
        return []
    if isinstance(value, str):
        return parse_list_str(value)
    return [str(name) for name in value]


def _coerce_orm(value):
    if value is None:
        return ORM.NONE
    if isinstance(value, ORM):
        return value
    try:
        return ORM(str(value).lower())
    except ValueError:
        # Unknown selectors are kept as given, the installer ignores them
        return value


def _check_frozen(instance, attribute, value):
    if instance._frozen:
        raise ConfigException("cannot set %r once the configuration is frozen" % attribute.name)
    return value


class JaegerEnv(En):
    __prefix__ = "jaeger"

    enabled = En.v(bool, "enabled", default=False)
    service_name = En.v(str, "service_name", default=DEFAULT_SERVICE_NAME)
    agent_host = En.v(str, "agent_host", default=DEFAULT_AGENT_HOST)
    agent_port = En.v(int, "agent_port", default=DEFAULT_AGENT_PORT)
    endpoint = En.v(
        str,
        "endpoint",
        default="",
        help="Jaeger collector endpoint. When set spans are posted over HTTP instead of sent to the agent",
    )
    endpoint_headers = En.v(dict, "endpoint_headers", parser=parse_tags_str, default={})
    flush_interval = En.v(float, "reporter_flush_interval", default=float(DEFAULT_FLUSH_INTERVAL))
    tags = En.v(dict, "tags", parser=parse_tags_str, default={})
    subscribe_to = En.v(list, "subscribe_to", parser=parse_list_str, default=[])
    trace_sql_request = En.v(bool, "trace_sql_request", default=False)
    orm = En.v(str, "orm", default=ORM.NONE.value)


@attr.s(slots=True, on_setattr=[_check_frozen, attr.setters.convert])
class Config(object):
    """Tracing settings, written during a single configuration pass and read-only afterwards."""

    enabled = attr.ib(default=False, converter=asbool)
    service_name = attr.ib(default=DEFAULT_SERVICE_NAME, converter=str)
    connection = attr.ib(factory=UDPConnection, converter=_coerce_connection)
    flush_interval = attr.ib(default=DEFAULT_FLUSH_INTERVAL, converter=_coerce_number)
    tags = attr.ib(factory=dict, converter=_coerce_tags)
    subscribe_to = attr.ib(factory=list, converter=_coerce_names)
    trace_sql_request = attr.ib(default=False, converter=asbool)
    orm = attr.ib(default=ORM.NONE, converter=_coerce_orm)

    _frozen = attr.ib(default=False, init=False, repr=False, eq=False)

    @classmethod
    def setting_names(cls):
        return tuple(a.name for a in attr.fields(cls) if not a.name.startswith("_"))

    @classmethod
    def from_env(cls):
        # type: () -> Config
        """Build a configuration whose values come from the ``JAEGER_*`` environment variables."""
        env = JaegerEnv()
        if env.endpoint:
            connection = TCPConnection(url=env.endpoint, headers=env.endpoint_headers)
        else:
            connection = UDPConnection(host=env.agent_host, port=env.agent_port)

        flush_interval = env.flush_interval
        if float(flush_interval).is_integer():
            flush_interval = int(flush_interval)

        return cls(
            enabled=env.enabled,
            service_name=env.service_name,
            connection=connection,
            flush_interval=flush_interval,
            tags=env.tags,
            subscribe_to=env.subscribe_to,
            trace_sql_request=env.trace_sql_request,
            orm=env.orm,
        )

    @property
    def frozen(self):
        # type: () -> bool
        return self._frozen

    def freeze(self):
        # type: () -> None
        self._frozen = True

    def update(self, *mappings, **settings):
        # type: (Mapping[str, Any], Any) -> None
        """Apply several settings at once.

        Positional mappings are applied first, in order, then keyword settings.
        """
        values = {}  # type: Dict[str, Any]
        for mapping in mappings:
            values.update(mapping)
        values.update(settings)

        names = self.setting_names()
        invalid_keys = [key for key in values if key not in names]
        if invalid_keys:
            raise ConfigException("invalid key(s) given (%s)" % ",".join(sorted(invalid_keys)))

        for key, value in values.items():
            setattr(self, key, value)

    def to_dict(self):
        # type: () -> Dict[str, Any]
        return attr.asdict(self, filter=lambda a, _: not a.name.startswith("_"))
