import pytest

from jcw.exceptions import ConfigException
from jcw.settings import ORM
from jcw.settings import Config
from jcw.settings import TCPConnection
from jcw.settings import UDPConnection


def test_defaults():
    config = Config()

    assert config.enabled is False
    assert config.service_name == "JCW service"
    assert config.connection == UDPConnection(host="127.0.0.1", port=6831)
    assert config.connection.protocol == "udp"
    assert config.flush_interval == 10
    assert config.tags == {}
    assert config.subscribe_to == []
    assert config.trace_sql_request is False
    assert config.orm is ORM.NONE
    assert not config.frozen


def test_defaults_are_not_shared():
    first, second = Config(), Config()
    first.tags["team"] = "billing"
    first.subscribe_to.append("request-started")

    assert second.tags == {}
    assert second.subscribe_to == []


@pytest.mark.parametrize(
    "value,expected",
    [
        (True, True),
        ("true", True),
        ("1", True),
        ("False", False),
        ("no", False),
        (None, False),
    ],
)
def test_enabled_coercion(value, expected):
    config = Config()
    config.enabled = value
    assert config.enabled is expected


def test_udp_connection_from_mapping():
    config = Config()
    config.connection = {"protocol": "udp", "host": "jaeger-agent", "port": "6832"}

    assert isinstance(config.connection, UDPConnection)
    assert config.connection.host == "jaeger-agent"
    assert config.connection.port == 6832


def test_udp_connection_defaults_from_partial_mapping():
    config = Config()
    config.connection = {"protocol": "UDP"}

    assert config.connection == UDPConnection()


def test_tcp_connection_from_mapping():
    config = Config()
    config.connection = {
        "protocol": "tcp",
        "url": "http://jaeger:14268/api/traces",
        "headers": {"Authorization": "Bearer token"},
    }

    assert isinstance(config.connection, TCPConnection)
    assert config.connection.protocol == "tcp"
    assert config.connection.url == "http://jaeger:14268/api/traces"
    assert config.connection.headers == {"Authorization": "Bearer token"}


def test_unknown_protocol_is_kept():
    config = Config()
    config.connection = {"protocol": "carrier-pigeon", "host": "roof"}

    assert config.connection == {"protocol": "carrier-pigeon", "host": "roof"}


def test_flush_interval_coercion():
    config = Config()
    config.flush_interval = "5"
    assert config.flush_interval == 5

    config.flush_interval = "0.5"
    assert config.flush_interval == 0.5


def test_tags_from_string():
    config = Config()
    config.tags = "env:prod,team:billing"

    assert config.tags == {"env": "prod", "team": "billing"}


def test_subscribe_to_from_string():
    config = Config()
    config.subscribe_to = "start_processing.orders, process_action.orders,"

    assert config.subscribe_to == ["start_processing.orders", "process_action.orders"]


@pytest.mark.parametrize(
    "value,expected",
    [
        ("sqlalchemy", ORM.SQLALCHEMY),
        ("PeeWee", ORM.PEEWEE),
        (ORM.PEEWEE, ORM.PEEWEE),
        (None, ORM.NONE),
        ("sequel", "sequel"),
    ],
)
def test_orm_coercion(value, expected):
    config = Config()
    config.orm = value
    assert config.orm == expected


def test_update():
    config = Config()
    config.update({"enabled": True}, service_name="billing", subscribe_to=["request-started"])

    assert config.enabled is True
    assert config.service_name == "billing"
    assert config.subscribe_to == ["request-started"]


def test_update_keywords_win_over_mappings():
    config = Config()
    config.update({"service_name": "from-mapping"}, service_name="from-keyword")

    assert config.service_name == "from-keyword"


def test_update_rejects_unknown_keys():
    config = Config()

    with pytest.raises(ConfigException) as e:
        config.update(enabled=True, sample_rate=1, agent="x")

    assert str(e.value) == "invalid key(s) given (agent,sample_rate)"
    # nothing applied
    assert config.enabled is False


def test_freeze():
    config = Config()
    config.freeze()

    assert config.frozen
    with pytest.raises(ConfigException):
        config.enabled = True
    with pytest.raises(ConfigException):
        config.update(service_name="billing")
    assert config.enabled is False
    assert config.service_name == "JCW service"


def test_to_dict():
    config = Config(enabled=True, tags={"env": "prod"})

    assert config.to_dict() == {
        "enabled": True,
        "service_name": "JCW service",
        "connection": {"host": "127.0.0.1", "port": 6831},
        "flush_interval": 10,
        "tags": {"env": "prod"},
        "subscribe_to": [],
        "trace_sql_request": False,
        "orm": ORM.NONE,
    }


def test_setting_names():
    assert Config.setting_names() == (
        "enabled",
        "service_name",
        "connection",
        "flush_interval",
        "tags",
        "subscribe_to",
        "trace_sql_request",
        "orm",
    )


def test_from_env_defaults():
    assert Config.from_env() == Config()


def test_from_env(monkeypatch):
    monkeypatch.setenv("JAEGER_ENABLED", "true")
    monkeypatch.setenv("JAEGER_SERVICE_NAME", "billing")
    monkeypatch.setenv("JAEGER_AGENT_HOST", "jaeger-agent")
    monkeypatch.setenv("JAEGER_AGENT_PORT", "6832")
    monkeypatch.setenv("JAEGER_REPORTER_FLUSH_INTERVAL", "2")
    monkeypatch.setenv("JAEGER_TAGS", "env:prod,team:billing")
    monkeypatch.setenv("JAEGER_SUBSCRIBE_TO", "request-started,request-finished")
    monkeypatch.setenv("JAEGER_TRACE_SQL_REQUEST", "1")
    monkeypatch.setenv("JAEGER_ORM", "peewee")

    config = Config.from_env()

    assert config.enabled is True
    assert config.service_name == "billing"
    assert config.connection == UDPConnection(host="jaeger-agent", port=6832)
    assert config.flush_interval == 2
    assert isinstance(config.flush_interval, int)
    assert config.tags == {"env": "prod", "team": "billing"}
    assert config.subscribe_to == ["request-started", "request-finished"]
    assert config.trace_sql_request is True
    assert config.orm is ORM.PEEWEE
    assert not config.frozen


def test_from_env_endpoint_selects_tcp(monkeypatch):
    monkeypatch.setenv("JAEGER_ENDPOINT", "http://jaeger:14268/api/traces")
    monkeypatch.setenv("JAEGER_ENDPOINT_HEADERS", "X-Tenant:acme,X-Token:abc")

    config = Config.from_env()

    assert config.connection == TCPConnection(
        url="http://jaeger:14268/api/traces",
        headers={"X-Tenant": "acme", "X-Token": "abc"},
    )
