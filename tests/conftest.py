import os
from unittest import mock

import flask
from opentracing.mocktracer import MockTracer
import pytest

from jcw import wrapper
from jcw.tracer import reset_global_tracer
from jcw.tracer import set_global_tracer


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Tests never see the JAEGER_* variables of the machine running them."""
    for key in list(os.environ):
        if key.startswith("JAEGER_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def reset_wrapper():
    yield
    wrapper.reset()


@pytest.fixture
def tracer():
    """A mock tracer installed as the global tracer."""
    ot_tracer = MockTracer()
    set_global_tracer(ot_tracer)
    yield ot_tracer
    reset_global_tracer()


@pytest.fixture
def build_tracer():
    """Make ``configure`` install a mock tracer instead of a Jaeger one."""
    ot_tracer = MockTracer()
    with mock.patch("jcw.tracer.build_tracer", return_value=ot_tracer) as build:
        build.tracer = ot_tracer
        yield build


@pytest.fixture
def app():
    app = flask.Flask(__name__)
    app.config["TESTING"] = True

    @app.route("/")
    def index():
        return "hello"

    @app.route("/boom")
    def boom():
        raise ZeroDivisionError("boom")

    return app

