from unittest import mock

import sqlalchemy
from sqlalchemy import create_engine
from sqlalchemy import event
from sqlalchemy import exc
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.engine import make_url

from jcw.constants import PATCH_FLAG
from jcw.contrib.sqlalchemy import patch
from jcw.contrib.sqlalchemy import unpatch
from jcw.contrib.sqlalchemy.patch import _before_cursor_execute
from jcw.contrib.sqlalchemy.patch import _span_tags
from jcw.tracer import reset_global_tracer
from tests.contrib.patch import TracerTestCase


class SQLAlchemyPatchTestCase(TracerTestCase):
    def setUp(self):
        super(SQLAlchemyPatchTestCase, self).setUp()
        patch()
        self.engine = create_engine("sqlite://")
        with self.engine.begin() as conn:
            conn.execute(text("CREATE TABLE players (id INTEGER PRIMARY KEY, name TEXT)"))
        self.tracer.reset()

    def tearDown(self):
        unpatch()
        self.engine.dispose()
        super(SQLAlchemyPatchTestCase, self).tearDown()

    def test_patch(self):
        assert getattr(sqlalchemy.engine, PATCH_FLAG)
        assert event.contains(Engine, "before_cursor_execute", _before_cursor_execute)

    def test_patch_idempotent(self):
        patch()

        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        self.assert_span_count(1)

    def test_unpatch(self):
        unpatch()

        assert not event.contains(Engine, "before_cursor_execute", _before_cursor_execute)
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        self.assert_span_count(0)

    def test_query(self):
        with self.engine.connect() as conn:
            rows = conn.execute(text("SELECT name FROM players")).fetchall()

        assert rows == []
        (span,) = self.assert_span_count(1)
        assert span.operation_name == "sqlalchemy.query"
        assert span.tags["component"] == "sqlalchemy"
        assert span.tags["span.kind"] == "client"
        assert span.tags["db.type"] == "sql"
        assert span.tags["db.statement"] == "SELECT name FROM players"
        assert span.tags["db.system"] == "sqlite"
        assert "error" not in span.tags

    def test_row_count(self):
        with self.engine.begin() as conn:
            conn.execute(text("INSERT INTO players (name) VALUES ('Wayne'), ('Jaromir')"))

        (span,) = self.assert_span_count(1)
        assert span.tags["db.row_count"] == 2

    def test_connection_tags(self):
        conn = mock.Mock()
        conn.engine.url = make_url("postgresql://scott:tiger@db:5432/players")

        span_tags = _span_tags(conn, "SELECT 1")

        assert span_tags["db.instance"] == "players"
        assert span_tags["db.user"] == "scott"
        assert span_tags["db.system"] == "postgresql"

    def test_child_of_active_span(self):
        with self.tracer.start_active_span("GET") as scope:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))

        query_span, request_span = self.assert_span_count(2)
        assert request_span is scope.span
        assert query_span.parent_id == request_span.context.span_id

    def test_error(self):
        with self.engine.connect() as conn:
            with self.assertRaises(exc.OperationalError):
                conn.execute(text("SELECT * FROM none_existing_table"))

        (span,) = self.assert_span_count(1)
        assert span.tags["error"] is True
        assert span.tags["db.statement"] == "SELECT * FROM none_existing_table"
        assert span.logs[0].key_values["error.kind"] == "OperationalError"
        assert "none_existing_table" in span.logs[0].key_values["message"]

    def test_without_tracer(self):
        reset_global_tracer()

        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        self.assert_span_count(0)
