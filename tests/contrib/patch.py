import sys
import unittest

from opentracing.mocktracer import MockTracer
import wrapt

from jcw.tracer import reset_global_tracer
from jcw.tracer import set_global_tracer


class TracerTestCase(unittest.TestCase):
    """TestCase with a mock tracer installed as the global tracer."""

    def setUp(self):
        super(TracerTestCase, self).setUp()
        self.tracer = MockTracer()
        set_global_tracer(self.tracer)

    def tearDown(self):
        reset_global_tracer()
        super(TracerTestCase, self).tearDown()

    def finished_spans(self):
        return self.tracer.finished_spans()

    def assert_span_count(self, count):
        spans = self.finished_spans()
        assert len(spans) == count, "expected {} span(s), got {}: {}".format(
            count, len(spans), [s.operation_name for s in spans]
        )
        return spans


class PatchMixin(unittest.TestCase):
    """
    TestCase for testing the patch logic of an integration.
    """

    def module_imported(self, modname):
        """
        Returns whether a module is imported or not.
        """
        return modname in sys.modules

    def assert_module_imported(self, modname):
        assert self.module_imported(modname), "{} module not imported".format(modname)

    def is_wrapped(self, obj):
        # wrapt 2 bound wrappers do not derive from the pure python ObjectProxy
        return isinstance(obj, wrapt.ObjectProxy) or hasattr(obj, "__wrapped__")

    def assert_wrapped(self, obj):
        """
        Helper to assert that a given object is properly wrapped by wrapt.
        """
        self.assertTrue(self.is_wrapped(obj), "{} is not wrapped".format(obj))

    def assert_not_wrapped(self, obj):
        """
        Helper to assert that a given object is not wrapped by wrapt.
        """
        self.assertFalse(self.is_wrapped(obj), "{} is wrapped".format(obj))

    def assert_not_double_wrapped(self, obj):
        """
        Helper to assert that a given already wrapped object is not wrapped twice.

        This is useful for asserting idempotence.
        """
        self.assert_wrapped(obj)
        self.assert_not_wrapped(obj.__wrapped__)
