"""
Reporter posting spans to a Jaeger collector over HTTP.

The Jaeger client only ships an agent (UDP) transport, this reporter covers the
``tcp`` connection: finished spans are queued in memory and a periodic worker
posts them as a thrift encoded batch to the collector endpoint, typically
``http://jaeger-collector:14268/api/traces``.
"""
from concurrent.futures import Future
import http.client as httplib
import threading
from typing import Dict  # noqa:F401
from typing import List  # noqa:F401
from typing import Optional  # noqa:F401
from urllib import parse

from jaeger_client import thrift as jaeger_thrift
from jaeger_client.reporter import NullReporter
from thrift.protocol import TBinaryProtocol
from thrift.transport import TTransport

from .internal.logger import get_logger
from .internal.periodic import PeriodicWorkerThread


log = get_logger(__name__)

CONTENT_TYPE = "application/x-thrift"
DEFAULT_TIMEOUT = 2.0
DEFAULT_QUEUE_CAPACITY = 100


def encode_batch(spans, process):
    # type: (List, object) -> bytes
    """Encode finished Jaeger spans as a binary thrift ``Batch``."""
    batch = jaeger_thrift.make_jaeger_batch(spans=spans, process=process)
    buf = TTransport.TMemoryBuffer()
    batch.write(TBinaryProtocol.TBinaryProtocol(buf))
    return buf.getvalue()


def get_connection(url, timeout=DEFAULT_TIMEOUT):
    # type: (str, float) -> httplib.HTTPConnection
    parsed = parse.urlparse(url)
    if parsed.scheme == "https":
        return httplib.HTTPSConnection(parsed.hostname, parsed.port, timeout=timeout)
    if parsed.scheme == "http":
        return httplib.HTTPConnection(parsed.hostname, parsed.port, timeout=timeout)
    raise ValueError("Unsupported protocol '%s' in collector url '%s'" % (parsed.scheme, url))


class HTTPReporter(PeriodicWorkerThread, NullReporter):
    """Queue finished spans and post them to a Jaeger collector every ``flush_interval`` seconds."""

    HTTP_METHOD = "POST"

    def __init__(
        self,
        url,  # type: str
        headers=None,  # type: Optional[Dict[str, str]]
        flush_interval=10,  # type: float
        queue_capacity=DEFAULT_QUEUE_CAPACITY,  # type: int
        timeout=DEFAULT_TIMEOUT,  # type: float
    ):
        # type: (...) -> None
        super(HTTPReporter, self).__init__(interval=flush_interval, name=self.__class__.__name__)
        self.url = url
        self.headers = dict(headers or {})
        self.queue_capacity = queue_capacity
        self.timeout = timeout
        self._spans = []  # type: List
        self._lock = threading.Lock()
        self._process = None
        self._dropped = 0

    def set_process(self, service_name, tags, max_length):
        with self._lock:
            self._process = jaeger_thrift.make_process(
                service_name=service_name,
                tags=tags,
                max_length=max_length,
            )

    def report_span(self, span):
        with self._lock:
            if len(self._spans) >= self.queue_capacity:
                self._dropped += 1
                log.warning("collector queue is full, %d span(s) dropped", self._dropped)
                return
            self._spans.append(span)
            if self.started:
                return
            self.started = True
        self.start()

    def start(self):
        # type: () -> None
        super(HTTPReporter, self).start()
        log.debug("reporting to %s every %ss", self.url, self._thread.interval)

    def _put(self, body):
        # type: (bytes) -> httplib.HTTPResponse
        headers = {"Content-Type": CONTENT_TYPE}
        headers.update(self.headers)
        path = parse.urlparse(self.url).path or "/"
        conn = get_connection(self.url, self.timeout)
        try:
            conn.request(self.HTTP_METHOD, path, body, headers)
            response = conn.getresponse()
            response.read()
            return response
        finally:
            conn.close()

    def flush(self):
        # type: () -> int
        """Post the queued spans. Returns the number of spans sent."""
        with self._lock:
            spans, self._spans = self._spans, []
            process = self._process
        if not spans:
            return 0
        if process is None:
            log.debug("no process set on the reporter, %d span(s) discarded", len(spans))
            return 0

        response = self._put(encode_batch(spans, process))
        if response.status >= 400:
            log.error("failed to send %d span(s) to %s: HTTP %s %s", len(spans), self.url, response.status, response.reason)
            return 0
        log.debug("sent %d span(s) to %s", len(spans), self.url)
        return len(spans)

    def run_periodic(self):
        try:
            self.flush()
        except Exception:
            log.error("failed to send spans to %s", self.url, exc_info=True)

    def on_shutdown(self):
        self.run_periodic()

    def close(self):
        """Stop the worker and flush what is left. Returns a resolved future."""
        if self.started and self.is_alive():
            self.stop()
            self.join(self.timeout)
        else:
            self.run_periodic()
        future = Future()  # type: Future
        future.set_result(True)
        return future
