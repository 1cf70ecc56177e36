import selectors
import threading
import time

import logging
logger = logging.getLogger(__name__)

# Upper bound for a single wait so that stop() is noticed promptly
POLL_INTERVAL = 0.1


class Reactor:
    """Single-threaded readiness loop.

    Sockets are registered with a callback that is invoked (without
    arguments) whenever the socket becomes readable. Callbacks run one at a
    time, to completion, on the thread that drives run()/run_once().
    Exceptions escaping a callback are passed to error_handler(exc) and do
    not stop the loop.
    """

    def __init__(self, selector=None, error_handler=None):
        self._selector = selector if selector is not None else selectors.DefaultSelector()
        self._lock = threading.Lock()
        self._running = False
        self.error_handler = error_handler

    def register(self, sock, callback):
        with self._lock:
            self._selector.register(sock, selectors.EVENT_READ, callback)
        logger.debug("register(fd=%d)", sock.fileno())

    def cancel(self, sock):
        """Stop dispatching events for sock; a no-op if it is not registered."""
        with self._lock:
            try:
                self._selector.unregister(sock)
            except (KeyError, ValueError):
                return False
        return True

    def __len__(self):
        return len(self._selector.get_map() or ())

    def run_once(self, timeout=None):
        """Wait up to timeout seconds and dispatch the ready sockets.

        Returns the number of callbacks invoked.
        """
        if not len(self):
            if timeout:
                time.sleep(timeout)
            return 0

        dispatched = 0
        for key, mask in self._selector.select(timeout):
            # skip sockets cancelled by an earlier callback of this batch
            if self._selector.get_map().get(key.fd) is not key:
                continue
            try:
                key.data()
            except Exception as e:
                self._report(e)
            dispatched += 1
        return dispatched

    def run(self, timeout=None):
        """Dispatch events until stop() is called, nothing is registered
        any more, or timeout seconds have passed.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        self._running = True
        try:
            while self._running and len(self):
                wait = POLL_INTERVAL
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        break
                    wait = min(wait, remaining)
                self.run_once(wait)
        finally:
            self._running = False

    def stop(self, *args):
        """Make run() return; usable as a signal handler."""
        self._running = False

    @property
    def running(self):
        return self._running

    def close(self):
        self._running = False
        self._selector.close()

    def _report(self, exc):
        if self.error_handler is not None:
            self.error_handler(exc)
        else:
            logger.error("unhandled error in datagram callback: %s", exc, exc_info=exc)
