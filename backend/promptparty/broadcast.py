"""Fan-out of game events to every connection subscribed to a session.

Delivery is best-effort and at-most-once per subscriber per call. Each
connection owns an outbox drained by a single task at a time, so frames
to one connection are written in issue order and never interleave, while
different connections are written in parallel. A failed write is logged
and dropped; it never reaches the caller or the other subscribers.
"""
import logging
import threading
from collections import deque
from typing import Any, Callable, Iterable

logger = logging.getLogger(__name__)


def run_inline(fn, *args):
    """Synchronous spawn used in tests and when no task runner is wired."""
    fn(*args)


class Connection:
    """A live subscriber handle. Subclasses implement ``write``."""

    def __init__(self, key: str):
        self.key = key
        self._outbox: deque = deque()
        self._outbox_lock = threading.Lock()
        self._draining = False

    def write(self, event: dict) -> None:
        raise NotImplementedError

    def enqueue(self, event: dict) -> bool:
        """Queue a frame; True when the caller must start a drain task."""
        with self._outbox_lock:
            self._outbox.append(event)
            if self._draining:
                return False
            self._draining = True
            return True

    def drain(self) -> int:
        """Write queued frames until the outbox is empty. Returns failures."""
        failures = 0
        while True:
            with self._outbox_lock:
                if not self._outbox:
                    self._draining = False
                    return failures
                event = self._outbox.popleft()
            try:
                self.write(event)
            except Exception as exc:
                failures += 1
                logger.warning(
                    f"[broadcast-failed] conn={self.key} type={event.get('type')} error={exc!r}"
                )

    def __repr__(self):
        return f'{type(self).__name__}({self.key!r})'


class SocketIOConnection(Connection):
    """Subscriber reached through a Flask-SocketIO session id."""

    def __init__(self, socketio, sid: str, namespace: str = '/ws'):
        super().__init__(sid)
        self.socketio = socketio
        self.namespace = namespace

    def write(self, event: dict) -> None:
        self.socketio.emit(event['type'], event, to=self.key, namespace=self.namespace)

    def __eq__(self, other):
        return (
            isinstance(other, SocketIOConnection)
            and other.key == self.key
            and other.namespace == self.namespace
        )

    def __hash__(self):
        return hash((self.key, self.namespace))


class BroadcastHub:

    def __init__(self, spawn: Callable[..., Any] = run_inline):
        self.spawn = spawn

    def broadcast(self, subscribers: Iterable[Connection], event: dict) -> int:
        """Queue event for every subscriber; returns the number addressed."""
        targets = list(subscribers)
        if not targets:
            return 0
        for conn in targets:
            if not conn.enqueue(event):
                continue
            try:
                self.spawn(conn.drain)
            except Exception as exc:
                # No worker available: drain in place
                logger.warning(
                    f"[broadcast-spawn-failed] conn={conn!r} type={event.get('type')} error={exc!r}"
                )
                conn.drain()
        logger.debug(f"[broadcast] type={event.get('type')} subscribers={len(targets)}")
        return len(targets)
