"""
Outcome Channel
===============

Ordered queue carrying classified outcomes from producer threads to the
consumer.

Producers only send, the consumer only receives. A producer hangs up by
closing its sender, or by dropping it. The receiver reads the live-sender
count before it looks at the queue, so every outcome a sender put before
hanging up is delivered before the disconnect is reported.

Sends on a bounded channel wait for room, but give up with ``ChannelClosed``
as soon as the consumer closes its end.
"""

import threading
import weakref
from dataclasses import dataclass, field
from queue import Empty, Full, Queue
from typing import List, Tuple

from ..errors import ChannelClosed, ChannelDisconnected
from .classifier import ClassifiedOutcome

# How often a blocked send re-checks whether the consumer is gone
PUT_POLL_S = 0.05


class _ChannelState:
    """Bookkeeping shared by both ends of a channel."""

    def __init__(self, maxsize: int):
        self.queue: Queue = Queue(maxsize)
        self.receiver_closed = threading.Event()
        self._lock = threading.Lock()
        self._senders = 0

    def add_sender(self):
        with self._lock:
            self._senders += 1

    def remove_sender(self):
        with self._lock:
            self._senders -= 1

    @property
    def senders(self) -> int:
        with self._lock:
            return self._senders


class Sender:
    """Producer end of a channel."""

    def __init__(self, state: _ChannelState):
        self._state = state
        state.add_sender()
        # runs once, on close() or when the sender is garbage collected
        self._hang_up = weakref.finalize(self, state.remove_sender)
        self._hang_up.atexit = False

    @property
    def closed(self) -> bool:
        return not self._hang_up.alive

    def send(self, outcome: ClassifiedOutcome):
        """
        Enqueue an outcome, waiting for room on a bounded channel.

        Raises:
            ChannelClosed: the receiver is gone, or this sender was closed
        """
        if self.closed:
            raise ChannelClosed("sender already closed")
        while True:
            if self._state.receiver_closed.is_set():
                raise ChannelClosed("receiver closed")
            try:
                self._state.queue.put(outcome, timeout=PUT_POLL_S)
                return
            except Full:
                continue

    def clone(self) -> 'Sender':
        """Another sender for an additional producer."""
        if self.closed:
            raise ChannelClosed("sender already closed")
        return Sender(self._state)

    def close(self):
        """Hang up. Never blocks, safe to call more than once."""
        self._hang_up()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


@dataclass
class Drained:
    """Result of one non-blocking drain."""
    outcomes: List[ClassifiedOutcome] = field(default_factory=list)
    disconnected: bool = False


class Receiver:
    """Consumer end of a channel."""

    def __init__(self, state: _ChannelState):
        self._state = state
        self._disconnected = False

    def try_recv(self) -> ClassifiedOutcome:
        """
        Take the next outcome without blocking.

        Raises:
            queue.Empty: nothing queued, some producer still connected
            ChannelDisconnected: every producer hung up, queue drained
        """
        if self._disconnected:
            raise ChannelDisconnected()

        # Count first: a sender that has already hung up finished its puts
        remaining = self._state.senders
        try:
            return self._state.queue.get_nowait()
        except Empty:
            if remaining > 0:
                raise

        self._disconnected = True
        raise ChannelDisconnected()

    def drain(self) -> Drained:
        """Take everything currently queued, in arrival order."""
        drained = Drained()
        while True:
            try:
                drained.outcomes.append(self.try_recv())
            except Empty:
                return drained
            except ChannelDisconnected:
                drained.disconnected = True
                return drained

    @property
    def disconnected(self) -> bool:
        return self._disconnected

    def close(self):
        """Tell producers the consumer is gone. Blocked sends give up."""
        self._state.receiver_closed.set()


def channel(maxsize: int = 0) -> Tuple[Sender, Receiver]:
    """
    Create a connected sender/receiver pair.

    Args:
        maxsize: Queue bound, 0 for unbounded
    """
    state = _ChannelState(maxsize)
    return Sender(state), Receiver(state)
