"""TCP configuration and summaries of a connection's state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Protocol

from .byte_stream import ByteStream


@dataclass
class TCPConfig:
    """Settings for a TCP sender and receiver."""

    DEFAULT_CAPACITY: ClassVar[int] = 64000
    MAX_PAYLOAD_SIZE: ClassVar[int] = 1000
    TIMEOUT_DFLT: ClassVar[int] = 1000
    MAX_RETX_ATTEMPTS: ClassVar[int] = 8

    rt_timeout: int = TIMEOUT_DFLT
    recv_capacity: int = DEFAULT_CAPACITY
    send_capacity: int = DEFAULT_CAPACITY
    fixed_isn: Optional[int] = None


class State(Enum):
    """Official state names from the TCP specification."""

    LISTEN = 0
    SYN_RCVD = 1
    SYN_SENT = 2
    ESTABLISHED = 3
    CLOSE_WAIT = 4
    LAST_ACK = 5
    FIN_WAIT_1 = 6
    FIN_WAIT_2 = 7
    CLOSING = 8
    TIME_WAIT = 9
    CLOSED = 10
    RESET = 11


class ReceiverSummary(Enum):
    """Descriptions of the states a TCP receiver can be in."""

    ERROR = "error (connection was reset)"
    LISTEN = "waiting for SYN: ackno is empty"
    SYN_RECV = "SYN received (ackno exists), and input to stream hasn't ended"
    FIN_RECV = "input to stream has ended"


class SenderSummary(Enum):
    """Descriptions of the states a TCP sender can be in."""

    ERROR = "error (connection was reset)"
    CLOSED = "waiting for stream to begin (no SYN sent)"
    SYN_SENT = "stream started but nothing acknowledged"
    SYN_ACKED = "stream ongoing"
    FIN_SENT = "stream finished (FIN sent) but not fully acknowledged"
    FIN_ACKED = "stream finished and fully acknowledged"


class _Receiver(Protocol):
    def stream_out(self) -> ByteStream: ...

    def ackno(self) -> Optional[int]: ...


class _Sender(Protocol):
    def stream_in(self) -> ByteStream: ...

    def next_seqno_absolute(self) -> int: ...

    def bytes_in_flight(self) -> int: ...


_OFFICIAL: dict[State, tuple[ReceiverSummary, SenderSummary, bool, bool]] = {
    State.LISTEN: (ReceiverSummary.LISTEN, SenderSummary.CLOSED, True, True),
    State.SYN_RCVD: (ReceiverSummary.SYN_RECV, SenderSummary.SYN_SENT, True, True),
    State.SYN_SENT: (ReceiverSummary.LISTEN, SenderSummary.SYN_SENT, True, True),
    State.ESTABLISHED: (ReceiverSummary.SYN_RECV, SenderSummary.SYN_ACKED, True, True),
    State.CLOSE_WAIT: (ReceiverSummary.FIN_RECV, SenderSummary.SYN_ACKED, True, False),
    State.LAST_ACK: (ReceiverSummary.FIN_RECV, SenderSummary.FIN_SENT, True, False),
    State.CLOSING: (ReceiverSummary.FIN_RECV, SenderSummary.FIN_SENT, True, True),
    State.FIN_WAIT_1: (ReceiverSummary.SYN_RECV, SenderSummary.FIN_SENT, True, True),
    State.FIN_WAIT_2: (ReceiverSummary.SYN_RECV, SenderSummary.FIN_ACKED, True, True),
    State.TIME_WAIT: (ReceiverSummary.FIN_RECV, SenderSummary.FIN_ACKED, True, True),
    State.RESET: (ReceiverSummary.ERROR, SenderSummary.ERROR, False, False),
    State.CLOSED: (ReceiverSummary.FIN_RECV, SenderSummary.FIN_ACKED, False, False),
}


@dataclass(frozen=True, eq=False)
class TCPState:
    """The sender and receiver summaries plus the connection's active and linger bits.

    Compares equal to another TCPState with the same fields, or to a
    :class:`State` whose official summary matches.
    """

    sender: str
    receiver: str
    active: bool = True
    linger_after_streams_finish: bool = True

    @classmethod
    def from_state(cls, state: State) -> TCPState:
        """The summary that corresponds to an official TCP state."""
        receiver, sender, active, linger = _OFFICIAL[state]
        return cls(sender.value, receiver.value, active, linger)

    @classmethod
    def from_endpoints(cls, sender: _Sender, receiver: _Receiver, active: bool, linger: bool) -> TCPState:
        """Summarize a live sender and receiver with the connection's bits."""
        return cls(
            cls.sender_summary(sender),
            cls.receiver_summary(receiver),
            active,
            linger if active else False,
        )

    def _key(self) -> tuple[str, str, bool, bool]:
        return (self.sender, self.receiver, self.active, self.linger_after_streams_finish)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, State):
            other = TCPState.from_state(other)
        if not isinstance(other, TCPState):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def name(self) -> str:
        """A one-line description of the state."""
        return (
            f"sender=`{self.sender}`, receiver=`{self.receiver}`, active={int(self.active)}, "
            f"linger_after_streams_finish={int(self.linger_after_streams_finish)}"
        )

    @staticmethod
    def receiver_summary(receiver: _Receiver) -> str:
        """Describe the state of a TCP receiver."""
        stream = receiver.stream_out()
        if stream.error():
            return ReceiverSummary.ERROR.value
        if receiver.ackno() is None:
            return ReceiverSummary.LISTEN.value
        if stream.input_ended():
            return ReceiverSummary.FIN_RECV.value
        return ReceiverSummary.SYN_RECV.value

    @staticmethod
    def sender_summary(sender: _Sender) -> str:
        """Describe the state of a TCP sender."""
        stream = sender.stream_in()
        next_seqno = sender.next_seqno_absolute()
        in_flight = sender.bytes_in_flight()
        if stream.error():
            return SenderSummary.ERROR.value
        if next_seqno == 0:
            return SenderSummary.CLOSED.value
        if next_seqno == in_flight:
            return SenderSummary.SYN_SENT.value
        if not stream.eof():
            return SenderSummary.SYN_ACKED.value
        if next_seqno < stream.bytes_written() + 2:
            return SenderSummary.SYN_ACKED.value
        if in_flight:
            return SenderSummary.FIN_SENT.value
        return SenderSummary.FIN_ACKED.value