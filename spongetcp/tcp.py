"""TCP segment header and segment (no options support)."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, replace
from typing import ClassVar

from .checksum import BadChecksum, HeaderTooShort, PacketTooShort, internet_checksum

_FIXED = struct.Struct("!HHIIBBHHH")

_URG = 0b0010_0000
_ACK = 0b0001_0000
_PSH = 0b0000_1000
_RST = 0b0000_0100
_SYN = 0b0000_0010
_FIN = 0b0000_0001


@dataclass(eq=False)
class TCPHeader:
    """A TCP header; ``doff`` counts 32-bit words."""

    LENGTH: ClassVar[int] = 20

    sport: int = 0
    dport: int = 0
    seqno: int = 0
    ackno: int = 0
    doff: int = 5
    urg: bool = False
    ack: bool = False
    psh: bool = False
    rst: bool = False
    syn: bool = False
    fin: bool = False
    win: int = 0
    cksum: int = 0
    uptr: int = 0

    @classmethod
    def parse(cls, data: bytes) -> TCPHeader:
        """Parse the header at the start of ``data``."""
        if len(data) < cls.LENGTH:
            raise PacketTooShort(f"{len(data)} bytes cannot hold a TCP header")
        sport, dport, seqno, ackno, doff_b, flags, win, cksum, uptr = _FIXED.unpack_from(data)
        header = cls(
            sport=sport,
            dport=dport,
            seqno=seqno,
            ackno=ackno,
            doff=doff_b >> 4,
            urg=bool(flags & _URG),
            ack=bool(flags & _ACK),
            psh=bool(flags & _PSH),
            rst=bool(flags & _RST),
            syn=bool(flags & _SYN),
            fin=bool(flags & _FIN),
            win=win,
            cksum=cksum,
            uptr=uptr,
        )
        if header.doff < 5:
            raise HeaderTooShort(f"data offset {header.doff} words")
        if len(data) < 4 * header.doff:
            raise PacketTooShort(f"header claims {4 * header.doff} bytes, segment has {len(data)}")
        return header

    def serialize(self) -> bytes:
        """Encode the header; the checksum field is written as is."""
        if self.doff < 5:
            raise ValueError("TCP header too short")
        flags = (
            (_URG if self.urg else 0)
            | (_ACK if self.ack else 0)
            | (_PSH if self.psh else 0)
            | (_RST if self.rst else 0)
            | (_SYN if self.syn else 0)
            | (_FIN if self.fin else 0)
        )
        fixed = _FIXED.pack(
            self.sport & 0xFFFF,
            self.dport & 0xFFFF,
            self.seqno & 0xFFFFFFFF,
            self.ackno & 0xFFFFFFFF,
            (self.doff << 4) & 0xFF,
            flags,
            self.win & 0xFFFF,
            self.cksum & 0xFFFF,
            self.uptr & 0xFFFF,
        )
        return fixed.ljust(4 * self.doff, b"\x00")

    def describe(self) -> str:
        """Every field on its own line, numbers in hexadecimal."""
        flags = " ".join(
            f"{name}: {str(value).lower()}"
            for name, value in (
                ("urg", self.urg),
                ("ack", self.ack),
                ("psh", self.psh),
                ("rst", self.rst),
                ("syn", self.syn),
                ("fin", self.fin),
            )
        )
        return (
            f"TCP source port: {self.sport:x}\n"
            f"TCP dest port: {self.dport:x}\n"
            f"TCP seqno: {self.seqno:x}\n"
            f"TCP ackno: {self.ackno:x}\n"
            f"TCP doff: {self.doff:x}\n"
            f"Flags: {flags}\n"
            f"TCP winsize: {self.win:x}\n"
            f"TCP cksum: {self.cksum:x}\n"
            f"TCP uptr: {self.uptr:x}\n"
        )

    def summary(self) -> str:
        """A one-line summary of flags, sequence numbers and window."""
        flags = "".join(
            letter for letter, on in (("S", self.syn), ("A", self.ack), ("R", self.rst), ("F", self.fin)) if on
        )
        return f"Header(flags={flags},seqno={self.seqno},ack={self.ackno},win={self.win})"

    def __eq__(self, other: object) -> bool:
        """Compare every field except the ports and the checksum."""
        if not isinstance(other, TCPHeader):
            return NotImplemented
        return (
            self.seqno == other.seqno
            and self.ackno == other.ackno
            and self.doff == other.doff
            and self.urg == other.urg
            and self.ack == other.ack
            and self.psh == other.psh
            and self.rst == other.rst
            and self.syn == other.syn
            and self.fin == other.fin
            and self.win == other.win
            and self.uptr == other.uptr
        )


@dataclass
class TCPSegment:
    """A TCP header with its payload."""

    header: TCPHeader = field(default_factory=TCPHeader)
    payload: bytes = b""

    @classmethod
    def parse(cls, data: bytes, datagram_layer_checksum: int = 0, verify: bool = True) -> TCPSegment:
        """Parse a segment, checking its checksum against the lower layer's pseudo-sum."""
        if verify and internet_checksum(data, datagram_layer_checksum):
            raise BadChecksum("TCP checksum mismatch")
        header = TCPHeader.parse(data)
        return cls(header, bytes(data[4 * header.doff :]))

    def serialize(self, datagram_layer_checksum: int = 0) -> bytes:
        """Encode the segment, computing the checksum over header and payload."""
        header_out = replace(self.header, cksum=0)
        payload = bytes(self.payload)
        header_out.cksum = internet_checksum(header_out.serialize() + payload, datagram_layer_checksum)
        return header_out.serialize() + payload

    def length_in_sequence_space(self) -> int:
        """Payload length plus one for SYN and one for FIN."""
        return len(self.payload) + int(self.header.syn) + int(self.header.fin)