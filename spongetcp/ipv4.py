"""IPv4 datagram header and datagram (no options support)."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass, field, replace
from typing import ClassVar

from .checksum import (
    BadChecksum,
    HeaderTooShort,
    PacketTooShort,
    TruncatedPacket,
    WrongIPVersion,
    internet_checksum,
)

_FIXED = struct.Struct("!BBHHHBBHII")


def _dotted(address: int) -> str:
    return str(ipaddress.IPv4Address(address & 0xFFFFFFFF))


@dataclass
class IPv4Header:
    """An IPv4 header; ``hlen`` counts 32-bit words."""

    LENGTH: ClassVar[int] = 20
    DEFAULT_TTL: ClassVar[int] = 128
    PROTO_TCP: ClassVar[int] = 6

    ver: int = 4
    hlen: int = 5
    tos: int = 0
    length: int = 0
    ident: int = 0
    df: bool = True
    mf: bool = False
    offset: int = 0
    ttl: int = DEFAULT_TTL
    proto: int = PROTO_TCP
    cksum: int = 0
    src: int = 0
    dst: int = 0

    @classmethod
    def parse(cls, data: bytes) -> IPv4Header:
        """Parse and verify the header at the start of a whole datagram."""
        size = len(data)
        if size < cls.LENGTH:
            raise PacketTooShort(f"{size} bytes cannot hold an IPv4 header")
        first, tos, length, ident, fo_val, ttl, proto, cksum, src, dst = _FIXED.unpack_from(data)
        header = cls(
            ver=first >> 4,
            hlen=first & 0x0F,
            tos=tos,
            length=length,
            ident=ident,
            df=bool(fo_val & 0x4000),
            mf=bool(fo_val & 0x2000),
            offset=fo_val & 0x1FFF,
            ttl=ttl,
            proto=proto,
            cksum=cksum,
            src=src,
            dst=dst,
        )
        if size < 4 * header.hlen:
            raise PacketTooShort(f"header claims {4 * header.hlen} bytes, datagram has {size}")
        if header.ver != 4:
            raise WrongIPVersion(f"IP version {header.ver}")
        if header.hlen < 5:
            raise HeaderTooShort(f"header length {header.hlen} words")
        if size != header.length:
            raise TruncatedPacket(f"length field {header.length}, datagram has {size} bytes")
        if internet_checksum(data[: 4 * header.hlen]):
            raise BadChecksum("IPv4 header checksum mismatch")
        return header

    def serialize(self) -> bytes:
        """Encode the header; the checksum field is written as is."""
        if self.ver != 4:
            raise ValueError("wrong IP version")
        if 4 * self.hlen < self.LENGTH:
            raise ValueError("IP header too short")
        fo_val = (0x4000 if self.df else 0) | (0x2000 if self.mf else 0) | (self.offset & 0x1FFF)
        fixed = _FIXED.pack(
            ((self.ver << 4) | (self.hlen & 0x0F)) & 0xFF,
            self.tos & 0xFF,
            self.length & 0xFFFF,
            self.ident & 0xFFFF,
            fo_val,
            self.ttl & 0xFF,
            self.proto & 0xFF,
            self.cksum & 0xFFFF,
            self.src & 0xFFFFFFFF,
            self.dst & 0xFFFFFFFF,
        )
        return fixed.ljust(4 * self.hlen, b"\x00")

    def payload_length(self) -> int:
        """Length of the payload that follows the header."""
        return (self.length - 4 * self.hlen) & 0xFFFF

    def pseudo_cksum(self) -> int:
        """The pseudo-header's contribution to an encapsulated TCP checksum."""
        total = (self.src >> 16) + (self.src & 0xFFFF)
        total += (self.dst >> 16) + (self.dst & 0xFFFF)
        total += self.proto
        total += self.payload_length()
        return total & 0xFFFFFFFF

    def describe(self) -> str:
        """Every field on its own line, numbers in hexadecimal."""
        return (
            f"IP version: {self.ver:x}\n"
            f"IP hdr len: {self.hlen:x}\n"
            f"IP tos: {self.tos:x}\n"
            f"IP dgram len: {self.length:x}\n"
            f"IP id: {self.ident:x}\n"
            f"Flags: df: {str(self.df).lower()} mf: {str(self.mf).lower()}\n"
            f"Offset: {self.offset:x}\n"
            f"TTL: {self.ttl:x}\n"
            f"Protocol: {self.proto:x}\n"
            f"Checksum: {self.cksum:x}\n"
            f"Src addr: {self.src:x}\n"
            f"Dst addr: {self.dst:x}\n"
        )

    def summary(self) -> str:
        """A one-line summary of the header."""
        ttl = "" if self.ttl >= 10 else f"ttl={self.ttl}, "
        return (
            f"IPv{self.ver:x}, len={self.length:x}, protocol={self.proto:x}, {ttl}"
            f"src={_dotted(self.src)}, dst={_dotted(self.dst)}"
        )


@dataclass
class IPv4Datagram:
    """An IPv4 header with its payload."""

    header: IPv4Header = field(default_factory=IPv4Header)
    payload: bytes = b""

    @classmethod
    def parse(cls, data: bytes) -> IPv4Datagram:
        """Parse and verify a whole datagram."""
        header = IPv4Header.parse(data)
        payload = bytes(data[4 * header.hlen :])
        if len(payload) != header.payload_length():
            raise PacketTooShort("payload shorter than the header claims")
        return cls(header, payload)

    def serialize(self) -> bytes:
        """Encode the datagram, computing the header checksum."""
        if len(self.payload) != self.header.payload_length():
            raise ValueError("IPv4Datagram.serialize: payload is wrong size")
        header_out = replace(self.header, cksum=0)
        header_out.cksum = internet_checksum(header_out.serialize())
        return header_out.serialize() + bytes(self.payload)