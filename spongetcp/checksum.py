"""Internet checksum and the errors raised while parsing packets."""

from __future__ import annotations

import struct


class ParseError(Exception):
    """A packet could not be parsed."""


class BadChecksum(ParseError):
    """The packet's checksum does not verify."""


class PacketTooShort(ParseError):
    """The packet holds fewer bytes than its headers require."""


class WrongIPVersion(ParseError):
    """The IP version field is not 4."""


class HeaderTooShort(ParseError):
    """A header length field is below the protocol minimum."""


class TruncatedPacket(ParseError):
    """The packet length differs from the length its header claims."""


def internet_checksum(data: bytes, initial: int = 0) -> int:
    """Return the one's-complement Internet checksum of ``data``.

    ``initial`` is added to the running sum first, e.g. a pseudo-header sum.
    An odd trailing byte is treated as the high byte of a final word.
    A result of zero over data that includes its checksum means it verifies.
    """
    if len(data) % 2:
        data = bytes(data) + b"\x00"
    total = initial + sum(word for (word,) in struct.iter_unpack("!H", data))
    while total > 0xFFFF:
        total = (total >> 16) + (total & 0xFFFF)
    return ~total & 0xFFFF