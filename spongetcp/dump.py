"""Describe TCP segments carried in captured UDP datagrams."""

from __future__ import annotations

import ipaddress
from enum import IntEnum

from .checksum import BadChecksum, PacketTooShort, ParseError
from .tcp import TCPSegment

_IP_ETHERTYPES = (0x0800, 0x86DD)
_NULL_IP_FAMILIES = (2, 24, 28, 30)
_UDP = 0x11
_IPV6_EXTENSIONS = (0, 43, 60)


class LinkType(IntEnum):
    """Datalink types whose framing can be stripped."""

    NULL = 0
    EN10MB = 1
    RAW = 12
    LINUX_SLL = 113
    LINUX_SLL2 = 276


class _NotIP(ParseError):
    """The link-layer frame does not carry IP."""


def link_payload_offset(link_type: LinkType, packet: bytes) -> int:
    """Offset of the IP packet inside a frame of the given link type."""
    link_type = LinkType(link_type)
    if link_type is LinkType.RAW:
        return 0
    if link_type is LinkType.NULL:
        if len(packet) < 4:
            raise PacketTooShort("malformed packet")
        if packet[3] not in _NULL_IP_FAMILIES:
            raise _NotIP("non-IP packet")
        return 4
    if link_type is LinkType.EN10MB:
        offset, type_at = 14, 12
    elif link_type is LinkType.LINUX_SLL:
        offset, type_at = 16, 14
    else:
        offset, type_at = 20, 0
    if len(packet) < offset:
        raise PacketTooShort("malformed packet")
    if int.from_bytes(packet[type_at : type_at + 2], "big") not in _IP_ETHERTYPES:
        raise _NotIP("non-IP packet")
    return offset


def udp_payload_offset(packet: bytes) -> tuple[int, str, str]:
    """Locate the UDP payload in an IPv4 or IPv6 packet.

    Returns the payload's offset and the source and destination addresses.
    """
    if not packet:
        raise PacketTooShort("empty packet")
    version = packet[0] & 0xF0
    if version == 0x40:
        offset = (packet[0] & 0x0F) * 4
        if len(packet) < max(offset, 20):
            raise PacketTooShort("IPv4 packet too short")
        if packet[9] != _UDP:
            raise ParseError("Not UDP")
        src = str(ipaddress.IPv4Address(bytes(packet[12:16])))
        dst = str(ipaddress.IPv4Address(bytes(packet[16:20])))
    elif version == 0x60:
        if len(packet) < 42:
            raise PacketTooShort("IPv6 packet too short")
        offset = 40
        next_header = packet[6]
        while next_header != _UDP:
            if next_header not in _IPV6_EXTENSIONS:
                raise ParseError("Not UDP or fragmented")
            next_header = packet[offset]
            offset += 8 * (1 + packet[offset + 1])
            if len(packet) < offset + 2:
                raise PacketTooShort("IPv6 extension headers run past the packet")
        src = str(ipaddress.IPv6Address(bytes(packet[8:24])))
        dst = str(ipaddress.IPv6Address(bytes(packet[24:40])))
    else:
        raise ParseError(f"unknown IP version {version >> 4}")
    return offset + 8, src, dst


def describe_segment(payload: bytes, src: str, dst: str) -> str:
    """Describe a UDP payload interpreted as a TCP segment."""
    try:
        segment = TCPSegment.parse(payload, 0)
        correct = True
    except BadChecksum:
        segment = TCPSegment()
        correct = False
    except ParseError:
        return f"(did not recognize TCP header) src: {src} dst: {dst}"

    header = segment.header
    flags = "".join(
        mark
        for mark, on in (
            ("U", header.urg),
            ("P", header.psh),
            ("R", header.rst),
            ("S", header.syn),
            ("F", header.fin),
            (".", header.ack),
        )
        if on
    )
    seqlen = segment.length_in_sequence_space()
    seq = f"{header.seqno}"
    if seqlen > 0:
        seq += f":{(header.seqno + seqlen) & 0xFFFFFFFF}"
    verdict = "(correct)" if correct else "(incorrect!)"
    return (
        f"{src}:{header.sport} > {dst}:{header.dport}\n"
        f"    Flags [{flags}] cksum 0x{header.cksum:04x} {verdict}"
        f" seq {seq} ack {header.ackno} win {header.win} length {len(payload)}"
    )


def describe_packet(link_type: LinkType, packet: bytes) -> str:
    """Describe a captured frame holding TCP over UDP; raises ParseError to skip it."""
    link_offset = link_payload_offset(link_type, packet)
    udp_offset, src, dst = udp_payload_offset(packet[link_offset:])
    return describe_segment(bytes(packet[link_offset + udp_offset :]), src, dst)