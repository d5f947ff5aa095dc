import ipaddress
import struct

import pytest

from spongetcp.checksum import PacketTooShort, ParseError
from spongetcp.dump import (
    LinkType,
    describe_packet,
    describe_segment,
    link_payload_offset,
    udp_payload_offset,
)
from spongetcp.ipv4 import IPv4Header
from spongetcp.tcp import TCPHeader, TCPSegment

SRC = "10.0.0.1"
DST = "10.0.0.2"


def tcp_bytes(payload=b"hello"):
    header = TCPHeader(sport=1234, dport=80, seqno=100, ackno=7, syn=True, ack=True, win=500)
    return TCPSegment(header, payload).serialize(0)


def ipv4_udp(payload, proto=17):
    header = IPv4Header(
        proto=proto,
        src=int(ipaddress.IPv4Address(SRC)),
        dst=int(ipaddress.IPv4Address(DST)),
        length=20 + 8 + len(payload),
    )
    return header.serialize() + b"\x00" * 8 + payload


def ipv6_udp(payload, extension=False):
    next_header = 0 if extension else 17
    fixed = bytes([0x60, 0, 0, 0]) + struct.pack("!HBB", 0, next_header, 64)
    fixed += ipaddress.IPv6Address("::1").packed + ipaddress.IPv6Address("::2").packed
    ext = bytes([17, 0]) + b"\x00" * 6 if extension else b""
    return fixed + ext + b"\x00" * 8 + payload


def test_raw_ipv4_packet_description():
    text = describe_packet(LinkType.RAW, ipv4_udp(tcp_bytes()))
    first, second = text.split("\n")
    assert first == f"{SRC}:1234 > {DST}:80"
    assert "Flags [S.]" in second
    assert "(correct)" in second
    assert " ack 7 win 500 length 25" in second


def test_sequence_range_counts_syn_and_payload():
    text = describe_segment(tcp_bytes(b"abc"), SRC, DST)
    assert " seq 100:104 " in text


def test_checksum_is_printed_in_hex():
    raw = tcp_bytes()
    cksum = TCPHeader.parse(raw).cksum
    assert f"cksum 0x{cksum:04x}" in describe_segment(raw, SRC, DST)


def test_bad_checksum_reports_incorrect():
    raw = bytearray(tcp_bytes())
    raw[16] ^= 0xFF
    text = describe_segment(bytes(raw), SRC, DST)
    assert "(incorrect!)" in text
    assert text.startswith(f"{SRC}:0 > {DST}:0")


def test_unrecognized_header():
    assert describe_segment(b"\xff\xff", "a", "b") == "(did not recognize TCP header) src: a dst: b"


def test_ethernet_offset():
    frame = b"\x00" * 12 + b"\x08\x00" + ipv4_udp(tcp_bytes())
    assert link_payload_offset(LinkType.EN10MB, frame) == 14
    assert describe_packet(LinkType.EN10MB, frame) == describe_packet(LinkType.RAW, frame[14:])


def test_ethernet_non_ip_rejected():
    frame = b"\x00" * 12 + b"\x08\x06" + b"\x00" * 28
    with pytest.raises(ParseError):
        link_payload_offset(LinkType.EN10MB, frame)


def test_short_frame_rejected():
    with pytest.raises(PacketTooShort):
        link_payload_offset(LinkType.LINUX_SLL, b"\x00" * 10)


def test_null_and_sll_offsets():
    assert link_payload_offset(LinkType.NULL, b"\x00\x00\x00\x02") == 4
    assert link_payload_offset(LinkType.LINUX_SLL, b"\x00" * 14 + b"\x86\xdd") == 16
    assert link_payload_offset(LinkType.LINUX_SLL2, b"\x08\x00" + b"\x00" * 18) == 20
    with pytest.raises(ParseError):
        link_payload_offset(LinkType.NULL, b"\x00\x00\x00\x07")


def test_ipv4_udp_offset():
    offset, src, dst = udp_payload_offset(ipv4_udp(b"xyz"))
    assert (offset, src, dst) == (28, SRC, DST)


def test_ipv4_not_udp_rejected():
    with pytest.raises(ParseError):
        udp_payload_offset(ipv4_udp(b"xyz", proto=6))


def test_ipv6_udp_offset():
    assert udp_payload_offset(ipv6_udp(b"xyz")) == (48, "::1", "::2")


def test_ipv6_extension_header_skipped():
    offset, _, _ = udp_payload_offset(ipv6_udp(b"xyz", extension=True))
    assert offset == 56


def test_unknown_version_and_empty_rejected():
    with pytest.raises(ParseError):
        udp_payload_offset(b"\x50" + b"\x00" * 40)
    with pytest.raises(PacketTooShort):
        udp_payload_offset(b"")


def test_ipv6_packet_description():
    text = describe_packet(LinkType.RAW, ipv6_udp(tcp_bytes()))
    assert text.startswith("::1:1234 > ::2:80")