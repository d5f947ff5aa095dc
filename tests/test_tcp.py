from dataclasses import replace

import pytest
from hypothesis import given
from hypothesis import strategies as st

from spongetcp.checksum import BadChecksum, HeaderTooShort, PacketTooShort, internet_checksum
from spongetcp.ipv4 import IPv4Header
from spongetcp.tcp import TCPHeader, TCPSegment


def _header(**fields):
    base = dict(sport=1234, dport=80, seqno=5, ackno=7, syn=True, ack=True, win=100)
    base.update(fields)
    return TCPHeader(**base)


def _pseudo(payload_len):
    ip = IPv4Header(src=0x0A000001, dst=0x0A000002)
    ip.length = 4 * ip.hlen + TCPHeader.LENGTH + payload_len
    return ip.pseudo_cksum()


def test_header_wire_layout():
    wire = _header().serialize()
    assert len(wire) == TCPHeader.LENGTH
    assert wire[0:2] == (1234).to_bytes(2, "big")
    assert wire[12] == 0x50
    assert wire[13] == 0b0001_0010


def test_header_round_trip():
    header = _header(psh=True, uptr=9, cksum=0xBEEF)
    parsed = TCPHeader.parse(header.serialize())
    assert parsed == header
    assert (parsed.sport, parsed.dport, parsed.cksum) == (1234, 80, 0xBEEF)


def test_equality_ignores_ports_and_checksum():
    assert _header() == _header(sport=1, dport=2, cksum=3)
    assert _header() != _header(fin=True)
    assert _header() != _header(win=101)


def test_header_with_option_words():
    header = _header(doff=6)
    wire = header.serialize() + b"data"
    assert len(wire) == 24 + 4
    assert TCPHeader.parse(wire).doff == 6


def test_header_too_short_data():
    with pytest.raises(PacketTooShort):
        TCPHeader.parse(b"\x00" * 19)


def test_header_bad_data_offset():
    wire = bytearray(_header().serialize())
    wire[12] = 0x40
    with pytest.raises(HeaderTooShort):
        TCPHeader.parse(bytes(wire))


def test_header_offset_past_data():
    wire = bytearray(_header().serialize())
    wire[12] = 0x60
    with pytest.raises(PacketTooShort):
        TCPHeader.parse(bytes(wire))


def test_serialize_rejects_short_offset():
    with pytest.raises(ValueError):
        _header(doff=4).serialize()


def test_summary_and_describe():
    header = _header()
    assert header.summary() == "Header(flags=SA,seqno=5,ack=7,win=100)"
    text = header.describe()
    assert "Flags: urg: false ack: true psh: false rst: false syn: true fin: false\n" in text
    assert text.startswith("TCP source port: ")


def test_segment_round_trip_with_pseudo_header():
    payload = b"hello world"
    pseudo = _pseudo(len(payload))
    segment = TCPSegment(_header(), payload)
    wire = segment.serialize(pseudo)
    parsed = TCPSegment.parse(wire, pseudo)
    assert parsed.payload == payload
    assert parsed.header == segment.header
    assert internet_checksum(wire, pseudo) == 0
    assert segment.header.cksum == 0


def test_segment_wrong_pseudo_header_fails():
    payload = b"abc"
    wire = TCPSegment(_header(), payload).serialize(_pseudo(len(payload)))
    with pytest.raises(BadChecksum):
        TCPSegment.parse(wire, 0)


def test_segment_corruption_detected_unless_unverified():
    wire = bytearray(TCPSegment(_header(), b"payload").serialize())
    wire[-1] ^= 0x01
    with pytest.raises(BadChecksum):
        TCPSegment.parse(bytes(wire))
    parsed = TCPSegment.parse(bytes(wire), verify=False)
    assert parsed.payload == bytes(wire[20:])


def test_length_in_sequence_space():
    payload = b"abc"
    assert TCPSegment(_header(syn=True, fin=True), payload).length_in_sequence_space() == len(payload) + 2
    assert TCPSegment(_header(syn=False), payload).length_in_sequence_space() == len(payload)
    assert TCPSegment(_header(syn=False, fin=True)).length_in_sequence_space() == 1


@given(
    payload=st.binary(max_size=300),
    seqno=st.integers(min_value=0, max_value=0xFFFFFFFF),
    ackno=st.integers(min_value=0, max_value=0xFFFFFFFF),
    flags=st.tuples(*[st.booleans()] * 6),
    win=st.integers(min_value=0, max_value=0xFFFF),
    pseudo=st.integers(min_value=0, max_value=0x3FFFF),
)
def test_segment_round_trip_property(payload, seqno, ackno, flags, win, pseudo):
    urg, ack, psh, rst, syn, fin = flags
    header = TCPHeader(
        seqno=seqno, ackno=ackno, urg=urg, ack=ack, psh=psh, rst=rst, syn=syn, fin=fin, win=win
    )
    parsed = TCPSegment.parse(TCPSegment(header, payload).serialize(pseudo), pseudo)
    assert parsed.payload == payload
    assert parsed.header == replace(header, cksum=parsed.header.cksum)