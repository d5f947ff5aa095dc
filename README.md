# spongetcp

Building blocks for a TCP implementation that runs entirely in user space.
The package is pure Python and has no third-party dependencies.

Each module can be used on its own:

- **`spongetcp.byte_stream`**: `ByteStream` is a flow-controlled, in-memory
  byte stream of fixed capacity. A writer pushes bytes in and can end the
  input. A reader peeks, pops or reads them out. The stream counts the bytes
  written and read, and carries an error flag.
- **`spongetcp.reassembler`**: `StreamReassembler` accepts substrings of a
  stream in any order, possibly overlapping, each tagged with its index. It
  writes every newly contiguous run into its output `ByteStream`.
- **`spongetcp.checksum`**: `internet_checksum()` computes the ones'-complement
  Internet checksum. The module also defines the `ParseError` exception family:
  `PacketTooShort`, `WrongIPVersion`, `HeaderTooShort`, `TruncatedPacket` and
  `BadChecksum`.
- **`spongetcp.ipv4`**: `IPv4Header` and `IPv4Datagram` parse and serialize
  IPv4 without options. They compute the TCP pseudo-header sum and give
  readable dumps.
- **`spongetcp.tcp`**: `TCPHeader` and `TCPSegment` parse and serialize TCP
  without options. They verify and compute checksums and give a segment's
  length in sequence space.
- **`spongetcp.tcp_state`**: `TCPConfig` holds the default settings. `State`
  lists the state names from the TCP specification. `ReceiverSummary` and
  `SenderSummary` describe what each endpoint is doing, and `TCPState` combines
  them into one summary of a connection.
- **`spongetcp.dump`**: produces tcpdump-style descriptions of TCP segments
  that travel inside UDP datagrams.

## Byte streams

```python
from spongetcp.byte_stream import ByteStream

stream = ByteStream(8)
stream.write(b"hello, world")   # only 8 bytes fit; returns 8
stream.remaining_capacity()     # 0
stream.peek_output(5)           # b"hello"
stream.read(5)                  # b"hello"
stream.end_input()
stream.read(100)                # b", w"
stream.eof()                    # True
```

`write()` returns 0 once `end_input()` has been called. `eof()` is true when
the input has ended and the buffer is empty. `bytes_written()` and
`bytes_read()` report running totals. `set_error()` and `error()` set and
query the error flag.

## Reassembling out-of-order data

```python
from spongetcp.reassembler import StreamReassembler

reassembler = StreamReassembler(1000)
reassembler.push_substring(b"cd", 2, False)
reassembler.unassembled_bytes()        # 2
reassembler.push_substring(b"ab", 0, False)
reassembler.push_substring(b"ef", 4, True)

out = reassembler.stream_out()
out.read(out.buffer_size())            # b"abcdef"
out.eof()                              # True
```

The capacity bounds both the reassembled bytes that have not been read and the
bytes held out of order. Bytes that fall at or beyond the first unread byte
plus the capacity are discarded. Overlapping substrings are stored only once,
so `unassembled_bytes()` counts each byte only once. A substring that starts
before the next expected byte is trimmed to the part that has not yet been
assembled. When the substring flagged as the last one has been fully
assembled, the output stream's input is ended. `empty()` is true when nothing
is waiting for assembly and the output buffer is empty.

## Packets on the wire

Parsing is done with class methods. Each returns a new object or raises a
subclass of `spongetcp.checksum.ParseError` that names the problem:

```python
from spongetcp.checksum import ParseError
from spongetcp.ipv4 import IPv4Datagram
from spongetcp.tcp import TCPSegment

try:
    datagram = IPv4Datagram.parse(raw_bytes)
    segment = TCPSegment.parse(datagram.payload, datagram.header.pseudo_cksum())
except ParseError as exc:
    print("not a valid TCP/IPv4 packet:", type(exc).__name__)
else:
    print(datagram.header.summary())
    print(segment.header.summary())
```

- `IPv4Header.parse()` checks the following, and raises the error in
  parentheses when a check fails:
  - the buffer is long enough (`PacketTooShort`);
  - the version is 4 (`WrongIPVersion`);
  - the header length is at least 5 words (`HeaderTooShort`);
  - the total-length field matches the data (`TruncatedPacket`);
  - the header checksum is correct (`BadChecksum`).
- `TCPSegment.parse(data, datagram_layer_checksum=0, verify=True)` checks the
  checksum over the whole segment, starting from the lower layer's pseudo-sum.
  Pass `verify=False` to skip that check.
- `serialize()` on `IPv4Datagram` and `TCPSegment` returns the wire bytes with
  the checksum computed. `serialize()` on `IPv4Header` and `TCPHeader` writes
  the `cksum` field exactly as it is set. A header whose length field is too
  small raises `ValueError` when serialized.
- The IPv4 header fields are `ver`, `hlen`, `tos`, `length`, `ident`, `df`,
  `mf`, `offset`, `ttl`, `proto`, `cksum`, `src` and `dst`. Both addresses are
  integers.
- `describe()` on either header lists every field, one per line, with numbers
  in hexadecimal. `summary()` gives a single line.
- Two `TCPHeader` objects compare equal when all their fields match, ignoring
  the ports and the checksum.

## Connection state

```python
from spongetcp.tcp_state import State, TCPState

TCPState.from_state(State.ESTABLISHED).name()
# "sender=`stream ongoing`, receiver=`SYN received (ackno exists), and input to stream hasn't ended`, active=1, linger_after_streams_finish=1"
```

`TCPState.from_endpoints(sender, receiver, active, linger)` builds the same
kind of summary from live endpoints:

- A receiver is any object with `stream_out()` returning a `ByteStream` and
  `ackno()` returning an integer or `None`.
- A sender is any object with `stream_in()`, `next_seqno_absolute()` and
  `bytes_in_flight()`.

The linger flag is kept only while the connection is active. A `TCPState`
compares equal to another `TCPState` with the same fields, and also to a
`State` whose official summary matches. For example,
`TCPState.from_state(State.CLOSED) == State.CLOSED` is true.

## Describing TCP carried over UDP

```python
from spongetcp.checksum import ParseError
from spongetcp.dump import LinkType, describe_packet

try:
    print(describe_packet(LinkType.EN10MB, frame_bytes))
except ParseError:
    pass  # not IP, not UDP, or malformed: skip it
```

Each step is also available as its own function:

- `link_payload_offset(link_type, packet)` strips the framing for one of these
  link types: `NULL`, `EN10MB`, `RAW`, `LINUX_SLL` and `LINUX_SLL2`.
- `udp_payload_offset(packet)` walks an IPv4 header, or an IPv6 header and its
  hop-by-hop, routing and destination-options extension headers. It returns
  the offset of the UDP payload together with the source and destination
  addresses.
- `describe_segment(payload, src, dst)` prints the following from the TCP
  header:
  - ports and flags;
  - the checksum, marked `(correct)` or `(incorrect!)`;
  - sequence and acknowledgement numbers;
  - the window and the payload length.

  If the payload is not a TCP header at all, it reports
  `(did not recognize TCP header)` instead.

## What the package does not do

- It contains no TCP sender, receiver or connection state machine.
  `TCPState` only summarises endpoints that you supply.
- It opens no sockets, tunnel devices or event loops, and it has no
  command-line programs.
- `spongetcp.dump` does not capture packets. It describes frames that you have
  already captured by other means.

## Running the tests

The test suite uses pytest and hypothesis, which are listed in the `test`
extra:

```
pip install -e ".[test]"
pytest
```