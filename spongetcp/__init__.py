"""User-space TCP building blocks: byte streams, reassembly, IPv4/TCP wire formats, state summaries and TCP-over-UDP packet descriptions."""

__version__ = "0.1.0"

__all__ = ["byte_stream", "reassembler", "checksum", "ipv4", "tcp", "tcp_state", "dump"]