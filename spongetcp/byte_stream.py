"""A flow-controlled, in-memory, in-order byte stream."""

from __future__ import annotations


class ByteStream:
    """A finite byte stream with bounded capacity.

    Bytes are written on the input side and read from the output side.
    Once the writer ends the input, no further bytes are accepted.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._buffer = bytearray()
        self._written = 0
        self._read = 0
        self._input_ended = False
        self._error = False

    # Writer side

    def write(self, data: bytes) -> int:
        """Write as many bytes as fit and return how many were accepted."""
        if self._input_ended:
            return 0
        accepted = min(len(data), self.remaining_capacity())
        self._buffer += data[:accepted]
        self._written += accepted
        return accepted

    def remaining_capacity(self) -> int:
        """Number of additional bytes the stream has room for."""
        return self._capacity - self.buffer_size()

    def end_input(self) -> None:
        """Signal that no more bytes will be written."""
        self._input_ended = True

    def set_error(self) -> None:
        """Mark the stream as having suffered an error."""
        self._error = True

    # Reader side

    def peek_output(self, length: int) -> bytes:
        """Return up to ``length`` bytes from the front without removing them."""
        return bytes(self._buffer[: min(length, self.buffer_size())])

    def pop_output(self, length: int) -> None:
        """Remove up to ``length`` bytes from the front of the buffer."""
        count = min(length, self.buffer_size())
        del self._buffer[:count]
        self._read += count

    def read(self, length: int) -> bytes:
        """Remove and return up to ``length`` bytes from the front."""
        data = self.peek_output(length)
        self.pop_output(length)
        return data

    def input_ended(self) -> bool:
        return self._input_ended

    def error(self) -> bool:
        return self._error

    def buffer_size(self) -> int:
        """Number of bytes currently available to read."""
        return self._written - self._read

    def buffer_empty(self) -> bool:
        return self.buffer_size() == 0

    def eof(self) -> bool:
        """True once input has ended and every byte has been read."""
        return self._input_ended and self.buffer_empty()

    # Accounting

    def bytes_written(self) -> int:
        return self._written

    def bytes_read(self) -> int:
        return self._read