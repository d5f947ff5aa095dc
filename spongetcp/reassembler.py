"""Reassembly of possibly out-of-order, overlapping substrings into a stream."""

from __future__ import annotations

from dataclasses import dataclass

from .byte_stream import ByteStream


@dataclass
class _Fragment:
    index: int
    data: bytes

    @property
    def end(self) -> int:
        return self.index + len(self.data)


class _FragmentStore:
    """Ordered, non-overlapping fragments waiting to be assembled."""

    def __init__(self) -> None:
        self._fragments: list[_Fragment] = []

    def nbytes(self) -> int:
        return sum(len(fragment.data) for fragment in self._fragments)

    def empty(self) -> bool:
        return not self._fragments

    def clear(self) -> None:
        self._fragments.clear()

    def _first_ending_after(self, index: int) -> int | None:
        return next(
            (pos for pos, fragment in enumerate(self._fragments) if index < fragment.end),
            None,
        )

    def push(self, data: bytes, index: int) -> None:
        """Store ``data`` at ``index``, dropping bytes already held."""
        while True:
            end = index + len(data)
            pos = self._first_ending_after(index)
            if pos is None:
                self._fragments.append(_Fragment(index, data))
                return
            existing = self._fragments[pos]
            if index <= existing.index:
                if end >= existing.end:
                    # the new data covers the stored fragment entirely
                    del self._fragments[pos]
                elif end <= existing.index:
                    self._fragments.insert(pos, _Fragment(index, data))
                    return
                else:
                    data = data[: existing.index - index]
            else:
                if end <= existing.end:
                    return
                data = data[existing.end - index :]
                index = existing.end

    def reassemble(self, output: ByteStream) -> None:
        """Write every fragment that has become contiguous into ``output``."""
        while self._fragments and self._fragments[0].index <= output.bytes_written():
            fragment = self._fragments.pop(0)
            written = output.bytes_written()
            if fragment.end > written:
                output.write(fragment.data[written - fragment.index :])


class StreamReassembler:
    """Assembles indexed substrings into an in-order :class:`ByteStream`.

    The capacity bounds both the reassembled bytes not yet read and the
    bytes held out of order; bytes beyond it are silently discarded.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._output = ByteStream(capacity)
        self._pending = _FragmentStore()
        self._eof = False
        self._eof_index = 0

    def push_substring(self, data: bytes, index: int, eof: bool) -> None:
        """Accept ``data`` starting at stream position ``index``.

        ``eof`` marks the last byte of ``data`` as the last byte of the stream.
        """
        first_unassembled = self._output.bytes_written()
        first_unacceptable = self._output.bytes_read() + self._capacity
        end = index + len(data)

        if not self._eof and eof:
            self._eof = True
            self._eof_index = end

        if index <= first_unassembled < end:
            start = first_unassembled - index
            self._output.write(data[start : start + first_unacceptable - first_unassembled])
        elif first_unassembled < index < first_unacceptable:
            self._pending.push(data[: first_unacceptable - index], index)

        self._pending.reassemble(self._output)

        if self._eof and self._output.bytes_written() == self._eof_index:
            self._pending.clear()
            self._output.end_input()

    def stream_out(self) -> ByteStream:
        """The reassembled in-order byte stream."""
        return self._output

    def unassembled_bytes(self) -> int:
        """Number of bytes stored but not yet reassembled."""
        return self._pending.nbytes()

    def empty(self) -> bool:
        """True when nothing is waiting for assembly or reading."""
        return self._pending.empty() and self._output.buffer_empty()