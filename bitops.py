from typing import BinaryIO

EOF = -1  #: Sentinel returned by :meth:`BitInputStream.read_bits` at end of input

CHUNK_SIZE = 1 << 16  #: Bytes moved per underlying read/write


class BitOutputStream:
    """Bit-packing writer over a binary stream.

    Accumulates individual bits into bytes and buffers them until
    flushed to the underlying stream.

    :ivar stream: Destination binary stream (file object or ``io.BytesIO``).
    :type stream: BinaryIO
    :ivar buffer: Fully written bytes not yet handed to ``stream``.
    :type buffer: bytearray
    :ivar bit_buffer: 8-bit scratch register for accumulating pending bits.
    :type bit_buffer: int
    :ivar bit_count: Number of valid bits currently stored in ``bit_buffer`` (0-7).
    :type bit_count: int
    :ivar bits_written: Total bits accepted by :meth:`write_bits` (excludes padding).
    :type bits_written: int
    """

    def __init__(self, stream: BinaryIO):
        """Initialize an empty bit writer on top of ``stream``.

        :param stream: Writable binary stream.
        :type stream: BinaryIO
        :returns: None
        :rtype: None
        """
        self.stream = stream
        self.buffer = bytearray()
        self.bit_buffer = 0
        self.bit_count = 0
        self.bits_written = 0

    def write_bits(self, value: int, nbits: int):
        """Write the lowest ``nbits`` of ``value``, MSB first.

        :param value: Integer whose bits will be written.
        :type value: int
        :param nbits: Number of bits from ``value`` to write. ``0`` is a no-op.
        :type nbits: int
        :returns: None
        :rtype: None
        """
        for i in range(nbits - 1, -1, -1):
            self.bit_buffer = (self.bit_buffer << 1) | ((value >> i) & 1)
            self.bit_count += 1
            if self.bit_count == 8:
                self.buffer.append(self.bit_buffer)
                self.bit_buffer = 0
                self.bit_count = 0
        self.bits_written += nbits
        if len(self.buffer) >= CHUNK_SIZE:
            self.stream.write(self.buffer)
            self.buffer.clear()

    def flush(self):
        """Pad the pending partial byte with zeros and push everything out.

        The underlying stream stays open so in-memory callers can still
        collect its contents.

        :returns: None
        :rtype: None
        """
        if self.bit_count > 0:
            self.bit_buffer <<= (8 - self.bit_count)
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0
        if self.buffer:
            self.stream.write(self.buffer)
            self.buffer.clear()
        self.stream.flush()

    def close(self):
        """Flush remaining bits and close the underlying stream."""
        self.flush()
        self.stream.close()


class BitInputStream:
    """Bit-level reader over a binary stream.

    Reads arbitrary bit lengths, MSB first. Running out of input is
    reported with the :data:`EOF` sentinel instead of an exception, so a
    caller can tell a legitimate ``0`` apart from the end of the data.

    :ivar stream: Source binary stream.
    :type stream: BinaryIO
    :ivar data: Current chunk of bytes read from ``stream``.
    :type data: bytes
    :ivar pos: Index of the next unread byte in ``data``.
    :type pos: int
    :ivar bit_buffer: Scratch register holding the current source byte.
    :type bit_buffer: int
    :ivar bit_count: Number of unread bits remaining in ``bit_buffer`` (0-8).
    :type bit_count: int
    :ivar bits_read: Total bits delivered to callers since the last reset.
    :type bits_read: int
    """

    def __init__(self, stream: BinaryIO):
        """Create a bit reader for ``stream``.

        :param stream: Readable binary stream.
        :type stream: BinaryIO
        :returns: None
        :rtype: None
        """
        self.stream = stream
        self.data = b""
        self.pos = 0
        self.bit_buffer = 0
        self.bit_count = 0
        self.bits_read = 0

    def _next_byte(self) -> int:
        if self.pos >= len(self.data):
            self.data = self.stream.read(CHUNK_SIZE)
            self.pos = 0
            if not self.data:
                return EOF
        byte = self.data[self.pos]
        self.pos += 1
        return byte

    def read_bits(self, nbits: int) -> int:
        """Read ``nbits`` bits from the stream and return them as an integer.

        Bits are returned MSB-first in the integer.

        :param nbits: Number of bits to read.
        :type nbits: int
        :returns: The next ``nbits`` bits, or :data:`EOF` if the stream
            ends before ``nbits`` bits are available.
        :rtype: int
        """
        result = 0
        for _ in range(nbits):
            if self.bit_count == 0:
                byte = self._next_byte()
                if byte == EOF:
                    return EOF
                self.bit_buffer = byte
                self.bit_count = 8
            result = (result << 1) | ((self.bit_buffer >> (self.bit_count - 1)) & 1)
            self.bit_count -= 1
        self.bits_read += nbits
        return result

    def reset(self):
        """Rewind to the start of the underlying stream.

        :returns: None
        :rtype: None
        :raises ValueError: If the underlying stream cannot seek.
        """
        if not self.stream.seekable():
            raise ValueError("Input stream does not support reset")
        self.stream.seek(0)
        self.data = b""
        self.pos = 0
        self.bit_buffer = 0
        self.bit_count = 0
        self.bits_read = 0
