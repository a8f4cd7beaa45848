import io
import sys
from typing import Dict

from bitops import BitInputStream, BitOutputStream, EOF
from header import read_header, write_header
from huffman import (
    BITS_PER_INT,
    BITS_PER_WORD,
    HUFF_TREE,
    PSEUDO_EOF,
    FormatMismatchError,
    HuffNode,
    TruncatedStreamError,
    count_leaves,
    make_codings_from_tree,
    make_tree_from_counts,
    read_for_counts,
)

DEBUG_LOW = 1
DEBUG_HIGH = 4


class HuffProcessor:
    """Huffman compressor/decompressor with a self-describing tree header.

    Compressed layout: the 32-bit :data:`~huffman.HUFF_TREE` magic, the
    preorder tree header, the code of every input byte, the code of
    ``PSEUDO_EOF``, then zero padding to a byte boundary.

    :ivar debug: Diagnostic level; ``0`` is silent, ``DEBUG_LOW`` reports
        sizes, ``DEBUG_HIGH`` also dumps counts and codes. Never affects
        the produced bitstream.
    :type debug: int
    """

    def __init__(self, debug: int = 0):
        """Create a processor.

        :param debug: Diagnostic level written to stderr.
        :type debug: int
        :returns: None
        :rtype: None
        """
        self.debug = debug

    def _debug(self, level: int, message: str) -> None:
        if self.debug >= level:
            print(f"[DEBUG] {message}", file=sys.stderr)

    def compress(self, in_stream: BitInputStream, out_stream: BitOutputStream) -> None:
        """Compress everything readable from ``in_stream`` into ``out_stream``.

        The input is read twice (once to count, once to encode), so it
        must support :meth:`~bitops.BitInputStream.reset`.

        :param in_stream: Source of 8-bit words.
        :type in_stream: BitInputStream
        :param out_stream: Destination for the compressed bits.
        :type out_stream: BitOutputStream
        :returns: None
        :rtype: None
        """
        counts = read_for_counts(in_stream)
        self._debug(DEBUG_LOW, f"read {in_stream.bits_read} bits for counting")
        if self.debug >= DEBUG_HIGH:
            for symbol, count in enumerate(counts):
                if count:
                    self._debug(DEBUG_HIGH, f"count {symbol}\t{count}")

        root = make_tree_from_counts(counts)
        codings = make_codings_from_tree(root)
        self._debug(DEBUG_LOW, f"tree has {count_leaves(root)} leaves")
        if self.debug >= DEBUG_HIGH:
            for symbol in sorted(codings):
                self._debug(DEBUG_HIGH, f"encoding {symbol}\t{codings[symbol] or '(empty)'}")

        out_stream.write_bits(HUFF_TREE, BITS_PER_INT)
        header_bits = write_header(root, out_stream)
        self._debug(DEBUG_LOW, f"wrote {header_bits} header bits")

        in_stream.reset()
        self._write_compressed_bits(codings, in_stream, out_stream)
        out_stream.flush()
        self._debug(DEBUG_LOW, f"wrote {out_stream.bits_written} bits in total")

    @staticmethod
    def _write_compressed_bits(
        codings: Dict[int, str],
        in_stream: BitInputStream,
        out_stream: BitOutputStream,
    ) -> None:
        # int('', 2) is invalid, so an empty code is written as 0 bits of 0
        table = {symbol: (int(code or "0", 2), len(code)) for symbol, code in codings.items()}

        while True:
            word = in_stream.read_bits(BITS_PER_WORD)
            if word == EOF:
                break
            code, length = table[word]
            out_stream.write_bits(code, length)

        code, length = table[PSEUDO_EOF]
        out_stream.write_bits(code, length)

    def decompress(self, in_stream: BitInputStream, out_stream: BitOutputStream) -> None:
        """Decompress a stream produced by :meth:`compress`.

        ``out_stream`` is not flushed if decoding fails, and whatever
        reached it before the failure must be discarded by the caller.

        :param in_stream: Compressed bits.
        :type in_stream: BitInputStream
        :param out_stream: Destination for the original bytes.
        :type out_stream: BitOutputStream
        :returns: None
        :rtype: None
        :raises FormatMismatchError: If the magic number is missing or wrong.
        :raises TruncatedHeaderError: If the input ends inside the tree header.
        :raises CorruptHeaderError: If the tree header is malformed.
        :raises TruncatedStreamError: If the input ends before ``PSEUDO_EOF``.
        """
        magic = in_stream.read_bits(BITS_PER_INT)
        if magic != HUFF_TREE:
            raise FormatMismatchError(f"Illegal header starts with {magic:#x}")

        root = read_header(in_stream)
        self._debug(DEBUG_LOW, f"read {in_stream.bits_read} bits of magic and header")
        self._debug(DEBUG_LOW, f"tree has {count_leaves(root)} leaves")

        self._read_compressed_bits(root, in_stream, out_stream)
        out_stream.flush()
        self._debug(DEBUG_LOW, f"read {in_stream.bits_read} bits in total")

    @staticmethod
    def _read_compressed_bits(
        root: HuffNode,
        in_stream: BitInputStream,
        out_stream: BitOutputStream,
    ) -> None:
        # A leaf root has no edges to follow; its code is empty.
        if root.is_leaf():
            if root.value == PSEUDO_EOF:
                return
            raise TruncatedStreamError("Tree without PSEUDO_EOF can never terminate")

        current = root
        while True:
            bit = in_stream.read_bits(1)
            if bit == EOF:
                raise TruncatedStreamError("Bad input, no PSEUDO_EOF")

            current = current.right if bit == 1 else current.left
            if current.is_leaf():
                if current.value == PSEUDO_EOF:
                    break
                out_stream.write_bits(current.value, BITS_PER_WORD)
                current = root

    def compress_bytes(self, data: bytes) -> bytes:
        """Compress an in-memory byte string.

        :param data: Input bytes to compress.
        :type data: bytes
        :returns: Compressed bytes.
        :rtype: bytes
        """
        out = io.BytesIO()
        self.compress(BitInputStream(io.BytesIO(data)), BitOutputStream(out))
        return out.getvalue()

    def decompress_bytes(self, data: bytes) -> bytes:
        """Decompress bytes produced by :meth:`compress_bytes`.

        :param data: Compressed byte stream.
        :type data: bytes
        :returns: Original uncompressed bytes.
        :rtype: bytes
        :raises HuffException: On any malformed input, see :meth:`decompress`.
        """
        out = io.BytesIO()
        self.decompress(BitInputStream(io.BytesIO(data)), BitOutputStream(out))
        return out.getvalue()
