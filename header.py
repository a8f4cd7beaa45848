"""Serialization of a Huffman tree as a preorder bit sequence.

An internal node is written as a single ``0`` bit followed by its left and
right subtrees. A leaf is written as a ``1`` bit followed by its symbol in
``BITS_PER_WORD + 1`` bits, which is enough for ``PSEUDO_EOF``. Weights
are not stored.
"""
from typing import Set

from bitops import BitInputStream, BitOutputStream, EOF
from huffman import (
    ALPH_SIZE,
    BITS_PER_WORD,
    PSEUDO_EOF,
    CorruptHeaderError,
    HuffNode,
    TruncatedHeaderError,
)

LEAF_VALUE_BITS = BITS_PER_WORD + 1
MAX_DEPTH = ALPH_SIZE  #: Deepest possible leaf in a tree over 257 symbols


def write_header(root: HuffNode, writer: BitOutputStream) -> int:
    """Write the tree rooted at ``root`` to ``writer`` in preorder.

    :param root: Root of the tree to serialize.
    :type root: HuffNode
    :param writer: Destination bit stream.
    :type writer: BitOutputStream
    :returns: Number of bits written.
    :rtype: int
    """
    if root.is_leaf():
        writer.write_bits(1, 1)
        writer.write_bits(root.value, LEAF_VALUE_BITS)
        return 1 + LEAF_VALUE_BITS

    writer.write_bits(0, 1)
    return 1 + write_header(root.left, writer) + write_header(root.right, writer)


def read_header(reader: BitInputStream) -> HuffNode:
    """Rebuild a tree written by :func:`write_header`.

    :param reader: Bit stream positioned at the first header bit.
    :type reader: BitInputStream
    :returns: Root of the reconstructed tree (all weights are 0).
    :rtype: HuffNode
    :raises TruncatedHeaderError: If the input ends inside the header.
    :raises CorruptHeaderError: If a leaf value is out of range or
        repeated, or the tree is nested deeper than any valid tree.
    """
    return _read_node(reader, 0, set())


def _read_node(reader: BitInputStream, depth: int, seen: Set[int]) -> HuffNode:
    if depth > MAX_DEPTH:
        raise CorruptHeaderError(f"Tree header nested deeper than {MAX_DEPTH} levels")

    bit = reader.read_bits(1)
    if bit == EOF:
        raise TruncatedHeaderError("Input ended while reading tree structure")

    if bit == 1:
        value = reader.read_bits(LEAF_VALUE_BITS)
        if value == EOF:
            raise TruncatedHeaderError("Input ended while reading a leaf value")
        if value > PSEUDO_EOF:
            raise CorruptHeaderError(f"Leaf value out of range: {value}")
        if value in seen:
            raise CorruptHeaderError(f"Duplicate leaf value: {value}")
        seen.add(value)
        return HuffNode(value=value)

    left = _read_node(reader, depth + 1, seen)
    right = _read_node(reader, depth + 1, seen)
    return HuffNode(left=left, right=right)
