import heapq
import itertools
from typing import Dict, List, Optional

from bitops import BitInputStream, EOF

BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 1 << BITS_PER_WORD
PSEUDO_EOF = ALPH_SIZE  #: End-of-data marker, one past the last byte value
HUFF_NUMBER = 0xface8200
HUFF_TREE = HUFF_NUMBER | 1  #: Magic for the "tree header follows" framing


class HuffException(ValueError):
    """Base class for errors raised while decoding a compressed stream."""


class FormatMismatchError(HuffException):
    """The stream does not start with the :data:`HUFF_TREE` magic."""


class TruncatedHeaderError(HuffException):
    """Input ended in the middle of the serialized tree."""


class CorruptHeaderError(HuffException):
    """The serialized tree is complete but describes an invalid tree."""


class TruncatedStreamError(HuffException):
    """Input ended before the PSEUDO_EOF code was decoded."""


class HuffNode:
    """Node of a binary Huffman tree.

    Leaves carry a symbol in ``value``; internal nodes always have both
    children and their ``value`` is unused.

    :ivar value: Symbol stored at a leaf (``0..256``), ``0`` for internal nodes.
    :type value: int
    :ivar weight: Subtree weight, only meaningful while building the tree.
    :type weight: int
    :ivar left: Left child node (the ``0`` branch).
    :type left: HuffNode | None
    :ivar right: Right child node (the ``1`` branch).
    :type right: HuffNode | None
    """

    def __init__(self, value=0, weight=0, left=None, right=None):
        """Create a Huffman node.

        :param int value: Symbol value for leaf nodes.
        :param int weight: Weight associated with this node.
        :param left: Left child node, if any.
        :type left: HuffNode|None
        :param right: Right child node, if any.
        :type right: HuffNode|None
        :returns: None
        :rtype: None
        """
        self.value = value
        self.weight = weight
        self.left = left
        self.right = right

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __repr__(self):
        if self.is_leaf():
            return f"HuffNode(value={self.value}, weight={self.weight})"
        return f"HuffNode(weight={self.weight}, left={self.left!r}, right={self.right!r})"


def read_for_counts(reader: BitInputStream) -> List[int]:
    """Count how often each 8-bit word occurs in ``reader``.

    Consumes the reader until it reports :data:`~bitops.EOF`.

    :param reader: Bit reader positioned at the start of the data.
    :type reader: BitInputStream
    :returns: ``ALPH_SIZE + 1`` counts indexed by symbol, with
        ``PSEUDO_EOF`` always set to 1.
    :rtype: List[int]
    """
    counts = [0] * (ALPH_SIZE + 1)
    counts[PSEUDO_EOF] = 1
    while True:
        value = reader.read_bits(BITS_PER_WORD)
        if value == EOF:
            break
        counts[value] += 1
    return counts


def make_tree_from_counts(counts: List[int]) -> HuffNode:
    """Build a Huffman tree by repeatedly merging the two lightest nodes.

    Ties are broken first-in first-out: leaves enter in ascending symbol
    order and each merged node is queued after everything already present,
    so a given table always produces the same tree.

    If only one symbol has a non-zero count (an empty input leaves just
    ``PSEUDO_EOF``), that symbol's leaf is returned as the root.

    :param counts: Occurrence count per symbol.
    :type counts: List[int]
    :returns: Root of the tree.
    :rtype: HuffNode
    """
    order = itertools.count()
    heap = [
        (count, next(order), HuffNode(value=symbol, weight=count))
        for symbol, count in enumerate(counts)
        if count > 0
    ]
    heapq.heapify(heap)

    while len(heap) > 1:
        _, _, left = heapq.heappop(heap)
        _, _, right = heapq.heappop(heap)
        merged = HuffNode(weight=left.weight + right.weight, left=left, right=right)
        heapq.heappush(heap, (merged.weight, next(order), merged))

    return heap[0][2]


def make_codings_from_tree(root: HuffNode) -> Dict[int, str]:
    """Derive the code of every leaf from its path below ``root``.

    :param root: Root of a Huffman tree.
    :type root: HuffNode
    :returns: Mapping from symbol to a string of ``'0'``/``'1'``. A root
        that is itself a leaf gets the empty code.
    :rtype: Dict[int, str]
    """
    encodings: Dict[int, str] = {}
    _codings_helper(root, "", encodings)
    return encodings


def _codings_helper(node: Optional[HuffNode], path: str, encodings: Dict[int, str]):
    if node is None:
        return

    if node.is_leaf():
        encodings[node.value] = path
    else:
        _codings_helper(node.left, path + "0", encodings)
        _codings_helper(node.right, path + "1", encodings)


def count_leaves(root: HuffNode) -> int:
    """Count the leaves (distinct symbols) of a tree.

    :param root: Root of a Huffman tree.
    :type root: HuffNode
    :returns: Number of leaves below and including ``root``.
    :rtype: int
    """
    if root.is_leaf():
        return 1
    return count_leaves(root.left) + count_leaves(root.right)
