import io
import sys
from pathlib import Path
import importlib
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture()
def m():
    """Lazily import the main module for tests to avoid module-level import."""
    return importlib.import_module("main")


@pytest.fixture()
def processor():
    """A silent HuffProcessor."""
    from processor import HuffProcessor

    return HuffProcessor()


def pack_bits(bits: str) -> bytes:
    """Pack a string of '0'/'1' characters MSB first, zero-padded."""
    from bitops import BitOutputStream

    out = io.BytesIO()
    writer = BitOutputStream(out)
    for ch in bits:
        writer.write_bits(int(ch), 1)
    writer.flush()
    return out.getvalue()


@pytest.fixture()
def bit_reader():
    """Build a BitInputStream over the given '0'/'1' string."""
    from bitops import BitInputStream

    def _make(bits: str):
        return BitInputStream(io.BytesIO(pack_bits(bits)))

    return _make


@pytest.fixture()
def sample_file(tmp_path: Path):
    """Write a small mixed text/binary file and return its path."""
    path = tmp_path / "sample.bin"
    path.write_bytes(
        b"Hello World!\n" * 20 + bytes(range(256)) + b"\x00\x01\x02\x03"
    )
    return path


def leaves(node):
    """Return every leaf below ``node`` in left-to-right order."""
    if node.is_leaf():
        return [node]
    return leaves(node.left) + leaves(node.right)


@pytest.fixture()
def leaves_fn():
    """
    Fixture that provides the leaves helper without importing conftest.
    """
    return leaves
