import argparse
import os
import sys

from bitops import BitInputStream, BitOutputStream
from huffman import HuffException
from processor import HuffProcessor


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Huffman compressor with a self-describing tree header"
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    compress = subparsers.add_parser(
        "compress", aliases=["c"], help="Compress a file"
    )
    compress.add_argument("target", help="File to compress")
    compress.add_argument(
        "-o", "--output", required=True, help="Output compressed file path"
    )
    compress.add_argument(
        "-d",
        "--debug",
        type=int,
        default=0,
        help="Diagnostic level written to stderr (0 silent, 1 low, 4 high)",
    )

    decompress = subparsers.add_parser(
        "decompress", aliases=["d"], help="Decompress a file"
    )
    decompress.add_argument("archive", help="Compressed file to expand")
    decompress.add_argument(
        "-o", "--output", required=True, help="Output file path"
    )
    decompress.add_argument(
        "-d",
        "--debug",
        type=int,
        default=0,
        help="Diagnostic level written to stderr (0 silent, 1 low, 4 high)",
    )

    return parser


def _fmt_bytes(n: int) -> str:
    """Format a byte count into a human-readable string.

    :param n: Number of bytes.
    :type n: int
    :returns: Human-readable string.
    :rtype: str
    """
    for unit in ['', 'Ki', 'Mi', 'Gi', 'Ti']:
        if abs(n) < 1024:
            return f"{n:.2f} {unit}B"
        n /= 1024
    return f"{n:.2f} PiB"


def _fmt_ratio(before: int, after: int) -> str:
    """Format a compression ratio like ``2.35``.

    :param before: Size before compression.
    :type before: int
    :param after: Size after compression.
    :type after: int
    :returns: Ratio with two decimals, or ``"n/a"`` for an empty result.
    :rtype: str
    """
    if after <= 0:
        return "n/a"
    return f"{before / after:.2f}"


def _run(processor_op, input_path: str, output_path: str) -> bool:
    """Run a processor operation from ``input_path`` into ``output_path``.

    The partial output file is removed on any failure. Codec errors are
    reported with an ``[!]`` message, anything else is re-raised.

    :param processor_op: Bound ``HuffProcessor.compress`` or ``decompress``.
    :param input_path: File to read.
    :type input_path: str
    :param output_path: File to create.
    :type output_path: str
    :returns: ``True`` on success.
    :rtype: bool
    """
    try:
        in_fd = open(input_path, "rb")
    except FileNotFoundError:
        print(f"[!] Input file not found: {input_path}")
        return False
    if os.path.exists(output_path) and os.path.samefile(input_path, output_path):
        in_fd.close()
        print(f"[!] Input and output are the same file: {output_path}")
        return False
    try:
        out_fd = open(output_path, "wb")
    except OSError as e:
        in_fd.close()
        print(f"[!] Cannot create output file {output_path}: {e.strerror}")
        return False
    with in_fd, out_fd:
        try:
            processor_op(BitInputStream(in_fd), BitOutputStream(out_fd))
        except HuffException as e:
            error = e
        except Exception:
            out_fd.close()
            os.remove(output_path)
            raise
        else:
            error = None
    if error is not None:
        os.remove(output_path)
        print(f"[!] {error}")
        return False
    return True


def compress_file(input_path: str, output_path: str, debug: int = 0) -> bool:
    """Compress ``input_path`` into ``output_path`` and print a summary.

    :param input_path: File to compress.
    :type input_path: str
    :param output_path: Destination compressed file path.
    :type output_path: str
    :param debug: Diagnostic level passed to :class:`HuffProcessor`.
    :type debug: int
    :returns: ``True`` on success.
    :rtype: bool
    """
    if not _run(HuffProcessor(debug).compress, input_path, output_path):
        return False
    before = os.path.getsize(input_path)
    after = os.path.getsize(output_path)
    print("Size before compression: ", _fmt_bytes(before))
    print("Size after compression: ", _fmt_bytes(after))
    print(f"Compression ratio: {_fmt_ratio(before, after)}")
    return True


def decompress_file(input_path: str, output_path: str, debug: int = 0) -> bool:
    """Decompress ``input_path`` into ``output_path``.

    :param input_path: Compressed file to read.
    :type input_path: str
    :param output_path: Destination file path.
    :type output_path: str
    :param debug: Diagnostic level passed to :class:`HuffProcessor`.
    :type debug: int
    :returns: ``True`` on success; on failure the partial output is removed.
    :rtype: bool
    """
    if not _run(HuffProcessor(debug).decompress, input_path, output_path):
        return False
    print("Size after decompression: ", _fmt_bytes(os.path.getsize(output_path)))
    return True


def main(argv=None):
    """Entry point for the CLI tool.

    :param argv: Argument list, defaults to ``sys.argv[1:]``.
    :returns: Process exit status.
    :rtype: int
    """
    parser = get_parser()
    args = parser.parse_args(argv)

    if args.cmd in ["compress", "c"]:
        ok = compress_file(args.target, args.output, args.debug)
    else:
        ok = decompress_file(args.archive, args.output, args.debug)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
