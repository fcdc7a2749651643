#!/usr/bin/env python3
"""
fastchaos command line interface

Commands:
    encode   FASTA/FASTQ -> .bicgr (or legacy .gz with --legacy)
    decode   .bicgr or legacy .gz -> FASTA
    draw     CGR image per sequence (<id>_cgr.png)
    compare  pairwise DSSIM of the images in a directory

Exit status:
    0   every item succeeded
    1   I/O error (missing input, unreadable file, output exists)
    2   bad arguments or configuration
    65  at least one record or sequence failed; the others were written

Usage:
    fastchaos encode genome.fa -o genome.bicgr -w 100 --ovl 10
    fastchaos decode genome.bicgr -o genome.fa
    fastchaos -t 8 draw genome.fa -o images/
    fastchaos compare images/ -o dssim.tsv
"""

import argparse
import logging
import os
import sys
from contextlib import nullcontext
from pathlib import Path
from typing import List, Optional

import yaml
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .batch import decode_batch, encode_batch, parse_batch
from .bicgr import RecordChunk, format_record, open_bicgr, split_records
from .cgr import draw_records, draw_sequences
from .compare import compare_directory, write_comparison
from .config_parser import find_config, get_nested, load_config, resolve_settings, validate_config
from .errors import FastchaosError
from .executor import count_failures
from .legacy import LegacyDocument, document_to_record, dump_legacy, is_legacy_container, iter_documents, record_to_document
from .seqio import format_from_extension, read_sequences, write_fasta

logger = logging.getLogger("fastchaos")

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_USAGE = 2
EXIT_DATA_ERROR = 65

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class UsageError(Exception):
    """Bad argument combination or configuration."""


# ============================================================================
# Setup helpers
# ============================================================================

def setup_logging(verbose: bool = False, quiet: bool = False, no_color: bool = False) -> None:
    """Configure the root logger; all log output goes to stderr."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    if no_color or os.environ.get("NO_COLOR"):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            markup=False,
            show_path=False,
        )

    logging.basicConfig(level=level, handlers=[handler], force=True)


def load_settings(config_path: Optional[str]) -> dict:
    """Load, validate and default-fill the YAML config, if any."""
    path = find_config(config_path)
    config = {}
    if path:
        try:
            config = load_config(path)
        except (yaml.YAMLError, ValueError) as e:
            raise UsageError(f"Cannot parse config {path}: {e}") from e
        logger.debug(f"Loaded config from {path}")

    is_valid, errors = validate_config(config)
    if not is_valid:
        raise UsageError("Invalid configuration: " + "; ".join(errors))
    return resolve_settings(config)


def check_output(path: Optional[str], force: bool) -> None:
    """Refuse to overwrite an existing output unless forced."""
    if path and path != "-" and Path(path).exists() and not force:
        raise FileExistsError(f"Output {path} already exists (use --force to overwrite)")


def open_output(path: Optional[str]):
    """Open an output text file, or stdout for None / "-"."""
    if not path or path == "-":
        return nullcontext(sys.stdout)
    return open(path, "w", encoding="utf-8", newline="\n")


def _threads(args, settings: dict) -> int:
    threads = args.threads if args.threads is not None else get_nested(settings, "resources.threads", 1)
    return max(1, int(threads))


def _item_label(item, index: int) -> str:
    if isinstance(item, RecordChunk) and item.record_id:
        return item.record_id
    if isinstance(item, LegacyDocument):
        return f"document at line {item.line_number}"
    return f"record {index + 1}"


def read_encoded(path: str) -> list:
    """Split a .bicgr (plain or gzipped) or legacy file into undecoded per-record items."""
    if path == "-":
        return list(split_records(sys.stdin))
    if is_legacy_container(path):
        logger.info(f"Reading legacy container {path}")
        return list(iter_documents(path))
    with open_bicgr(path) as f:
        return list(split_records(f))


def _is_encoded_input(path: str) -> bool:
    # Sequence extensions win; gzip magic alone also matches .fa.gz
    if path == "-" or format_from_extension(path) is not None:
        return False
    if path.lower().endswith((".bicgr", ".bicgr.gz")):
        return True
    return is_legacy_container(path)


def _max_width(args, settings: dict) -> int:
    if args.max_width is not None:
        if args.max_width < 1:
            raise UsageError(f"--max-width must be at least 1, got {args.max_width}")
        return args.max_width
    return int(get_nested(settings, "encode.block_width"))


def collect(items: list, results: list, verb: str) -> tuple:
    """Split results into successful values and a failure count, logging failures."""
    values = []
    for item, result in zip(items, results):
        if result.ok:
            values.append(result.value)
        else:
            logger.error(f"Failed to {verb} {_item_label(item, result.index)}: {result.error}")
    return values, count_failures(results)


def decode_items(items: list, threads: int, max_width: Optional[int] = None) -> tuple:
    """Decode items, logging failures; returns (sequences, failure count)."""
    return collect(items, decode_batch(items, threads=threads, max_width=max_width), "decode")


# ============================================================================
# Commands
# ============================================================================

def cmd_encode(args, settings: dict) -> int:
    width = args.width if args.width is not None else get_nested(settings, "encode.block_width")
    overlap = args.ovl if args.ovl is not None else get_nested(settings, "encode.overlap")
    threads = _threads(args, settings)

    if args.legacy and (not args.output or args.output == "-"):
        raise UsageError("--legacy needs an output file (-o)")
    check_output(args.output, args.force)

    sequences = list(read_sequences(args.input))
    logger.info(f"Encoding {len(sequences)} sequences (W={width}, overlap={overlap}, threads={threads})")
    results = encode_batch(sequences, block_width=width, overlap=overlap, threads=threads)

    failures = 0
    encoded = []
    for sequence, result in zip(sequences, results):
        if not result.ok:
            logger.error(f"Failed to encode {sequence.id}: {result.error}")
            failures += 1
            continue
        try:
            if args.legacy:
                document_to_record(record_to_document(result.value))
                encoded.append(result.value)
            else:
                encoded.append(format_record(result.value))
        except FastchaosError as e:
            logger.error(f"Failed to encode {sequence.id}: {e}")
            failures += 1

    if args.legacy:
        dump_legacy(encoded, args.output)
    else:
        with open_output(args.output) as out:
            for text in encoded:
                out.write(text)

    logger.info(f"Wrote {len(encoded)} records, {failures} failed")
    return EXIT_DATA_ERROR if failures else EXIT_OK


def cmd_decode(args, settings: dict) -> int:
    threads = _threads(args, settings)
    max_width = _max_width(args, settings)
    check_output(args.output, args.force)

    items = read_encoded(args.input)
    logger.info(f"Decoding {len(items)} records (threads={threads})")
    sequences, failures = decode_items(items, threads, max_width)

    with open_output(args.output) as out:
        write_fasta(sequences, out)

    logger.info(f"Wrote {len(sequences)} sequences, {failures} failed")
    return EXIT_DATA_ERROR if failures else EXIT_OK


def cmd_draw(args, settings: dict) -> int:
    size = args.size if args.size is not None else get_nested(settings, "draw.image_size")
    threads = _threads(args, settings)
    outdir = Path(args.output)
    max_width = _max_width(args, settings)
    failures = 0

    if args.blocks:
        if not _is_encoded_input(args.input):
            raise UsageError("--blocks needs a .bicgr or legacy input")
        items = read_encoded(args.input)
        records, failures = collect(items, parse_batch(items, threads=threads, max_width=max_width), "parse")
        logger.info(f"Drawing {len(records)} block images of {size}x{size} px into {outdir}")
        drawn = records
        results = draw_records(records, outdir, size=size, threads=threads)
    else:
        if _is_encoded_input(args.input):
            sequences, failures = decode_items(read_encoded(args.input), threads, max_width)
        else:
            sequences = list(read_sequences(args.input))
        logger.info(f"Drawing {len(sequences)} images of {size}x{size} px into {outdir}")
        drawn = sequences
        results = draw_sequences(sequences, outdir, size=size, threads=threads)

    for item, result in zip(drawn, results):
        if not result.ok:
            logger.error(f"Failed to draw {item.id}: {result.error}")
    draw_failures = count_failures(results)
    failures += draw_failures

    logger.info(f"Wrote {len(results) - draw_failures} images, {failures} failed")
    return EXIT_DATA_ERROR if failures else EXIT_OK


def cmd_compare(args, settings: dict) -> int:
    check_output(args.output, args.force)
    df = compare_directory(args.directory, threads=_threads(args, settings))

    if args.output and args.output != "-":
        write_comparison(df, args.output)
        logger.info(f"Wrote {len(df)} comparisons to {args.output}")
    else:
        sys.stdout.write(write_comparison(df))
    return EXIT_OK


# ============================================================================
# Argument parsing
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fastchaos",
        description="Lossless DNA encoding with integer Chaos Game Representation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-t", "--threads", type=int, default=None,
                        help="Worker threads (default: resources.threads, 1)")
    parser.add_argument("--force", action="store_true", help="Overwrite existing output files")
    parser.add_argument("--config", metavar="FILE",
                        help="YAML config (default: $FASTCHAOS_CONFIG)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    parser.add_argument("--no-color", action="store_true", help="Plain log output (also: NO_COLOR)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    encode = subparsers.add_parser("encode", help="Encode FASTA/FASTQ to .bicgr")
    encode.add_argument("input", nargs="?", default="-", help="FASTA/FASTQ file, .gz ok (default: stdin)")
    encode.add_argument("-o", "--output", help="Output file (default: stdout)")
    encode.add_argument("-w", "--width", type=int, default=None,
                        help="Block width W (default: encode.block_width, 100)")
    encode.add_argument("--ovl", type=int, default=None,
                        help="Overlap between blocks (default: encode.overlap, 10)")
    encode.add_argument("--legacy", action="store_true",
                        help="Write the legacy gzip JSON container instead of .bicgr")
    encode.set_defaults(func=cmd_encode)

    decode = subparsers.add_parser("decode", help="Decode .bicgr or legacy input to FASTA")
    decode.add_argument("input", nargs="?", default="-", help=".bicgr or legacy .gz file (default: stdin)")
    decode.add_argument("-o", "--output", help="Output FASTA (default: stdout)")
    decode.add_argument("--max-width", type=int, default=None,
                        help="Reject blocks longer than this (default: encode.block_width, 100)")
    decode.set_defaults(func=cmd_decode)

    draw = subparsers.add_parser("draw", help="Draw a CGR image per sequence")
    draw.add_argument("input", help="FASTA/FASTQ, .bicgr or legacy file")
    draw.add_argument("-o", "--output", default=".", help="Output directory (default: .)")
    draw.add_argument("--size", type=int, default=None,
                      help="Image size in pixels (default: draw.image_size, 512)")
    draw.add_argument("--blocks", action="store_true",
                      help="Draw one point per block of an encoded input")
    draw.add_argument("--max-width", type=int, default=None,
                      help="Reject blocks longer than this (default: encode.block_width, 100)")
    draw.set_defaults(func=cmd_draw)

    compare = subparsers.add_parser("compare", help="Pairwise DSSIM of CGR images")
    compare.add_argument("directory", help="Directory of *.png images")
    compare.add_argument("-o", "--output", help="Output TSV (default: stdout)")
    compare.set_defaults(func=cmd_compare)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.quiet, args.no_color)

    try:
        settings = load_settings(args.config)
        return args.func(args, settings)
    except UsageError as e:
        logger.error(str(e))
        return EXIT_USAGE
    except (OSError, EOFError) as e:
        logger.error(str(e))
        return EXIT_IO_ERROR
    except ValueError as e:
        # Unparseable input as a whole (e.g. broken FASTA, bad UTF-8)
        logger.error(str(e))
        return EXIT_DATA_ERROR


if __name__ == "__main__":
    sys.exit(main())
