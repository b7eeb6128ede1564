#!/usr/bin/env python3
"""
gcpenum - Google Cloud Storage bucket enumerator
Generate bucket name permutations from keywords, find the ones that exist
and list the contents of the publicly readable ones.
"""

import argparse
import logging
import sys
import time
from datetime import timedelta

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from gcpenum.config import DEFAULT_CONCURRENCY, DEFAULT_DENIAL_PHRASES, DEFAULT_TIMEOUT, ScanConfig
from gcpenum.generator import generate_all
from gcpenum.scanner import Scanner
from gcpenum.wordlist import SetupError, load_keywords, load_suffixes

console = Console(highlight=False)
logger = logging.getLogger("gcpenum")

LINE_STYLES = (
    ("EXISTS:", "bold green"),
    ("LISTABLE:", "cyan"),
    ("ERROR:", "red"),
    ("UNKNOWN RESPONSE", "yellow"),
)


def line_style(line: str):
    stripped = line.lstrip()
    for prefix, style in LINE_STYLES:
        if stripped.startswith(prefix):
            return style
    return None


class ResultSink:
    """Prints each result line and appends it to the output file, if any."""

    def __init__(self, out_file=None, console=console):
        self.out_file = out_file
        self.console = console
        self.count = 0

    def write(self, line: str):
        self.console.print(Text(line, style=line_style(line) or ""), soft_wrap=True)
        if self.out_file is not None:
            self.out_file.write(line + "\n")
            self.out_file.flush()
        self.count += 1

    def consume(self, lines):
        for line in lines:
            self.write(line)


def print_banner():
    console.print(r"""[bold cyan]
   __ _  ___ _ __   ___ _ __  _   _ _ __ ___
  / _` |/ __| '_ \ / _ \ '_ \| | | | '_ ` _ \
 | (_| | (__| |_) |  __/ | | | |_| | | | | | |
  \__, |\___| .__/ \___|_| |_|\__,_|_| |_| |_|
  |___/     |_|[/]
       [dim]GCP Storage Bucket Enumerator[/]
    """)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gcpenum",
        description="gcpenum: GCP Storage bucket enumerator"
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("-n", "--keyword", help="Keyword for bucket name permutations")
    group.add_argument("-l", "--keyword-list", help="Path to a file containing a list of keywords")

    parser.add_argument("-w", "--wordlist", help="Path to a wordlist file (defaults to downloaded wordlist)")
    parser.add_argument("-o", "--output", help="Path to save the results")
    parser.add_argument("-c", "--concurrency", type=int, default=DEFAULT_CONCURRENCY,
                        help="Number of concurrent bucket checks")
    parser.add_argument("-t", "--timeout", type=float, default=DEFAULT_TIMEOUT,
                        help="Per-request timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose mode for detailed responses")
    parser.add_argument("--deny-phrase", action="append", dest="deny_phrases", metavar="PHRASE",
                        help="403 body text meaning the bucket is indistinguishable from absent "
                             "(repeatable, replaces the defaults)")
    parser.add_argument("--no-banner", action="store_true", help="Do not print the banner")
    return parser


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    # urllib3 is noisy at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.concurrency < 1:
        parser.error("concurrency must be at least 1")
    if args.timeout <= 0:
        parser.error("timeout must be positive")

    setup_logging(args.verbose)
    if not args.no_banner:
        print_banner()

    config = ScanConfig(
        concurrency=args.concurrency,
        verbose=args.verbose,
        timeout=args.timeout,
        denial_phrases=args.deny_phrases or DEFAULT_DENIAL_PHRASES,
    )

    out_file = None
    try:
        suffixes = load_suffixes(args.wordlist, echo=console.print)
        keywords = load_keywords(args.keyword, args.keyword_list)
        buckets = generate_all(keywords, suffixes)
        if args.output:
            try:
                out_file = open(args.output, "w")
            except OSError as e:
                raise SetupError(f"Could not create output file: {e}") from e
    except SetupError as e:
        console.print(Text(f"ERROR: {e}", style="red"), soft_wrap=True)
        return 1

    console.print(f"\nGenerated {len(buckets)} bucket names from {len(keywords)} keyword(s).")

    logger.debug("scanning %d buckets with concurrency %d", len(buckets), config.concurrency)
    start = time.monotonic()
    try:
        sink = ResultSink(out_file)
        sink.consume(Scanner(config).scan(buckets))
    finally:
        if out_file is not None:
            out_file.close()

    duration = timedelta(seconds=time.monotonic() - start)
    console.print(f"\nScan completed in {duration}. Scanned {len(buckets)} buckets.")
    if args.output:
        console.print(Text(f"Results saved to {args.output}", style="bold green"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
