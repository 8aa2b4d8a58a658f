#!/usr/bin/env python3
"""
Count the different kinds of filesystem entries below a directory.

This example demonstrates:
- Building a TraversalConfig from command-line options
- Pruning paths with a denylist
- Reporting inaccessible entries while the walk continues

Try the different options to see how they change the walk, e.g.:

    python examples/count_nodes.py / --log-errors --deny /proc --deny /sys
"""

import argparse
import sys
import time
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from dazzlewalk import InvalidConfigurationError, TraversalConfig, TraversalError, count_entries


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Count directories, files and links in a tree")
    parser.add_argument("start", nargs="?", default=".", help="Directory to walk (default: .)")
    parser.add_argument("--max-depth", type=int, default=None, help="Maximum depth to descend")
    parser.add_argument("--follow-links", action="store_true",
                        help="Follow symbolic links (slower, cycles are detected)")
    parser.add_argument("--dirs-only", action="store_true", help="Only count directories")
    parser.add_argument("--no-link-entries", action="store_true", help="Skip symbolic links")
    parser.add_argument("--no-exotic-entries", action="store_true",
                        help="Skip FIFOs, sockets and devices")
    parser.add_argument("--deny", action="append", default=[], metavar="PATH",
                        help="Prune this path and everything below it (repeatable)")

    errors = parser.add_mutually_exclusive_group()
    errors.add_argument("--fail-fast", action="store_true", help="Stop at the first error")
    errors.add_argument("--log-errors", action="store_true", help="Log errors and continue")
    errors.add_argument("--ignore-errors", action="store_true", help="Skip errors silently")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        config = TraversalConfig.from_options(
            Path(args.start).absolute(),
            max_depth=args.max_depth,
            follow_links=args.follow_links,
            directories_only=args.dirs_only,
            no_symlink_entries=args.no_link_entries,
            no_exotic_entries=args.no_exotic_entries,
            abort_on_error=args.fail_fast,
            log_errors=args.log_errors,
            silent_errors=args.ignore_errors,
            denylist=[Path(p).absolute() for p in args.deny],
        )
    except InvalidConfigurationError as e:
        print(f"Invalid options: {e}", file=sys.stderr)
        return 2

    started = time.perf_counter()
    try:
        stats = count_entries(config)
    except TraversalError as e:
        print(f"Walk aborted: {e}", file=sys.stderr)
        return 1
    elapsed = time.perf_counter() - started

    print()
    print(f"Directories:          {stats.directories:,}")
    print(f"Files:                {stats.files:,}")
    print(f"Links (files/dirs):   {stats.symlinks:,}")
    print(f"Other (FIFO, etc...): {stats.other:,}")
    print(f"Walked {stats.total:,} entries in {elapsed:.2f}s")
    return 0


if __name__ == "__main__":
    import logging
    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    sys.exit(main())
