"""Command-line interface for flownet.

Both commands read whitespace-delimited integers (stdin by default) and print
results to stdout::

    $ printf '3 2 0 2\\n0 1 5\\n1 2 3\\n' | flownet maxflow
    3
    0 1 3
    1 2 3
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

from flownet.logging import get_logger, set_global_log_level
from flownet.maxflow import MfGraph
from flownet.mincostflow import McfGraph

logger = get_logger(__name__)


class _Tokens:
    """Cursor over the integers of an input stream."""

    def __init__(self, text: str, source: str) -> None:
        self._source = source
        self._values: Iterator[str] = iter(text.split())
        self._count = 0

    def next(self, what: str) -> int:
        token = next(self._values, None)
        if token is None:
            raise ValueError(
                f"{self._source}: unexpected end of input while reading {what}"
            )
        self._count += 1
        try:
            return int(token)
        except ValueError:
            raise ValueError(
                f"{self._source}: token {self._count} ({what}) is not an integer: "
                f"{token!r}"
            ) from None

    def header(self) -> List[int]:
        return [self.next(name) for name in ("n", "m", "s", "t")]


def _read_input(path: Optional[Path], stdin: TextIO) -> _Tokens:
    if path is None:
        return _Tokens(stdin.read(), "<stdin>")
    return _Tokens(path.read_text(), str(path))


def _run_maxflow(
    tokens: _Tokens, limit: Optional[int], min_cut: bool, as_json: bool
) -> None:
    n, m, s, t = tokens.header()
    graph = MfGraph(n)
    for i in range(m):
        graph.add_edge(
            tokens.next(f"edge {i} src"),
            tokens.next(f"edge {i} dst"),
            tokens.next(f"edge {i} cap"),
        )
    logger.debug(f"Read max-flow instance: n={n} m={m} s={s} t={t}")

    if limit is None:
        value = graph.flow(s, t)
    else:
        value = graph.flow_with_capacity(s, t, limit)
    edges = graph.edges()
    cut = graph.min_cut(s) if min_cut else None

    if as_json:
        payload = {"flow": value, "edges": [asdict(e) for e in edges]}
        if cut is not None:
            payload["min_cut"] = cut
        print(json.dumps(payload, indent=2))
        return

    lines = [str(value)]
    lines.extend(f"{e.src} {e.dst} {e.flow}" for e in edges)
    if cut is not None:
        lines.append(" ".join("1" if r else "0" for r in cut))
    print("\n".join(lines))


def _run_mincostflow(
    tokens: _Tokens, limit: Optional[int], slope: bool, as_json: bool
) -> None:
    n, m, s, t = tokens.header()
    graph = McfGraph(n)
    for i in range(m):
        graph.add_edge(
            tokens.next(f"edge {i} src"),
            tokens.next(f"edge {i} dst"),
            tokens.next(f"edge {i} cap"),
            tokens.next(f"edge {i} cost"),
        )
    logger.debug(f"Read min-cost-flow instance: n={n} m={m} s={s} t={t}")

    if limit is None:
        points = graph.slope(s, t)
    else:
        points = graph.slope_with_capacity(s, t, limit)
    value, cost = points[-1]
    edges = graph.edges()

    if as_json:
        payload = {
            "flow": value,
            "cost": cost,
            "slope": [list(p) for p in points],
            "edges": [asdict(e) for e in edges],
        }
        print(json.dumps(payload, indent=2))
        return

    lines = [f"{value} {cost}"]
    if slope:
        lines.extend(f"{f} {c}" for f, c in points)
    else:
        lines.extend(f"{e.src} {e.dst} {e.flow}" for e in edges)
    print("\n".join(lines))


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``flownet`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="flownet",
        description="Solve maximum-flow and minimum-cost-flow instances.",
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{maxflow,mincostflow}",
        help="Available commands",
    )

    maxflow_parser = subparsers.add_parser(
        "maxflow",
        help="Maximum flow; input 'n m s t' then m lines 'u v cap'",
    )
    maxflow_parser.add_argument(
        "--min-cut",
        action="store_true",
        help="Also print the source side of the minimum cut as 0/1 flags",
    )

    mcf_parser = subparsers.add_parser(
        "mincostflow",
        help="Minimum-cost flow; input 'n m s t' then m lines 'u v cap cost'",
    )
    mcf_parser.add_argument(
        "--slope",
        action="store_true",
        help="Print the cost curve breakpoints instead of per-edge flows",
    )

    for p in (maxflow_parser, mcf_parser):
        p.add_argument(
            "--input",
            "-i",
            type=Path,
            default=None,
            help="Read the instance from this file instead of stdin",
        )
        p.add_argument(
            "--limit",
            "-l",
            type=int,
            default=None,
            help="Stop after sending this much flow",
        )
        p.add_argument(
            "--json", action="store_true", help="Print results as JSON"
        )

    effective_args = sys.argv[1:] if argv is None else argv

    # If no arguments are provided, show help and exit cleanly
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    try:
        tokens = _read_input(args.input, sys.stdin)
        if args.command == "maxflow":
            _run_maxflow(tokens, args.limit, args.min_cut, args.json)
        elif args.command == "mincostflow":
            _run_mincostflow(tokens, args.limit, args.slope, args.json)
    except FileNotFoundError:
        logger.error(f"Input file not found: {args.input}")
        print(f"❌ ERROR: Input file not found: {args.input}")
        sys.exit(1)
    except (ValueError, IndexError, OverflowError) as e:
        logger.error(f"Invalid instance: {type(e).__name__}: {e}")
        print(f"❌ ERROR: Invalid instance: {type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
