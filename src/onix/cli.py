"""
Command-line filter.

Reads lines from stdin, writes VERIFIED lines to stdout and status lines
to stderr, and shows the entropy ring unless --headless is given.

    llm-client | onix-governor > clean.txt
"""

from __future__ import annotations

import argparse
import sys
from typing import IO, List, Optional

from onix.config import DisplayConfig, GovernorConfig
from onix.governor import Governor
from onix.lattice import ResonantLattice, SharedLattice

BANNER = (
    "ONIX GOVERNOR v2.0 — UNIVERSAL FINAL RELEASE",
    "Status: Listening on stdin | Pipe any LLM output here",
    "─" * 53,
)


def build_parser() -> argparse.ArgumentParser:
    defaults = GovernorConfig()
    ap = argparse.ArgumentParser(
        prog="onix-governor",
        description="Pass coherent lines through, drop lines whose lattice entropy exceeds the threshold.",
    )
    ap.add_argument("--side", type=int, default=defaults.side, help="lattice dimension N")
    ap.add_argument("--threshold", type=float, default=defaults.threshold)
    ap.add_argument("--dt", type=float, default=defaults.dt)
    ap.add_argument("--damping", type=float, default=defaults.damping)
    ap.add_argument("--steps", type=int, default=defaults.steps, help="steps K per line")
    ap.add_argument("--phase-twist", type=float, default=defaults.phase_twist)
    ap.add_argument("--nonlinearity", type=float, default=defaults.nonlinearity)
    ap.add_argument("--headless", action="store_true", help="do not open the entropy ring window")
    ap.add_argument("--no-color", action="store_true", help="plain verdict tags")
    return ap


def config_from_args(args: argparse.Namespace) -> GovernorConfig:
    cfg = GovernorConfig(
        side=args.side,
        threshold=args.threshold,
        dt=args.dt,
        damping=args.damping,
        steps=args.steps,
        phase_twist=args.phase_twist,
        nonlinearity=args.nonlinearity,
    )
    cfg.validate()
    return cfg


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[IO[bytes]] = None,
    stdout: Optional[IO[bytes]] = None,
    stderr: Optional[IO[str]] = None,
) -> int:
    """
    Run the governor over a byte stream.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).
        stdin: Binary input stream (defaults to sys.stdin.buffer).
        stdout: Binary accepted-output stream (defaults to sys.stdout.buffer).
        stderr: Text status stream (defaults to sys.stderr).

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = config_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer
    stderr = stderr if stderr is not None else sys.stderr
    color = not args.no_color and stderr.isatty()

    for line in BANNER:
        print(line, file=stderr)

    shared = SharedLattice(ResonantLattice(cfg))
    governor = Governor(cfg, shared=shared, status=stderr, color=color)

    display = None
    if not args.headless:
        # Imported here so headless runs never initialise a GUI backend.
        from onix.ring import RingDisplay

        display = RingDisplay(shared.sample, DisplayConfig()).start()

    try:
        governor.run(stdin, stdout)
    except KeyboardInterrupt:
        return 130
    finally:
        if display is not None:
            display.stop(timeout=1.0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
