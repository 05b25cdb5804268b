"""
Governor: per-line decision loop.

For every non-blank line the governor injects the text into the shared
lattice, evolves it K steps, reads the entropy and returns a verdict.
Lines scoring above the threshold are BLOCKED and dropped; the rest are
VERIFIED and passed through unchanged.
"""

from __future__ import annotations

import enum
import math
import sys
from dataclasses import dataclass
from typing import IO, Iterable, Optional, Union

from onix.config import GovernorConfig
from onix.lattice import ResonantLattice, SharedLattice

ANSI_RED = "\x1b[91m"
ANSI_GREEN = "\x1b[92m"
ANSI_RESET = "\x1b[0m"

# Characters with the Unicode White_Space property. str.strip() with no
# argument also removes U+001C..U+001F, which are not White_Space.
WHITESPACE = (
    "\t\n\x0b\x0c\r \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)


def trim_line(line: Union[str, bytes]) -> Union[str, bytes]:
    """
    Strip leading and trailing White_Space from a line.

    Bytes that decode as UTF-8 are trimmed as text and re-encoded; other
    byte lines lose ASCII whitespace only.
    """
    if isinstance(line, bytes):
        try:
            decoded = line.decode("utf-8")
        except UnicodeDecodeError:
            return line.strip()
        return decoded.strip(WHITESPACE).encode("utf-8")
    return line.strip(WHITESPACE)


def format_entropy(entropy: float) -> str:
    """Three decimals; non-finite values print as NaN, inf or -inf."""
    if math.isnan(entropy):
        return "NaN"
    if math.isinf(entropy):
        return "inf" if entropy > 0 else "-inf"
    return f"{entropy:.3f}"


class Verdict(enum.Enum):
    VERIFIED = "VERIFIED"
    BLOCKED = "BLOCKED"

    @property
    def descriptor(self) -> str:
        return "Coherent" if self is Verdict.VERIFIED else "Hallucination"


@dataclass
class Decision:
    """Outcome for one line."""

    text: Union[str, bytes]
    entropy: float
    verdict: Verdict

    @property
    def accepted(self) -> bool:
        return self.verdict is Verdict.VERIFIED


def classify(entropy: float, threshold: float) -> Verdict:
    """Strictly above the threshold blocks; equal passes."""
    if entropy > threshold:
        return Verdict.BLOCKED
    return Verdict.VERIFIED


def format_status(decision: Decision, threshold: float, color: bool = False) -> str:
    """
    Render the status line for a decision.

    Args:
        decision: The decision to report.
        threshold: Threshold the entropy was compared against.
        color: Wrap the tag in ANSI red/green.

    Returns:
        e.g. "BLOCKED   Hallucination — entropy 0.700 > 0.618"
    """
    verdict = decision.verdict
    tag = verdict.value
    pad = " " * (10 - len(tag))
    if color:
        tint = ANSI_RED if verdict is Verdict.BLOCKED else ANSI_GREEN
        tag = f"{tint}{tag}{ANSI_RESET}"
    line = f"{tag}{pad}{verdict.descriptor} — entropy {format_entropy(decision.entropy)}"
    if verdict is Verdict.BLOCKED:
        line += f" > {threshold}"
    return line


class Governor:
    """
    The Decision Orchestrator.

    Holds the shared lattice lock for each line's whole evaluation. Never
    decides anything on blank lines: they leave the field untouched and
    produce no decision.
    """

    def __init__(
        self,
        config: Optional[GovernorConfig] = None,
        shared: Optional[SharedLattice] = None,
        status: Optional[IO[str]] = None,
        color: bool = False,
    ) -> None:
        """
        Initialise the governor.

        Args:
            config: Decision constants. Defaults to the reference values.
            shared: Lattice owner; a fresh one is built from config if omitted.
            status: Side channel for status lines. Defaults to stderr.
            color: Emit ANSI-coloured verdict tags.
        """
        self.config = config or GovernorConfig()
        self.shared = shared or SharedLattice(ResonantLattice(self.config))
        self.status = status
        self.color = color
        self.last: Optional[Decision] = None
        self.counts = {verdict: 0 for verdict in Verdict}

    def evaluate(self, line: Union[str, bytes]) -> Optional[Decision]:
        """
        Score one line.

        Args:
            line: Raw input line; surrounding whitespace is trimmed.

        Returns:
            The Decision, or None if the line was blank.
        """
        text = trim_line(line)
        if not text:
            return None

        entropy = self.shared.evaluate(text, self.config.steps)
        decision = Decision(
            text=text,
            entropy=entropy,
            verdict=classify(entropy, self.config.threshold),
        )
        self.last = decision
        self.counts[decision.verdict] += 1
        self.report(decision)
        return decision

    def report(self, decision: Decision) -> None:
        """Write the status line for a decision to the side channel."""
        stream = self.status if self.status is not None else sys.stderr
        print(format_status(decision, self.config.threshold, self.color), file=stream)

    def run(self, lines: Iterable[Union[str, bytes]], accepted: IO) -> int:
        """
        Filter a stream of lines.

        Verified lines are written to `accepted` one per line, in input
        order, flushing after each processed line.

        Args:
            lines: Input lines (str or bytes).
            accepted: Output stream matching the line type (text or binary).

        Returns:
            Number of lines processed (blank lines excluded).
        """
        processed = 0
        for line in lines:
            decision = self.evaluate(line)
            if decision is None:
                continue
            processed += 1
            if decision.accepted:
                newline = b"\n" if isinstance(decision.text, bytes) else "\n"
                accepted.write(decision.text + newline)
            accepted.flush()
        return processed

    @property
    def entropy(self) -> float:
        return self.shared.sample()
