"""
Configuration for the Onix governor.

All reference constants live here as dataclass defaults. A default
GovernorConfig reproduces the reference behaviour exactly.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class GovernorConfig:
    """
    Lattice and decision constants.

    side:          Lattice dimension N (the field holds N × N cells).
    threshold:     Entropy above this value blocks the line.
    dt:            Time step Δt of the update rule.
    damping:       Multiplicative damping applied after every update.
    steps:         Number of steps K evolved per line.
    phase_twist:   Imaginary/real ratio used when injecting bytes.
    nonlinearity:  Coefficient of |ψ|² in the self-interaction term.
    """

    side: int = 80
    threshold: float = 0.618
    dt: float = 0.108
    damping: float = 0.991
    steps: int = 70
    phase_twist: float = 0.61
    nonlinearity: float = 0.618

    @property
    def size(self) -> int:
        """Total number of cells N²."""
        return self.side * self.side

    def validate(self) -> None:
        """Raise ValueError if the configuration cannot drive a lattice."""
        if self.side < 1:
            raise ValueError(f"side must be >= 1, got {self.side}")
        if self.steps < 0:
            raise ValueError(f"steps must be >= 0, got {self.steps}")
        if not 0.0 < self.damping <= 1.0:
            raise ValueError(f"damping must be in (0, 1], got {self.damping}")


@dataclass
class DisplayConfig:
    """Window geometry and frame cadence for the entropy ring."""

    width: int = 600
    height: int = 600
    frame_interval_ms: int = 16  # ~60 Hz
    title: str = "ONIX GOVERNOR v2.0 — UNIVERSAL"
