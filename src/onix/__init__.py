"""
Onix: a resonant-lattice line governor.

Each input line is injected into a complex-valued lattice, evolved under a
damped nonlinear wave rule, and scored by the imaginary "dissonance" left
behind. Lines above the threshold are blocked; the rest pass through.

Modules:
    config: Reference constants and display settings
    lattice: Field state, update rule, entropy, shared ownership
    governor: Per-line decision loop and status reporting
    ring: Entropy ring window (OpenCV)
    cli: stdin → stdout filter
"""

from onix.config import DisplayConfig, GovernorConfig
from onix.lattice import ResonantLattice, SharedLattice, neighbor_indices
from onix.governor import Decision, Governor, Verdict, classify, format_status

__version__ = "0.1.0"

__all__ = [
    "GovernorConfig",
    "DisplayConfig",
    "ResonantLattice",
    "SharedLattice",
    "neighbor_indices",
    "Governor",
    "Decision",
    "Verdict",
    "classify",
    "format_status",
]
