"""
Lattice: Resonant field state, update rule, entropy extraction.

The field is an N × N grid of complex amplitudes stored flat in row-major
order. Neighbours are found on the flattened index modulo N², so row
boundaries wrap into the adjacent row rather than forming a true 2D torus.

One step:

    Lψ   = ψ[i-N] + ψ[i+N] + ψ[i-1] + ψ[i+1] - 4ψ[i]
    V(ψ) = ψ (1 + g |ψ|²)
    ψ'   = d · (ψ + i Δt (Lψ - V(ψ)))

    entropy = clamp(Σ |Im ψ'| / N, 0, 1)
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Union

import numpy as np

from onix.config import GovernorConfig


# Offsets in the order up, down, left, right.
def neighbor_offsets(side: int) -> tuple:
    return (-side, side, -1, 1)


def neighbor_indices(side: int) -> np.ndarray:
    """
    Build the flattened-index neighbour table for an N × N lattice.

    Args:
        side: Lattice dimension N.

    Returns:
        Integer array of shape (4, N²). Row k holds (i + offset_k) mod N²
        for every cell i, using the non-negative remainder.
    """
    size = side * side
    cells = np.arange(size, dtype=np.int64)
    offsets = np.array(neighbor_offsets(side), dtype=np.int64)[:, None]
    return np.mod(cells[None, :] + offsets, size)


def encode_text(text: Union[str, bytes]) -> bytes:
    """Raw bytes of a line; str is taken as UTF-8."""
    if isinstance(text, str):
        return text.encode("utf-8")
    return bytes(text)


# =============================================================================
# Resonant lattice
# =============================================================================

class ResonantLattice:
    """
    The Lattice Engine.

    Owns the field ψ and the entropy read out after the most recent step.
    Performs no thresholding.
    """

    def __init__(self, config: Optional[GovernorConfig] = None) -> None:
        """
        Create a zero-initialised lattice.

        Args:
            config: Lattice constants. Defaults to the reference values.
        """
        self.config = config or GovernorConfig()
        self.config.validate()
        self.psi = np.zeros(self.config.size, dtype=np.complex128)
        self.entropy = 0.0
        self._neighbors = neighbor_indices(self.config.side)

    @property
    def side(self) -> int:
        return self.config.side

    @property
    def size(self) -> int:
        return self.config.size

    @property
    def field(self) -> np.ndarray:
        """Read-only N × N view of the flat field."""
        view = self.psi.reshape(self.side, self.side).view()
        view.flags.writeable = False
        return view

    @property
    def energy(self) -> float:
        """Total field energy Σ|ψ|²."""
        return float(np.sum(np.abs(self.psi) ** 2))

    def reset(self) -> None:
        """Zero the field and the entropy."""
        self.psi = np.zeros(self.size, dtype=np.complex128)
        self.entropy = 0.0

    def inject(self, text: Union[str, bytes]) -> None:
        """
        Overwrite the field with the byte pattern of a line.

        Cell i receives v + i·(phase_twist·v) with v = byte/255. Bytes past
        N² are ignored. Entropy is left as it was until the next step().

        Args:
            text: Line to inject; str is encoded as UTF-8.
        """
        data = encode_text(text)[: self.size]
        psi = np.zeros(self.size, dtype=np.complex128)
        if data:
            v = np.frombuffer(data, dtype=np.uint8).astype(np.float64) / 255.0
            psi[: len(data)] = v + 1j * (v * self.config.phase_twist)
        self.psi = psi

    def step(self) -> float:
        """
        Advance the field by one synchronous update.

        Every next value is computed from the field as it stood at the start
        of the step; the old array is replaced only once all are ready.

        Returns:
            The new entropy.
        """
        cfg = self.config
        psi = self.psi

        up, down, left, right = psi[self._neighbors]
        laplacian = up + down + left + right - 4.0 * psi
        mag = np.abs(psi)
        nonlinear = psi * (1.0 + cfg.nonlinearity * mag ** 2)

        nxt = psi + (laplacian - nonlinear) * 1j * cfg.dt
        nxt *= cfg.damping

        # Running total accumulated cell by cell, in index order.
        dissonance = float(np.cumsum(np.abs(nxt.imag))[-1])

        self.psi = nxt
        self.entropy = float(np.clip(dissonance / cfg.side, 0.0, 1.0))
        return self.entropy

    def evolve(self, steps: int) -> float:
        """Run `steps` sequential steps and return the final entropy."""
        for _ in range(steps):
            self.step()
        return self.entropy

    def __repr__(self) -> str:
        return f"ResonantLattice(N={self.side} entropy={self.entropy:.4f} E={self.energy:.4f})"


# =============================================================================
# Shared ownership across threads
# =============================================================================

class SharedLattice:
    """
    Single owner of the live lattice, shared between threads.

    The orchestrator holds `lock` for a whole inject + K-step evaluation so
    that no two lines interleave. Readers never touch the field: each step
    publishes its entropy to a gauge guarded by a second, short-held lock.
    """

    def __init__(self, lattice: Optional[ResonantLattice] = None) -> None:
        self.lattice = lattice if lattice is not None else ResonantLattice()
        self.lock = threading.Lock()
        self._gauge_lock = threading.Lock()
        self._gauge = float(self.lattice.entropy)

    def _publish(self, entropy: float) -> None:
        with self._gauge_lock:
            self._gauge = entropy

    def sample(self) -> float:
        """Copy out the most recently published entropy."""
        with self._gauge_lock:
            return self._gauge

    @contextmanager
    def session(self) -> Iterator[ResonantLattice]:
        """Exclusive access to the lattice for the duration of the block."""
        with self.lock:
            yield self.lattice
            self._publish(float(self.lattice.entropy))

    def evaluate(self, text: Union[str, bytes], steps: int) -> float:
        """
        Inject `text` and run `steps` steps as one critical section.

        Args:
            text: Line to score.
            steps: Number of steps K.

        Returns:
            Entropy after the last step.
        """
        with self.session() as lattice:
            lattice.inject(text)
            for _ in range(steps):
                self._publish(float(lattice.step()))
            return float(lattice.entropy)
