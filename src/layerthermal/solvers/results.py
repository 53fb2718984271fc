"""
Solve outcomes.

A solve never raises for the two recoverable conditions of the pipeline
(degenerate elements and a singular system). They are collected here and the
caller decides whether to log, retry with other settings or propagate.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

    from layerthermal.solvers.boundary import BoundaryNodes


class FailureKind(enum.Enum):
    DEGENERATE_ELEMENT = "degenerate_element"
    SINGULAR_SYSTEM = "singular_system"


class SolveStatus(enum.Enum):
    OK = "ok"
    DEGRADED = "degraded"  # solved, but some elements contributed nothing
    FALLBACK = "fallback"  # linear solve failed, uniform midpoint field returned


class SolveFailedError(RuntimeError):
    """Raised by :meth:`SolveResult.raise_for_failures`."""


@dataclass(frozen=True)
class RecoverableFailure:
    kind: FailureKind
    message: str
    element_ids: tuple[int, ...] = ()


@dataclass
class SolveResult:
    """
    Temperature field of one steady-state solve and what went wrong on the way.

    Attributes:
        temperatures: One value per node, indexed like the mesh nodes.
        status: Overall outcome.
        failures: Recoverable failures in the order they occurred.
        boundary: The constrained node sets.
    """
    temperatures: npt.NDArray[np.float64]
    status: SolveStatus = SolveStatus.OK
    failures: list[RecoverableFailure] = field(default_factory=list)
    boundary: BoundaryNodes | None = None

    @property
    def ok(self) -> bool:
        return self.status is SolveStatus.OK

    @property
    def degenerate_elements(self) -> tuple[int, ...]:
        ids: list[int] = []
        for failure in self.failures:
            if failure.kind is FailureKind.DEGENERATE_ELEMENT:
                ids.extend(failure.element_ids)
        return tuple(ids)

    def raise_for_failures(self) -> None:
        """Raise :class:`SolveFailedError` if any recoverable failure was recorded."""
        if self.failures:
            messages = "; ".join(f"{f.kind.value}: {f.message}" for f in self.failures)
            raise SolveFailedError(f"Solve finished with status '{self.status.value}': {messages}")
