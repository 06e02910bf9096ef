"""Phase state machine for a single deposit validation run.

Enforces:
- Valid phase transitions only (VALID_TRANSITIONS table)
- A phase advances only when it produced no violations
- Every transition recorded, in order
"""

from __future__ import annotations

import logging

from depositgate.models.outcome import (
    VALID_TRANSITIONS,
    WORKING_PHASES,
    PhaseReport,
    PhaseStatus,
    PhaseTransition,
    ValidationPhase,
)

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested phase transition is not valid."""


class PhaseMachine:
    """Tracks where one validation run is.

    A machine belongs to exactly one run and is discarded with it.

    Parameters
    ----------
    run_id:
        Identifier of the run, carried into every transition record.
    """

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        self._current = ValidationPhase.PARSING_MANIFEST
        self._history: list[PhaseTransition] = []

    @property
    def current(self) -> ValidationPhase:
        return self._current

    @property
    def is_done(self) -> bool:
        return self._current == ValidationPhase.DONE

    @property
    def history(self) -> list[PhaseTransition]:
        """Return a copy of the recorded transitions."""
        return list(self._history)

    # ------------------------------------------------------------------
    # Transition logic
    # ------------------------------------------------------------------

    def transition(
        self, target: ValidationPhase, *, violation_count: int = 0
    ) -> PhaseTransition:
        """Move to *target*, recording how many violations the current phase left.

        A phase that produced violations may only move to DONE.
        """
        allowed = VALID_TRANSITIONS.get(self._current, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition run {self.run_id} from {self._current.value} "
                f"to {target.value}. Allowed: {sorted(s.value for s in allowed)}"
            )
        if violation_count and target != ValidationPhase.DONE:
            raise InvalidTransitionError(
                f"Cannot leave {self._current.value} for {target.value} with "
                f"{violation_count} violation(s); a failed phase ends the run"
            )

        record = PhaseTransition(
            run_id=self.run_id,
            from_phase=self._current,
            to_phase=target,
            violation_count=violation_count,
        )
        self._history.append(record)
        logger.info(
            "Run %s: %s -> %s (%d violations)",
            self.run_id,
            record.from_phase.value,
            record.to_phase.value,
            violation_count,
        )
        self._current = target
        return record

    def advance(self, violation_count: int) -> ValidationPhase:
        """Finish the current phase.

        Moves to the next working phase when *violation_count* is zero and
        to DONE otherwise (or after the last phase).  Returns the new phase.
        """
        if self.is_done:
            raise InvalidTransitionError(f"Run {self.run_id} is already done")
        if violation_count:
            target = ValidationPhase.DONE
        else:
            index = WORKING_PHASES.index(self._current)
            target = (
                WORKING_PHASES[index + 1]
                if index + 1 < len(WORKING_PHASES)
                else ValidationPhase.DONE
            )
        self.transition(target, violation_count=violation_count)
        return target

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def phase_reports(self) -> list[PhaseReport]:
        """One report per working phase, derived from the transition history.

        Phases the run never finished are SKIPPED.
        """
        finished = {t.from_phase: t.violation_count for t in self._history}
        reports: list[PhaseReport] = []
        for phase in WORKING_PHASES:
            if phase not in finished:
                reports.append(PhaseReport(phase=phase, status=PhaseStatus.SKIPPED))
                continue
            count = finished[phase]
            reports.append(
                PhaseReport(
                    phase=phase,
                    status=PhaseStatus.FAILED if count else PhaseStatus.PASSED,
                    violation_count=count,
                )
            )
        return reports
