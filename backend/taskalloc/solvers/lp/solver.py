from __future__ import annotations

from typing import Optional

from taskalloc.core.config import get_settings
from taskalloc.core.errors import DomainError
from taskalloc.core.logger import get_logger
from taskalloc.domain.schema import LinearProgram, Solution, SolveOutcome
from taskalloc.solvers.lp.build import build_lp, check_program
from taskalloc.solvers.lp.extract import compute_tight_constraints, extract_solution, make_solution
from taskalloc.solvers.lp.presolve import dominated_columns, violated_at_zero

logger = get_logger(__name__)


def solve_lp(
    program: LinearProgram,
    *,
    max_iterations: Optional[int] = None,
    tolerance: Optional[float] = None,
) -> SolveOutcome:
    """
    Minimize total weighted execution time for a validated LinearProgram.

    Every call builds its own GLOP instance; nothing is shared between calls.
    """
    settings = get_settings()
    max_iterations = settings.solver_max_iterations if max_iterations is None else max_iterations
    tol = settings.solver_tolerance if tolerance is None else tolerance

    try:
        check_program(program)
    except DomainError as exc:
        return SolveOutcome.invalid_problem(str(exc))

    if program.n == 0:
        return SolveOutcome.solved(Solution(allocation=(), objective_value=0.0))

    fixed = dominated_columns(program)
    logger.debug("Presolve fixed %d of %d tasks at zero", len(fixed), program.n)

    if len(fixed) == program.n:
        outcome = _solve_at_zero(program, tol)
    else:
        outcome = extract_solution(build_lp(program, fixed), max_iterations, tol)

    logger.info(
        "Solved n=%d m=%d: status=%s iterations=%d",
        program.n,
        program.m,
        outcome.status.value,
        outcome.iterations,
    )
    return outcome


def _solve_at_zero(program: LinearProgram, tol: float) -> SolveOutcome:
    # All variables presolved to zero: the zero vector is the only candidate.
    broken = violated_at_zero(program, tol)
    if broken is not None:
        label = broken.name or f"{broken.relation.value} {broken.rhs}"
        return SolveOutcome.infeasible(
            f"Constraints are contradictory: '{label}' cannot hold at any allocation."
        )

    allocation = tuple(0.0 for _ in program.costs)
    return SolveOutcome.solved(
        make_solution(program, allocation),
        compute_tight_constraints(program, allocation, eps=tol),
    )
