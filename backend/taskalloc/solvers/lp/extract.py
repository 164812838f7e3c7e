from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from ortools.linear_solver import pywraplp

from taskalloc.core.logger import get_logger
from taskalloc.domain.schema import (
    LinearConstraint,
    LinearProgram,
    Relation,
    Solution,
    SolveOutcome,
    TightConstraint,
)
from taskalloc.solvers.lp.build import LPBuild, constraint_name, limit_name

logger = get_logger(__name__)

# OR-Tools returns an int status code; this alias makes typing intent explicit.
_LpStatus = int

NOT_CONVERGED = "solver did not converge"


class _IterationBudget:
    """Simplex iterations left for the remaining passes of one solve."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.spent = 0

    @property
    def remaining(self) -> int:
        return self.limit - self.spent


def extract_solution(
    built: LPBuild, max_iterations: int, tol: float = 1e-7
) -> SolveOutcome:
    budget = _IterationBudget(max_iterations)
    status_code = _run_pass(built.solver, budget)

    if status_code == pywraplp.Solver.INFEASIBLE:
        return SolveOutcome.infeasible("Constraints are contradictory.", budget.spent)
    if status_code == pywraplp.Solver.UNBOUNDED:
        return SolveOutcome.unbounded("Objective has no finite minimum.", budget.spent)
    if status_code != pywraplp.Solver.OPTIMAL:
        return _not_converged(status_code, budget)

    values = _solution_values(built)
    optimum = built.solver.Objective().Value()

    status_code, values = _lexicographic_refine(built, optimum, values, budget, tol)
    if status_code != pywraplp.Solver.OPTIMAL:
        return _not_converged(status_code, budget)

    allocation = tuple(
        _snap(v, built.program.upper_bound(i), tol) for i, v in enumerate(values)
    )
    solution = make_solution(built.program, allocation)
    tight = compute_tight_constraints(built.program, allocation, eps=tol)
    return SolveOutcome.solved(solution, tight, iterations=budget.spent)


def make_solution(program: LinearProgram, allocation: Tuple[float, ...]) -> Solution:
    objective = math.fsum(c * v for c, v in zip(program.costs, allocation))
    return Solution(allocation=allocation, objective_value=objective)


def _run_pass(s: pywraplp.Solver, budget: _IterationBudget) -> _LpStatus:
    if budget.remaining <= 0:
        return pywraplp.Solver.NOT_SOLVED

    if not s.SetSolverSpecificParametersAsString(
        f"max_number_of_iterations: {budget.remaining}"
    ):
        raise RuntimeError("GLOP rejected the iteration limit parameter.")

    status_code = s.Solve()
    budget.spent += max(int(s.iterations()), 0)
    return status_code


def _solution_values(built: LPBuild) -> List[float]:
    return [var.solution_value() for var in built.x]


def _lexicographic_refine(
    built: LPBuild,
    optimum: float,
    values: List[float],
    budget: _IterationBudget,
    tol: float,
) -> Tuple[_LpStatus, List[float]]:
    """
    Among optimal allocations, pick the lexicographically smallest one.

    The objective is held at the optimum while each free variable, in index
    order, is minimized and then capped at its minimum.
    A variable already at zero is minimal and needs no pass.
    """
    s = built.solver
    s.Add(built.objective_expr() <= optimum, "objective_bound")

    for i, var in enumerate(built.x):
        if i in built.fixed:
            continue
        if values[i] > tol:
            s.Minimize(var)
            status_code = _run_pass(s, budget)
            if status_code != pywraplp.Solver.OPTIMAL:
                return status_code, values
            values = _solution_values(built)
        var.SetUb(min(var.ub(), max(values[i], 0.0)))

    return pywraplp.Solver.OPTIMAL, values


def _snap(v: float, ub: Optional[float], tol: float) -> float:
    if v <= tol:
        return 0.0
    if ub is not None and v >= ub - tol:
        return float(ub)
    return v


def _not_converged(status_code: _LpStatus, budget: _IterationBudget) -> SolveOutcome:
    detail = _status_message(status_code, budget)
    logger.warning("%s: %s", NOT_CONVERGED, detail)
    return SolveOutcome.invalid_problem(f"{NOT_CONVERGED} ({detail})", budget.spent)


def _status_message(status_code: int, budget: _IterationBudget) -> str:
    if budget.remaining <= 0:
        return f"iteration limit of {budget.limit} reached"
    if status_code == pywraplp.Solver.FEASIBLE:
        return "stopped at a feasible but unproven point"
    if status_code == pywraplp.Solver.MODEL_INVALID:
        return "model is invalid"
    if status_code == pywraplp.Solver.NOT_SOLVED:
        return "solver stopped early"
    if status_code == pywraplp.Solver.ABNORMAL:
        return "solver ended abnormally"
    if status_code in (pywraplp.Solver.INFEASIBLE, pywraplp.Solver.UNBOUNDED):
        return "tie-breaking pass lost the optimum"
    return f"unknown solver status {status_code}"


def compute_tight_constraints(
    program: LinearProgram,
    allocation: Sequence[float],
    eps: float = 1e-7,
) -> List[TightConstraint]:
    tight: List[TightConstraint] = []

    # Resource limits: limit - allocation
    for j, lim in enumerate(program.limits):
        slack = lim - allocation[j]
        if slack <= eps:
            tight.append(TightConstraint(name=limit_name(j), slack=slack))

    # External constraints: distance to the rhs on the feasible side
    for k, c in enumerate(program.constraints):
        slack = _row_slack(c, allocation)
        if slack <= eps:
            tight.append(TightConstraint(name=constraint_name(k, c), slack=slack))

    tight.sort(key=lambda t: (t.slack, t.name))
    return tight


def _row_slack(c: LinearConstraint, allocation: Sequence[float]) -> float:
    lhs = c.lhs(tuple(allocation))
    if c.relation == Relation.LEQ:
        return c.rhs - lhs
    if c.relation == Relation.GEQ:
        return lhs - c.rhs
    return abs(lhs - c.rhs)
