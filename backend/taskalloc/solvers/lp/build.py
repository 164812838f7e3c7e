from __future__ import annotations

import math
from dataclasses import dataclass
from typing import FrozenSet, List, Tuple

from ortools.linear_solver import pywraplp

from taskalloc.core.errors import DomainError
from taskalloc.domain.schema import LinearConstraint, LinearProgram, Relation


@dataclass
class LPBuild:
    solver: pywraplp.Solver
    x: List[pywraplp.Variable]  # task index -> allocation var
    fixed: FrozenSet[int]  # task indices pinned at 0 by presolve

    # Helpers for extraction / slacks
    program: LinearProgram
    rows: List[Tuple[str, LinearConstraint]]  # (name, constraint) in input order

    def objective_expr(self) -> pywraplp.LinearExpr:
        return sum(c * self.x[i] for i, c in enumerate(self.program.costs))


def constraint_name(k: int, c: LinearConstraint) -> str:
    return c.name if c.name is not None else f"constraint[{k}]"


def limit_name(j: int) -> str:
    return f"limit[{j}]"


def check_program(program: LinearProgram) -> None:
    """Re-check value invariants a LinearProgram may carry unchecked."""
    for i, c in enumerate(program.costs):
        if not math.isfinite(c) or c <= 0:
            raise DomainError(f"costs[{i}] must be finite and strictly positive (got {c}).")
    for j, lim in enumerate(program.limits):
        if not math.isfinite(lim) or lim < 0:
            raise DomainError(f"limits[{j}] must be finite and non-negative (got {lim}).")
    if program.m > program.n:
        raise DomainError(
            f"limits has {program.m} entries but only {program.n} tasks are defined."
        )
    for k, c in enumerate(program.constraints):
        if len(c.coefficients) != program.n:
            raise DomainError(
                f"constraints[{k}] has {len(c.coefficients)} coefficients, expected {program.n}."
            )
        if not all(math.isfinite(a) for a in c.coefficients) or not math.isfinite(c.rhs):
            raise DomainError(f"constraints[{k}] contains a non-finite value.")


def build_lp(program: LinearProgram, fixed: FrozenSet[int] = frozenset()) -> LPBuild:
    s = pywraplp.Solver.CreateSolver("GLOP")  # Continuous LP, primal/dual simplex
    if s is None:
        raise RuntimeError("Failed to create OR-Tools GLOP solver.")

    inf = s.infinity()

    # Variables: 0 <= x_i <= limit_i (or +inf); presolved ones pinned at 0
    x: List[pywraplp.Variable] = []
    for i in range(program.n):
        if i in fixed:
            ub = 0.0
        else:
            bound = program.upper_bound(i)
            ub = inf if bound is None else float(bound)
        x.append(s.NumVar(0.0, ub, f"x[{i}]"))

    # External constraints
    rows: List[Tuple[str, LinearConstraint]] = []
    for k, c in enumerate(program.constraints):
        name = constraint_name(k, c)
        lhs = sum(a * x[i] for i, a in enumerate(c.coefficients) if a != 0)
        if c.relation == Relation.LEQ:
            s.Add(lhs <= c.rhs, name)
        elif c.relation == Relation.GEQ:
            s.Add(lhs >= c.rhs, name)
        else:
            s.Add(lhs == c.rhs, name)
        rows.append((name, c))

    built = LPBuild(solver=s, x=x, fixed=fixed, program=program, rows=rows)
    s.Minimize(built.objective_expr())
    return built
