from __future__ import annotations

from typing import FrozenSet, Optional

from taskalloc.domain.schema import LinearConstraint, LinearProgram, Relation


def dominated_columns(program: LinearProgram) -> FrozenSet[int]:
    """
    Indices of variables that can be fixed at zero without search.

    A variable qualifies when its cost is positive and lowering it never
    breaks a constraint: every non-zero coefficient sits in a ``<=`` row with
    a positive sign or a ``>=`` row with a negative sign. Any feasible point
    stays feasible and gets cheaper when such a variable drops to 0, so some
    optimum has it at 0.
    """
    fixed = set()
    for i, cost in enumerate(program.costs):
        if cost <= 0:
            continue
        if all(_lowering_is_safe(c, i) for c in program.constraints):
            fixed.add(i)
    return frozenset(fixed)


def _lowering_is_safe(c: LinearConstraint, i: int) -> bool:
    a = c.coefficients[i]
    if a == 0:
        return True
    if c.relation == Relation.LEQ:
        return a > 0
    if c.relation == Relation.GEQ:
        return a < 0
    return False


def violated_at_zero(program: LinearProgram, tol: float) -> Optional[LinearConstraint]:
    """First external constraint that the all-zero allocation breaks, if any."""
    for c in program.constraints:
        if c.relation == Relation.LEQ and c.rhs < -tol:
            return c
        if c.relation == Relation.GEQ and c.rhs > tol:
            return c
        if c.relation == Relation.EQ and abs(c.rhs) > tol:
            return c
    return None
