from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple, Union

from taskalloc.core.errors import DomainError
from taskalloc.core.logger import get_logger
from taskalloc.domain.normalize import normalize_number, normalize_values
from taskalloc.domain.schema import (
    ConstraintSpec,
    LinearConstraint,
    LinearProgram,
    RawNumber,
    SolveOutcome,
    SolveRequest,
)

logger = get_logger(__name__)

ConstraintInput = Union[ConstraintSpec, LinearConstraint]


def validate_problem(
    costs: Sequence[RawNumber],
    limits: Sequence[RawNumber] = (),
    constraints: Optional[Sequence[ConstraintInput]] = None,
) -> Union[LinearProgram, SolveOutcome]:
    """
    Turn raw task costs and resource limits into a LinearProgram.

    Returns an ``invalid_problem`` SolveOutcome naming the offending field
    instead of raising, so callers can re-prompt.
    """
    try:
        program = _build_program(costs, limits, constraints or ())
    except DomainError as exc:
        logger.info("Rejected problem: %s", exc)
        return SolveOutcome.invalid_problem(str(exc))

    logger.debug(
        "Validated problem with n=%d tasks, m=%d limits, %d constraints",
        program.n,
        program.m,
        len(program.constraints),
    )
    return program


def validate_request(req: SolveRequest) -> Union[LinearProgram, SolveOutcome]:
    return validate_problem(req.costs, req.limits, req.constraints)


def _build_program(
    costs: Sequence[RawNumber],
    limits: Sequence[RawNumber],
    constraints: Sequence[ConstraintInput],
) -> LinearProgram:
    cost_values = normalize_values("costs", costs)
    limit_values = normalize_values("limits", limits)

    _validate_costs(cost_values)
    _validate_limits(limit_values, n=len(cost_values))

    rows = tuple(
        _validate_constraint(k, c, n=len(cost_values)) for k, c in enumerate(constraints)
    )
    _validate_unique_constraint_names(rows)

    return LinearProgram(
        costs=tuple(cost_values), limits=tuple(limit_values), constraints=rows
    )


def _validate_costs(costs: List[float]) -> None:
    if not costs:
        raise DomainError("costs must contain at least one task.")
    for i, c in enumerate(costs):
        if c <= 0:
            kind = "zero" if c == 0 else "negative"
            raise DomainError(
                f"costs[{i}] must be strictly positive; got {kind} cost {c}."
            )


def _validate_limits(limits: List[float], n: int) -> None:
    if len(limits) > n:
        raise DomainError(
            f"limits has {len(limits)} entries but only {n} tasks were given."
        )
    for j, lim in enumerate(limits):
        if lim < 0:
            raise DomainError(f"limits[{j}] must be non-negative; got negative limit {lim}.")


def _validate_constraint(k: int, c: ConstraintInput, n: int) -> LinearConstraint:
    field = f"constraints[{k}]"
    if len(c.coefficients) != n:
        raise DomainError(
            f"{field} has {len(c.coefficients)} coefficients, expected one per task ({n})."
        )
    coefficients: Tuple[float, ...] = tuple(
        normalize_values(f"{field}.coefficients", c.coefficients)
    )
    rhs = normalize_number(f"{field}.rhs", c.rhs)
    return LinearConstraint(
        name=c.name, coefficients=coefficients, relation=c.relation, rhs=rhs
    )


def _validate_unique_constraint_names(rows: Sequence[LinearConstraint]) -> None:
    counts: Dict[str, int] = defaultdict(int)
    for c in rows:
        if c.name is not None:
            counts[c.name] += 1
    dups = sorted(name for name, k in counts.items() if k > 1)
    if dups:
        raise DomainError(f"Duplicate constraint names found: {dups}.")
