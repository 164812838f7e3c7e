from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    model_validator,
)


class SolveStatus(str, Enum):
    SOLVED = "solved"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    INVALID_PROBLEM = "invalid_problem"


class Relation(str, Enum):
    LEQ = "<="
    GEQ = ">="
    EQ = "=="


class StrictBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class FrozenModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


# Raw caller input: numbers or numeric text as typed into a form field.
# Strict so JSON booleans are rejected instead of coerced to 1.0.
RawNumber = Union[StrictInt, StrictFloat, StrictStr]


class LinearConstraint(FrozenModel):
    """sum(coefficients[i] * x[i]) <relation> rhs"""

    name: Optional[str] = None
    coefficients: Tuple[float, ...]
    relation: Relation = Relation.LEQ
    rhs: float

    def lhs(self, x: Tuple[float, ...]) -> float:
        return sum(a * v for a, v in zip(self.coefficients, x))


class LinearProgram(FrozenModel):
    costs: Tuple[float, ...]
    limits: Tuple[float, ...] = ()
    constraints: Tuple[LinearConstraint, ...] = ()

    @property
    def n(self) -> int:
        return len(self.costs)

    @property
    def m(self) -> int:
        return len(self.limits)

    def upper_bound(self, i: int) -> Optional[float]:
        """Limit bound on task i, or None when no resource bounds it."""
        return self.limits[i] if i < self.m else None

    @model_validator(mode="after")
    def _check_shape(self) -> "LinearProgram":
        if self.m > self.n:
            raise ValueError(
                f"limits has {self.m} entries but only {self.n} tasks are defined."
            )
        for k, c in enumerate(self.constraints):
            if len(c.coefficients) != self.n:
                raise ValueError(
                    f"constraints[{k}] has {len(c.coefficients)} coefficients, expected {self.n}."
                )
        return self


class Solution(FrozenModel):
    allocation: Tuple[float, ...]
    objective_value: float


class TightConstraint(StrictBaseModel):
    name: str
    slack: float


class SolveOutcome(StrictBaseModel):
    status: SolveStatus
    solution: Optional[Solution] = None
    message: Optional[str] = None
    tight_constraints: List[TightConstraint] = Field(default_factory=list)
    iterations: int = 0

    @classmethod
    def solved(
        cls,
        solution: Solution,
        tight_constraints: Optional[List[TightConstraint]] = None,
        iterations: int = 0,
    ) -> "SolveOutcome":
        return cls(
            status=SolveStatus.SOLVED,
            solution=solution,
            tight_constraints=tight_constraints or [],
            iterations=iterations,
        )

    @classmethod
    def infeasible(cls, message: str = "Problem is infeasible.", iterations: int = 0) -> "SolveOutcome":
        return cls(status=SolveStatus.INFEASIBLE, message=message, iterations=iterations)

    @classmethod
    def unbounded(cls, message: str = "Objective is unbounded below.", iterations: int = 0) -> "SolveOutcome":
        return cls(status=SolveStatus.UNBOUNDED, message=message, iterations=iterations)

    @classmethod
    def invalid_problem(cls, reason: str, iterations: int = 0) -> "SolveOutcome":
        return cls(status=SolveStatus.INVALID_PROBLEM, message=reason, iterations=iterations)

    @property
    def ok(self) -> bool:
        return self.status == SolveStatus.SOLVED


class ConstraintSpec(StrictBaseModel):
    name: Optional[str] = None
    coefficients: List[RawNumber]
    relation: Relation = Relation.LEQ
    rhs: RawNumber


class SolveRequest(StrictBaseModel):
    costs: List[RawNumber]
    limits: List[RawNumber] = Field(default_factory=list)
    constraints: List[ConstraintSpec] = Field(default_factory=list)
