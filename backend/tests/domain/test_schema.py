import pytest
from pydantic import ValidationError

from taskalloc.domain.schema import (
    LinearConstraint,
    LinearProgram,
    Relation,
    Solution,
    SolveOutcome,
    SolveRequest,
    SolveStatus,
)


class TestSchema:
    def test_linear_program_derived_sizes(self):
        program = LinearProgram(costs=(1.0, 2.0, 3.0), limits=(4.0,))
        assert program.n == 3
        assert program.m == 1
        assert program.upper_bound(0) == 4.0
        assert program.upper_bound(2) is None

    def test_linear_program_rejects_more_limits_than_tasks(self):
        with pytest.raises(ValidationError, match="limits has 2 entries"):
            LinearProgram(costs=(1.0,), limits=(1.0, 2.0))

    def test_linear_program_rejects_constraint_width_mismatch(self):
        row = LinearConstraint(coefficients=(1.0,), relation=Relation.LEQ, rhs=1.0)
        with pytest.raises(ValidationError, match="expected 2"):
            LinearProgram(costs=(1.0, 2.0), constraints=(row,))

    def test_linear_program_is_frozen(self):
        program = LinearProgram(costs=(1.0,))
        with pytest.raises(ValidationError):
            program.costs = (2.0,)

    def test_linear_program_forbids_extra_fields(self):
        with pytest.raises(ValidationError):
            LinearProgram(costs=(1.0,), weights=(1.0,))

    def test_linear_constraint_lhs(self):
        row = LinearConstraint(coefficients=(2.0, -1.0, 0.5), rhs=0.0)
        assert row.relation == Relation.LEQ
        assert row.lhs((1.0, 3.0, 4.0)) == pytest.approx(1.0)

    def test_relation_parses_symbols(self):
        row = LinearConstraint(coefficients=(1.0,), relation=">=", rhs=2.0)
        assert row.relation == Relation.GEQ

        with pytest.raises(ValidationError):
            LinearConstraint(coefficients=(1.0,), relation="<", rhs=2.0)

    def test_outcome_constructors(self):
        solution = Solution(allocation=(0.0,), objective_value=0.0)

        solved = SolveOutcome.solved(solution, iterations=3)
        assert solved.ok
        assert solved.status == SolveStatus.SOLVED
        assert solved.solution == solution
        assert solved.message is None
        assert solved.iterations == 3

        for outcome, status in [
            (SolveOutcome.infeasible(), SolveStatus.INFEASIBLE),
            (SolveOutcome.unbounded(), SolveStatus.UNBOUNDED),
            (SolveOutcome.invalid_problem("bad"), SolveStatus.INVALID_PROBLEM),
        ]:
            assert not outcome.ok
            assert outcome.status == status
            assert outcome.solution is None
            assert outcome.message

    def test_outcome_serializes_status_value(self):
        data = SolveOutcome.invalid_problem("bad").model_dump(mode="json")
        assert data["status"] == "invalid_problem"
        assert data["message"] == "bad"

    def test_solve_request_accepts_text_and_numbers(self):
        req = SolveRequest(costs=["1.5", 2], limits=[3])
        assert req.costs == ["1.5", 2]
        assert req.constraints == []

    def test_solve_request_requires_costs(self):
        with pytest.raises(ValidationError):
            SolveRequest(limits=[1])

    @pytest.mark.parametrize("raw", [True, False])
    def test_solve_request_rejects_booleans(self, raw):
        with pytest.raises(ValidationError):
            SolveRequest(costs=[raw, 2])

        with pytest.raises(ValidationError):
            SolveRequest(costs=[1], limits=[raw])
