from fastapi import APIRouter

from taskalloc.core.logger import get_logger
from taskalloc.domain.schema import LinearProgram, SolveOutcome, SolveRequest
from taskalloc.domain.validate import validate_request
from taskalloc.solvers.lp.solver import solve_lp

router = APIRouter(tags=["solve"])

logger = get_logger(__name__)


@router.post("/solve", response_model=SolveOutcome)
def solve(req: SolveRequest) -> SolveOutcome:
    program = validate_request(req)
    if not isinstance(program, LinearProgram):
        logger.info("POST /v1/solve rejected: %s", program.message)
        return program

    outcome = solve_lp(program)
    if outcome.ok:
        logger.info(
            "POST /v1/solve -> solved, objective=%s",
            outcome.solution.objective_value,
        )
    else:
        logger.info("POST /v1/solve -> %s: %s", outcome.status.value, outcome.message)
    return outcome
