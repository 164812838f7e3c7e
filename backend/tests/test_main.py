import logging
from dataclasses import replace

import pytest

from taskalloc import main
from taskalloc.core.config import Settings, get_settings
from taskalloc.core.errors import DomainError

DEMAND_PAYLOAD = {
    "costs": [2, 3],
    "constraints": [{"name": "demand", "coefficients": [1, 1], "relation": ">=", "rhs": 4}],
}


def _capture_uvicorn(monkeypatch) -> dict:
    calls = {}

    def fake_run(app_str, host, port, reload):
        calls.update(app_str=app_str, host=host, port=port, reload=reload)

    # main.run() imports uvicorn lazily
    monkeypatch.setattr("uvicorn.run", fake_run, raising=True)
    return calls


class TestApp:
    def test_health_routes(self, client):
        assert client.get("/health").json() == {"status": "ok"}
        assert client.get("/v1/health").json() == {"status": "ok", "version": "0.1.0"}

    def test_openapi_lists_solve_route_and_metadata(self, client):
        schema = client.get("/openapi.json").json()

        assert "/v1/solve" in schema["paths"]
        assert schema["info"]["title"] == "Task Allocation Optimizer API"
        assert schema["info"]["version"] == "0.1.0"

    def test_stray_domain_error_maps_to_400(self, client):
        @client.app.get("/_test/domain-error")
        def _raise_domain_error():
            raise DomainError("boom")

        r = client.get("/_test/domain-error")
        assert r.status_code == 400
        assert r.json() == {"detail": "boom"}

    def test_solver_iteration_setting_reaches_the_endpoint(self, client, monkeypatch):
        capped = replace(Settings(), solver_max_iterations=0)
        monkeypatch.setattr("taskalloc.solvers.lp.solver.get_settings", lambda: capped)

        data = client.post("/v1/solve", json=DEMAND_PAYLOAD).json()

        assert data["status"] == "invalid_problem"
        assert data["message"].startswith("solver did not converge")

    @pytest.mark.parametrize("tolerance,expected", [(None, 9.7), ("0.5", 10.0)])
    def test_solver_tolerance_from_environment(self, client, monkeypatch, tolerance, expected):
        if tolerance is not None:
            monkeypatch.setenv("SOLVER_TOLERANCE", tolerance)
        get_settings.cache_clear()
        payload = {
            "costs": [1, 1],
            "limits": [10, 10],
            "constraints": [{"coefficients": [1, 1], "relation": ">=", "rhs": 9.7}],
        }

        data = client.post("/v1/solve", json=payload).json()

        # within tolerance of its limit, x[1] is snapped onto it
        assert data["status"] == "solved"
        assert data["solution"]["allocation"] == pytest.approx([0.0, expected])
        assert data["solution"]["objective_value"] == pytest.approx(expected)

    @pytest.mark.parametrize(
        "name,value", [("SOLVER_MAX_ITERATIONS", "0"), ("SOLVER_TOLERANCE", "5")]
    )
    def test_create_app_rejects_bad_solver_settings(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValueError, match=name):
            main.create_app()

    def test_solve_logs_outcome(self, client, caplog):
        caplog.set_level(logging.INFO, logger="taskalloc.api.v1.solve")

        client.post("/v1/solve", json=DEMAND_PAYLOAD)
        client.post("/v1/solve", json={"costs": [1, -1]})

        messages = [r.getMessage() for r in caplog.records if r.name == "taskalloc.api.v1.solve"]
        assert any("solved, objective=8" in m for m in messages)
        assert any("rejected: costs[1] must be strictly positive" in m for m in messages)


class TestRun:
    def test_run_uses_defaults(self, monkeypatch):
        calls = _capture_uvicorn(monkeypatch)
        for name in ("HOST", "PORT", "RELOAD"):
            monkeypatch.delenv(name, raising=False)

        main.run()

        assert calls == {
            "app_str": "taskalloc.main:app",
            "host": "0.0.0.0",
            "port": 8000,
            "reload": False,
        }

    def test_run_reads_env_vars(self, monkeypatch):
        calls = _capture_uvicorn(monkeypatch)
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("PORT", "1234")
        monkeypatch.setenv("RELOAD", "true")

        main.run()

        assert (calls["host"], calls["port"], calls["reload"]) == ("127.0.0.1", 1234, True)

    def test_run_refuses_invalid_solver_settings(self, monkeypatch):
        calls = _capture_uvicorn(monkeypatch)
        monkeypatch.setenv("SOLVER_MAX_ITERATIONS", "-5")

        with pytest.raises(ValueError, match="SOLVER_MAX_ITERATIONS must be > 0"):
            main.run()

        assert calls == {}
