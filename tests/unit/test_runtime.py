"""Unit tests for the niabridge.runtime module."""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import falcon.asgi
import falcon.testing
import pytest

from niabridge import runtime

_REQUIRED_ENV = {
    "LINEAR_API_KEY": "lin_api_test",
    "NIA_API_KEY": "nk-test",
    "REPO_NAME": "acme/widgets",
}


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Skip femtologging reconfiguration between tests."""
    monkeypatch.setattr(
        runtime, "configure_logging", lambda level: (str(level).upper(), False)
    )


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide the required variables with no optional ones."""
    for name, value in _REQUIRED_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("LINEAR_WEBHOOK_SECRET", raising=False)
    monkeypatch.delenv("NIA_LABEL", raising=False)


class TestCreateApp:
    """Tests for the Granian application factory."""

    @pytest.mark.usefixtures("env")
    def test_serves_health_with_relay_state(self) -> None:
        """The runtime app reports the configured repository."""
        app = runtime.create_app()
        client = falcon.testing.TestClient(app)

        result = client.simulate_get("/health")

        assert isinstance(app, falcon.asgi.App)
        assert result.status_code == HTTPStatus.OK
        assert result.json == {
            "status": "ok",
            "repository": "acme/widgets",
            "cache_size": 0,
            "tracked_issues": 0,
        }

    @pytest.mark.usefixtures("env")
    def test_registers_webhook(self) -> None:
        """The runtime app accepts webhook deliveries."""
        client = falcon.testing.TestClient(runtime.create_app())

        result = client.simulate_post("/webhook", json={"type": "Comment"})

        assert result.status_code == HTTPStatus.OK
        assert result.json == {"result": "ignored"}

    @pytest.mark.parametrize("missing", sorted(_REQUIRED_ENV))
    def test_missing_required_variable_exits(
        self, monkeypatch: pytest.MonkeyPatch, env: None, missing: str
    ) -> None:
        """A missing credential stops start-up."""
        del env
        monkeypatch.delenv(missing)

        with pytest.raises(SystemExit) as excinfo:
            runtime.create_app()

        assert excinfo.value.code == 1


class TestParsePort:
    """Tests for port validation."""

    @pytest.mark.parametrize("raw", ["1", "3000", "65535"])
    def test_accepts_valid_ports(self, raw: str) -> None:
        """Ports inside 1-65535 parse."""
        assert runtime._parse_port(raw) == int(raw)  # noqa: SLF001

    @pytest.mark.parametrize("raw", ["0", "65536", "http", ""])
    def test_rejects_invalid_ports(self, raw: str) -> None:
        """Out-of-range or non-numeric ports exit."""
        with pytest.raises(SystemExit):
            runtime._parse_port(raw)  # noqa: SLF001


class _FakeGranian:
    """Records Granian construction instead of serving."""

    instances: typ.ClassVar[list[_FakeGranian]] = []

    def __init__(self, target: str, **kwargs: typ.Any) -> None:  # noqa: ANN401
        self.target = target
        self.kwargs = kwargs
        self.served = False
        _FakeGranian.instances.append(self)

    def serve(self) -> None:
        self.served = True


def test_main_starts_single_worker_granian(monkeypatch: pytest.MonkeyPatch) -> None:
    """``main`` binds PORT and serves the factory with one worker."""
    _FakeGranian.instances.clear()
    monkeypatch.setattr("granian.Granian", _FakeGranian)
    monkeypatch.setenv("PORT", "4100")
    monkeypatch.setenv("NIABRIDGE_HOST", "127.0.0.1")

    runtime.main()

    (server,) = _FakeGranian.instances
    assert server.served
    assert server.target == "niabridge.runtime:create_app"
    assert server.kwargs["address"] == "127.0.0.1"
    assert server.kwargs["port"] == 4100
    assert server.kwargs["factory"] is True
    assert server.kwargs["workers"] == 1


def test_main_defaults_to_port_3000(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without PORT the server listens on 3000."""
    _FakeGranian.instances.clear()
    monkeypatch.setattr("granian.Granian", _FakeGranian)
    monkeypatch.delenv("PORT", raising=False)

    runtime.main()

    assert _FakeGranian.instances[0].kwargs["port"] == 3000
