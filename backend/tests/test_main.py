import logging

from fastapi.testclient import TestClient

from app.core.errors import DomainError, MalformedFilterInput
from app import main
from tests.list_query_factory import ListQueryFactory


class TestMain:
    def test_health_check(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok"}

    def test_domain_error_handler_returns_400(self, client):
        """
        Ensures DomainError is converted into a 400 response
        with a stable JSON payload.
        """

        # Add a test-only route to trigger the exception
        app = client.app

        @app.get("/_test/domain-error")
        def _raise_domain_error():
            raise DomainError("boom")

        r = client.get("/_test/domain-error")
        assert r.status_code == 400
        assert r.json() == {"detail": "boom"}
        assert "path" not in r.json()

    def test_openapi_contains_v1_routes(self, client):
        """
        Ensures the v1 router is actually mounted.
        """
        r = client.get("/openapi.json")
        assert r.status_code == 200

        schema = r.json()
        assert any(path.startswith("/v1/") for path in schema["paths"])

    def test_openapi_metadata(self, client):
        """
        Guards against accidental API metadata regressions.
        """
        r = client.get("/openapi.json")
        schema = r.json()

        assert schema["info"]["title"] == "List Query Normalizer API"
        assert schema["info"]["version"] == "0.1.0"

    def test_run_uses_default_env(self, monkeypatch):
        calls = {}

        def fake_run(app_str, host, port, reload):
            calls["app_str"] = app_str
            calls["host"] = host
            calls["port"] = port
            calls["reload"] = reload

        # Patch uvicorn.run that is imported inside main.run()
        monkeypatch.setattr("uvicorn.run", fake_run, raising=True)

        # Ensure env vars are not set
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("RELOAD", raising=False)

        main.run()

        assert calls == {
            "app_str": "app.main:app",
            "host": "0.0.0.0",
            "port": 8000,
            "reload": False,
        }

    def test_run_reads_env_vars(self, monkeypatch):
        calls = {}

        def fake_run(app_str, host, port, reload):
            calls["app_str"] = app_str
            calls["host"] = host
            calls["port"] = port
            calls["reload"] = reload

        monkeypatch.setattr("uvicorn.run", fake_run, raising=True)

        monkeypatch.setenv("PORT", "1234")
        monkeypatch.setenv("RELOAD", "true")

        main.run()

        assert calls["port"] == 1234
        assert calls["reload"] is True

    def test_malformed_filter_handler_adds_path(self, client, caplog):
        app = client.app

        @app.get("/_test/malformed-filter")
        def _raise_malformed_filter():
            raise MalformedFilterInput("missing required key 'op'.", "groups[1].rules[0]")

        with caplog.at_level(logging.INFO, logger="app.main"):
            r = client.get("/_test/malformed-filter")

        assert r.status_code == 400
        assert r.json() == {
            "detail": "groups[1].rules[0]: missing required key 'op'.",
            "path": "groups[1].rules[0]",
        }

        record = next(rec for rec in caplog.records if rec.name == "app.main")
        assert record.getMessage().startswith("Rejected list query:")
        assert record.error_path == "groups[1].rules[0]"
        assert record.path == "/_test/malformed-filter"

    def test_create_app_uses_default_logging_env(self, monkeypatch):
        calls = {}

        def fake_configure_logging(*, level, json_logs):
            calls["level"] = level
            calls["json_logs"] = json_logs

        monkeypatch.setattr(main, "configure_logging", fake_configure_logging)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_JSON", raising=False)

        main.create_app()

        assert calls == {"level": "INFO", "json_logs": True}

    def test_create_app_reads_logging_env(self, monkeypatch):
        calls = {}

        def fake_configure_logging(*, level, json_logs):
            calls["level"] = level
            calls["json_logs"] = json_logs

        monkeypatch.setattr(main, "configure_logging", fake_configure_logging)
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_JSON", "FALSE")

        main.create_app()

        assert calls == {"level": "debug", "json_logs": False}

    def test_strict_booleans_env(self, monkeypatch):
        payload = ListQueryFactory.base(searchEnabled="yes")

        monkeypatch.delenv("STRICT_BOOLEANS", raising=False)
        lenient = TestClient(main.create_app())
        r = lenient.post("/v1/query/normalize", json=payload)
        assert r.status_code == 200
        assert r.json()["searchEnabled"] is True

        monkeypatch.setenv("STRICT_BOOLEANS", "true")
        strict = TestClient(main.create_app())
        r = strict.post("/v1/query/normalize", json=payload)
        assert r.status_code == 400
        assert r.json() == {"detail": "Cannot read 'yes' as a boolean."}
