"""
Tests for the health check endpoint.
"""


def test_health_check_returns_200(client):
    response = client.get("/health")
    assert response.status_code == 200


def test_health_check_returns_service_name(client):
    """
    Monitoring parses this field, so a change to it is a
    breaking change.
    """
    response = client.get("/health")
    assert response.json()["service"] == "savings-ledger"


def test_health_check_reports_database_status(client):
    data = client.get("/health").json()
    assert data["database"] in ("healthy", "unhealthy")


def test_main_serves_app_with_uvicorn(monkeypatch):
    from savings_ledger import main as main_module

    calls = []
    monkeypatch.setattr(
        main_module.uvicorn, "run",
        lambda app, **kwargs: calls.append((app, kwargs)),
    )

    main_module.main()

    settings = main_module.settings
    assert calls == [(main_module.app, {
        "host": settings.HOST,
        "port": settings.PORT,
        "log_level": settings.LOG_LEVEL.lower(),
    })]
