import tempmon.main as main_module


def test_importing_main_builds_no_app():
    assert not hasattr(main_module, "app")


def test_main_serves_a_single_app_built_from_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'tempmon.db'}")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "9999")
    calls = []
    monkeypatch.setattr(main_module.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    main_module.main()

    assert len(calls) == 1
    app, kwargs = calls[0]
    assert kwargs == {"host": "127.0.0.1", "port": 9999}
    assert app.state.settings.api_port == 9999
    assert app.state.store.settings is app.state.settings
