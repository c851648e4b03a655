import uvicorn

import app.main as main


def test_run_starts_uvicorn_with_settings(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda *a, **kw: calls.append((a, kw)))
    monkeypatch.setattr(main.settings, "HOST", "0.0.0.0")
    monkeypatch.setattr(main.settings, "PORT", 9100)

    main.run()

    assert calls == [
        (
            ("app.main:app",),
            {"host": "0.0.0.0", "port": 9100, "log_level": main.settings.LOG_LEVEL.lower()},
        )
    ]
