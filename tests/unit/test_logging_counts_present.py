from skistandings import create_app


def test_logging_load_counts_emitted(data_dir, caplog):
    caplog.set_level("DEBUG")
    create_app(data_dir=data_dir)
    messages = [r.getMessage() for r in caplog.records]
    assert any(
        m.startswith("load_season races=3 events=2 racers=8") for m in messages
    )


def test_logging_load_failure_reported(tmp_path, caplog):
    caplog.set_level("DEBUG")
    app = create_app(data_dir=tmp_path)
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("Failed to load race data") for m in messages)
    assert app.config["LOAD_ERROR"]
    assert app.config["EVENTS"] == []
