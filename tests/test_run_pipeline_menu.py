import run_pipeline


def test_run_pipeline_menu_loops_until_exit(monkeypatch):
    calls = []

    monkeypatch.setattr(run_pipeline, "run_generation", lambda: calls.append("generate"))
    monkeypatch.setattr(run_pipeline, "run_editor", lambda: calls.append("edit"))
    monkeypatch.setattr(run_pipeline, "run_explanation", lambda: calls.append("explain"))

    inputs = iter(["1", "x", "2", "3", "4"])
    monkeypatch.setattr("builtins.input", lambda _: next(inputs))

    run_pipeline.main()

    assert calls == ["generate", "edit", "explain"]


def test_run_generation_passes_seed(monkeypatch):
    scripts = []
    monkeypatch.setattr(run_pipeline, "_run_script", lambda script, args=None: scripts.append((script, args)))
    monkeypatch.setattr("builtins.input", lambda _: "7")

    run_pipeline.run_generation()

    assert scripts == [("main.py", ["--seed", "7"])]


def test_run_explanation_without_key_prints_fallback(monkeypatch, capsys, tmp_path, default_params, write_json):
    params_path = tmp_path / "simulation_parameters.json"
    write_json(params_path, default_params)
    monkeypatch.setattr(run_pipeline, "PARAMS_PATH", params_path)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

    run_pipeline.run_explanation()

    assert "API Key is missing" in capsys.readouterr().out
