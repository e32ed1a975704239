import pytest
from click.testing import CliRunner

import markdownWranglerApp
from config import HOST, app
from csrf_utils import InvalidSignature


def test_missing_directory_rejected(tmp_path):
    result = CliRunner().invoke(markdownWranglerApp.main, [str(tmp_path / "does-not-exist")])
    assert result.exit_code == 2
    assert "does not exist" in result.output


def test_file_rejected(tmp_path):
    f = tmp_path / "file.md"
    f.write_text("x")
    result = CliRunner().invoke(markdownWranglerApp.main, [str(f)])
    assert result.exit_code == 2
    assert "is a file" in result.output


def test_starts_server_on_configured_directory(tmp_path, monkeypatch):
    calls = {}

    def fake_run(**kwargs):
        calls.update(kwargs)

    monkeypatch.setattr(app, "run", fake_run)
    result = CliRunner().invoke(
        markdownWranglerApp.main, [str(tmp_path), "--debug", "--port", "6000"]
    )
    assert result.exit_code == 0, result.output
    assert calls["port"] == 6000
    assert calls["host"] == HOST
    assert app.config["BASE_DIR"] == tmp_path.resolve()
    assert app.config["PATH_VALIDATOR"].base_dir == tmp_path.resolve()


def test_each_start_gets_a_fresh_secret(tmp_path, monkeypatch):
    monkeypatch.setattr(app, "run", lambda **kwargs: None)
    runner = CliRunner()
    runner.invoke(markdownWranglerApp.main, [str(tmp_path)])
    first = app.config["CSRF_SERVICE"]
    token = first.generate()
    runner.invoke(markdownWranglerApp.main, [str(tmp_path)])
    second = app.config["CSRF_SERVICE"]
    assert second is not first
    first.validate(token)
    with pytest.raises(InvalidSignature):
        second.validate(token)
