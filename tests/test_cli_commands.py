import json

from typer.testing import CliRunner

from scriptpack.cli.commands import app

runner = CliRunner()

SCRIPT = "// @name N\n// @version 1.0\n// @description D\n// @author A\n"


def test_manifest_command_prints_v2(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    script = tmp_path / "skip.user.js"
    script.write_text(SCRIPT)

    result = runner.invoke(app, ["manifest", str(script), "--variant", "v2"])

    assert result.exit_code == 0, result.output
    doc = json.loads(result.output)
    assert doc["manifest_version"] == 2
    assert doc["content_scripts"][0]["js"] == ["skip.user.js"]


def test_manifest_command_adds_gecko_block(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    script = tmp_path / "skip.user.js"
    script.write_text(SCRIPT)

    result = runner.invoke(app, ["manifest", str(script), "--gecko-id", "n@example.com"])

    assert result.exit_code == 0, result.output
    doc = json.loads(result.output)
    assert doc["browser_specific_settings"]["gecko"]["id"] == "n@example.com"


def test_manifest_command_rejects_unknown_variant(tmp_path) -> None:
    script = tmp_path / "skip.user.js"
    script.write_text(SCRIPT)

    result = runner.invoke(app, ["manifest", str(script), "--variant", "v9"])

    assert result.exit_code == 1


def test_metadata_command_flags_missing_tags(tmp_path) -> None:
    script = tmp_path / "skip.user.js"
    script.write_text("// @name N\n")

    result = runner.invoke(app, ["metadata", str(script)])

    assert result.exit_code == 1
    assert "missing" in result.output


def test_init_writes_default_config(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    first = runner.invoke(app, ["init"])
    second = runner.invoke(app, ["init"])

    assert first.exit_code == 0, first.output
    assert "targets" in json.loads((tmp_path / "scriptpack.json").read_text())
    assert second.exit_code == 1


def test_build_command_reports_errors(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["build", "--source-dir", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_manifest_command_rejects_malformed_extra(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    script = tmp_path / "skip.user.js"
    script.write_text(SCRIPT)

    ok = runner.invoke(app, ["manifest", str(script), "--extra", '"homepage_url": "https://x"'])
    bad = runner.invoke(app, ["manifest", str(script), "--extra", '"homepage_url": '])

    assert ok.exit_code == 0, ok.output
    assert json.loads(ok.output)["homepage_url"] == "https://x"
    assert bad.exit_code == 1


def test_metadata_and_manifest_commands_hide_debug_logs(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    script = tmp_path / "skip.user.js"
    script.write_text(SCRIPT)

    meta = runner.invoke(app, ["metadata", str(script)])
    manifest = runner.invoke(app, ["manifest", str(script)])

    assert meta.exit_code == 0, meta.output
    assert manifest.exit_code == 0, manifest.output
    assert "Extracted metadata" not in meta.output
    assert "Extracted metadata" not in manifest.output
    assert json.loads(manifest.output)["name"] == "N"


def test_build_command_reports_archive_sizes(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    src = tmp_path / "src"
    src.mkdir()
    (src / "script.user.js").write_text(SCRIPT)
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "icon48.png").write_bytes(b"48")
    (tmp_path / "assets" / "icon128.png").write_bytes(b"128")

    result = runner.invoke(app, ["build", "--source-dir", str(src), "--target", "chrome"])

    assert result.exit_code == 0, result.output
    assert "Built 1 package(s)" in result.output
    assert (tmp_path / "dist" / "N_chrome.zip").exists()
