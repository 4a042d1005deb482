from pathlib import Path

from typer.testing import CliRunner

from attachment_migrator import cli
from attachment_migrator.core.types import MigrationResult, ReplacementMapping
from attachment_migrator.errors import ConfigError

runner = CliRunner()

MAPPING = ReplacementMapping(
    original_text="![x](https://example.com/a.png)",
    original_url="https://example.com/a.png",
    published_url="https://owner.github.io/assets/dir/a.png",
)


def _clear_env(monkeypatch):
    for name in (
        "ASSETS_REPO",
        "ASSETS_DIRECTORY",
        "DRY_RUN",
        "COMPRESSION_THRESHOLD",
        "ISSUE_REPO",
        "ISSUE_NUMBER",
        "DELETE_AFTER",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)


def test_file_command_writes_rewritten_text(monkeypatch, tmp_path: Path):
    _clear_env(monkeypatch)
    seen = {}

    def fake_run(text, cfg, log_dir=None):
        seen["text"] = text
        seen["dry_run"] = cfg.dry_run
        return MigrationResult(mappings=[MAPPING], body="BODY", text="REWRITTEN")

    monkeypatch.setattr(cli, "run_text_migration", fake_run)
    source = tmp_path / "issue.md"
    source.write_text("![x](https://example.com/a.png)", encoding="utf-8")
    target = tmp_path / "out.md"

    result = runner.invoke(cli.app, ["file", str(source), "--output", str(target), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert target.read_text(encoding="utf-8") == "REWRITTEN"
    assert seen == {"text": "![x](https://example.com/a.png)", "dry_run": True}


def test_file_command_body_mode_prints_to_stdout(monkeypatch, tmp_path: Path):
    _clear_env(monkeypatch)
    monkeypatch.setattr(
        cli,
        "run_text_migration",
        lambda text, cfg, log_dir=None: MigrationResult(mappings=[MAPPING], body="BODY", text="REWRITTEN"),
    )
    source = tmp_path / "issue.md"
    source.write_text("text", encoding="utf-8")

    result = runner.invoke(cli.app, ["file", str(source), "--mode", "body"])

    assert result.exit_code == 0, result.output
    assert "BODY" in result.output


def test_file_command_rejects_unknown_mode(monkeypatch, tmp_path: Path):
    _clear_env(monkeypatch)
    source = tmp_path / "issue.md"
    source.write_text("text", encoding="utf-8")

    result = runner.invoke(cli.app, ["file", str(source), "--mode", "html"])

    assert result.exit_code != 0


def test_migration_error_exits_with_status_one(monkeypatch):
    _clear_env(monkeypatch)

    def failing_run(cfg, console=None, log_dir=None):
        raise ConfigError("The assets repository was not set.")

    monkeypatch.setattr(cli, "run_issue_migration", failing_run)

    result = runner.invoke(cli.app, ["issue"])

    assert result.exit_code == 1


def test_issue_command_applies_cli_overrides(monkeypatch):
    _clear_env(monkeypatch)
    seen = {}

    def fake_run(cfg, console=None, log_dir=None):
        seen["delete_after"] = cfg.issue.delete_after
        seen["level"] = cfg.logging.level
        return MigrationResult(mappings=[MAPPING])

    monkeypatch.setattr(cli, "run_issue_migration", fake_run)

    result = runner.invoke(cli.app, ["issue", "--delete-after", "--log-level", "DEBUG"])

    assert result.exit_code == 0, result.output
    assert "Migrated 1 file(s)" in result.output
    assert seen == {"delete_after": True, "level": "DEBUG"}


def test_invalid_env_value_exits_with_status_one(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("COMPRESSION_THRESHOLD", "500KB")
    calls = []
    monkeypatch.setattr(cli, "run_issue_migration", lambda cfg, console=None, log_dir=None: calls.append(cfg))

    result = runner.invoke(cli.app, ["issue"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "COMPRESSION_THRESHOLD must be an integer" in result.output
    assert calls == []


def test_unknown_yaml_option_exits_with_status_one(monkeypatch, tmp_path: Path):
    _clear_env(monkeypatch)
    config = tmp_path / "config.yaml"
    config.write_text("media:\n  compres: true\n", encoding="utf-8")
    source = tmp_path / "issue.md"
    source.write_text("text", encoding="utf-8")

    result = runner.invoke(cli.app, ["file", str(source), "--config", str(config)])

    assert result.exit_code == 1
    assert "compres" in result.output
