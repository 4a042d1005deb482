from pathlib import Path

import pytest

from attachment_migrator.config import (
    AppConfig,
    DestinationConfig,
    GitHubConfig,
    apply_env_overrides,
    get_github_token,
    load_config,
    validate_config,
)
from attachment_migrator.errors import ConfigError


def _valid() -> AppConfig:
    return AppConfig(
        destination=DestinationConfig(
            repository="owner/assets",
            directory="dir",
            committer_name="bot",
            committer_email="bot@example.com",
        )
    )


def test_load_config_merges_yaml_over_defaults(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "dry_run: true\n"
        "destination:\n"
        "  repository: owner/assets\n"
        "  directory: dir\n"
        "media:\n"
        "  compress: true\n"
        "  size_threshold: 1024\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.dry_run is True
    assert cfg.destination.repository == "owner/assets"
    assert cfg.media.size_threshold == 1024
    assert cfg.retry.max_attempts == 5
    assert cfg.logging.level == "INFO"


def test_quoted_yaml_flags_are_parsed(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        'dry_run: "false"\n'
        "media:\n"
        '  compress: "true"\n'
        '  normalize_format: "no"\n'
        "issue:\n"
        "  delete_after: true\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.dry_run is False
    assert cfg.media.compress is True
    assert cfg.media.normalize_format is False
    assert cfg.issue.delete_after is True


def test_load_config_without_path_returns_defaults():
    assert load_config(None) == AppConfig()


def test_load_config_rejects_unknown_options(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("media:\n  quality: 80\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="quality"):
        load_config(str(path))


def test_env_overrides_use_workflow_variable_names():
    env = {
        "ASSETS_REPO": "octo/assets",
        "ASSETS_DIRECTORY": "attachments",
        "COMMITTER_NAME": "bot",
        "COMMITTER_EMAIL": "bot@example.com",
        "WITH_COMPATIBLE_FORMAT": "true",
        "WITH_ASSETS_COMPRESSION": "TRUE",
        "COMPRESSION_THRESHOLD": "2048",
        "RESIZE_WIDTH": "800",
        "ISSUE_REPO": "octo/issues",
        "ISSUE_NUMBER": "12",
        "DELETE_AFTER": "yes",
        "DRY_RUN": "true",
    }

    cfg = apply_env_overrides(AppConfig(), env)

    assert cfg.destination.repository == "octo/assets"
    assert cfg.destination.directory == "attachments"
    assert cfg.media.normalize_format is True
    assert cfg.media.compress is True
    assert cfg.media.size_threshold == 2048
    assert cfg.media.resize_max_width == 800
    assert cfg.media.resize_max_height is None
    assert (cfg.issue.owner, cfg.issue.repo, cfg.issue.number) == ("octo", "issues", 12)
    # Only the literal "true" enables a flag
    assert cfg.issue.delete_after is False
    assert cfg.dry_run is True


def test_env_overrides_reject_non_integer_values():
    with pytest.raises(ConfigError, match="COMPRESSION_THRESHOLD"):
        apply_env_overrides(AppConfig(), {"COMPRESSION_THRESHOLD": "big"})


def test_empty_env_values_keep_existing_settings():
    cfg = _valid()

    apply_env_overrides(cfg, {"ASSETS_REPO": "", "DRY_RUN": ""})

    assert cfg.destination.repository == "owner/assets"
    assert cfg.dry_run is False


def test_github_token_resolution_order():
    cfg = GitHubConfig()

    assert get_github_token(cfg, {"GITHUB_TOKEN": "default"}) == "default"
    assert get_github_token(
        cfg, {"GITHUB_TOKEN": "default", "PERSONAL_ACCESS_TOKEN": "MY_PAT", "MY_PAT": "personal"}
    ) == "personal"
    assert get_github_token(GitHubConfig(token="inline"), {"GITHUB_TOKEN": "default"}) == "inline"
    assert get_github_token(cfg, {}) is None


def test_published_base_url_defaults_to_pages():
    destination = DestinationConfig(repository="owner/assets")

    assert destination.published_base_url == "https://owner.github.io/assets"
    destination.base_url = "https://cdn.example.com/"
    assert destination.published_base_url == "https://cdn.example.com"


@pytest.mark.parametrize(
    "mutate, message",
    [
        (lambda cfg: setattr(cfg.destination, "repository", None), "assets repository"),
        (lambda cfg: setattr(cfg.destination, "repository", "no-slash"), "owner/repo"),
        (lambda cfg: setattr(cfg.destination, "directory", ""), "assets directory"),
        (lambda cfg: setattr(cfg.destination, "committer_name", None), "committer name"),
        (lambda cfg: setattr(cfg.destination, "committer_email", None), "committer email"),
        (lambda cfg: setattr(cfg.media, "compress", True), "COMPRESSION_THRESHOLD"),
        (lambda cfg: setattr(cfg.media, "resize_max_width", 0), "resize_max_width"),
        (lambda cfg: setattr(cfg.retry, "max_attempts", 0), "max_attempts"),
        (lambda cfg: setattr(cfg.issue, "output_mode", "html"), "output_mode"),
    ],
)
def test_validate_config_reports_missing_options(mutate, message):
    cfg = _valid()
    mutate(cfg)

    with pytest.raises(ConfigError, match=message):
        validate_config(cfg)


def test_committer_is_optional_in_dry_run():
    cfg = _valid()
    cfg.dry_run = True
    cfg.destination.committer_name = None
    cfg.destination.committer_email = None

    validate_config(cfg)


def test_issue_settings_only_required_for_issue_runs():
    cfg = _valid()

    validate_config(cfg)
    with pytest.raises(ConfigError, match="issue repository"):
        validate_config(cfg, require_issue=True)
