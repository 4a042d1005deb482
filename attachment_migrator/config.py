"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults, followed by environment variable overrides
so the tool can run unchanged inside a GitHub Actions workflow.
Configuration sections:
- DestinationConfig: Assets repository, directory and committer identity
- MediaConfig: Format normalization, compression and resize settings
- RetryPolicy: Upload retry settings
- FetchConfig: HTTP download settings
- GitHubConfig: API endpoint and token
- IssueConfig: Source issue and comment handling
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
import os
from typing import Any, Mapping

import yaml

from .errors import ConfigError


@dataclass
class DestinationConfig:
    """Configuration for the repository that receives the attachments.

    Attributes:
        repository: Assets repository in "owner/repo" form
        directory: Directory inside the repository holding the attachments
        base_url: Public URL the repository is served from; defaults to GitHub Pages
        branch: Branch to commit to (None for the repository default)
        committer_name: Name used as commit author and committer
        committer_email: Email used as commit author and committer
    """

    repository: str | None = None
    directory: str | None = None
    base_url: str | None = None
    branch: str | None = None
    committer_name: str | None = None
    committer_email: str | None = None

    @property
    def owner(self) -> str:
        return _split_repository(self.repository, "destination.repository")[0]

    @property
    def repo(self) -> str:
        return _split_repository(self.repository, "destination.repository")[1]

    @property
    def published_base_url(self) -> str:
        """Base URL published objects are served from, without trailing slash."""
        if self.base_url:
            return self.base_url.rstrip("/")
        return f"https://{self.owner}.github.io/{self.repo}"


@dataclass
class MediaConfig:
    """Configuration for payload transforms.

    Attributes:
        normalize_format: Convert formats with poor renderer support (WebP) to JPEG
        compress: Whether to compress images to the size threshold
        size_threshold: Target size in bytes; required when compress is enabled
        resize_max_width: Optional maximum width in pixels applied before compression
        resize_max_height: Optional maximum height in pixels applied before compression
    """

    normalize_format: bool = False
    compress: bool = False
    size_threshold: int | None = None
    resize_max_width: int | None = None
    resize_max_height: int | None = None


@dataclass
class RetryPolicy:
    """Retry behavior for uploads to the destination store.

    Attributes:
        max_attempts: Total number of upload attempts before giving up
        backoff_seconds: Delay between attempts (multiplied by the attempt number)
    """

    max_attempts: int = 5
    backoff_seconds: float = 0.0

    def delay_for(self, attempt: int) -> float:
        return self.backoff_seconds * attempt


@dataclass
class FetchConfig:
    """Configuration for downloading attachments.

    Attributes:
        timeout_seconds: HTTP request timeout
        user_agent: HTTP User-Agent header string
        trust_env: Whether to respect system proxy settings
    """

    timeout_seconds: float = 60.0
    user_agent: str = "attachment-migrator"
    trust_env: bool = True


@dataclass
class GitHubConfig:
    """Configuration for GitHub API access.

    Attributes:
        api_url: Base URL of the GitHub REST API
        token: Inline token (overrides environment lookup)
        token_env: Environment variable holding the default token
        personal_access_token_env: Name of the environment variable that holds
            the name of another variable containing a personal access token
    """

    api_url: str = "https://api.github.com"
    token: str | None = None
    token_env: str = "GITHUB_TOKEN"
    personal_access_token_env: str = "PERSONAL_ACCESS_TOKEN"


@dataclass
class IssueConfig:
    """Configuration for the issue whose comments are migrated.

    Attributes:
        repository: Issue repository in "owner/repo" form
        number: Issue number
        delete_after: Delete the source comments once the body is posted
        output_mode: "body" to post rendered blocks, "rewrite" to post the rewritten text
    """

    repository: str | None = None
    number: int | None = None
    delete_after: bool = False
    output_mode: str = "body"

    @property
    def owner(self) -> str:
        return _split_repository(self.repository, "issue.repository")[0]

    @property
    def repo(self) -> str:
        return _split_repository(self.repository, "issue.repository")[1]


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "migration.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    dry_run: bool = False
    dry_run_root: str = "."
    destination: DestinationConfig = field(default_factory=DestinationConfig)
    media: MediaConfig = field(default_factory=MediaConfig)
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    issue: IssueConfig = field(default_factory=IssueConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")
    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            unknown = set(value) - set(data[key])
            if unknown:
                raise ConfigError(f"Unknown option(s) in section {key!r}: {', '.join(sorted(unknown))}")
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        dry_run=_coerce_bool(data["dry_run"]),
        dry_run_root=str(data["dry_run_root"]),
        destination=_section(DestinationConfig, data["destination"]),
        media=_section(MediaConfig, data["media"]),
        retry=_section(RetryPolicy, data["retry"]),
        fetch=_section(FetchConfig, data["fetch"]),
        github=_section(GitHubConfig, data["github"]),
        issue=_section(IssueConfig, data["issue"]),
        logging=_section(LoggingConfig, data["logging"]),
    )


def _section(cls: type, values: dict[str, Any]) -> Any:
    # Quoted YAML flags ("false") are parsed like environment values
    for f in fields(cls):
        if f.type == "bool" and f.name in values:
            values[f.name] = _coerce_bool(values[f.name])
    return cls(**values)


def apply_env_overrides(cfg: AppConfig, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Override configuration with the workflow environment variables.

    Only variables that are set (and non-empty) take effect, so a YAML file
    can provide defaults that the workflow selectively replaces.

    Args:
        cfg: Configuration to update in place
        environ: Environment mapping (defaults to os.environ)

    Returns:
        The same AppConfig instance, for chaining
    """
    env = os.environ if environ is None else environ

    if env.get("DRY_RUN"):
        cfg.dry_run = _parse_bool(env["DRY_RUN"])

    if env.get("ASSETS_REPO"):
        cfg.destination.repository = env["ASSETS_REPO"]
    if env.get("ASSETS_DIRECTORY"):
        cfg.destination.directory = env["ASSETS_DIRECTORY"]
    if env.get("ASSETS_BASE_URL"):
        cfg.destination.base_url = env["ASSETS_BASE_URL"]
    if env.get("COMMITTER_NAME"):
        cfg.destination.committer_name = env["COMMITTER_NAME"]
    if env.get("COMMITTER_EMAIL"):
        cfg.destination.committer_email = env["COMMITTER_EMAIL"]

    if env.get("WITH_COMPATIBLE_FORMAT"):
        cfg.media.normalize_format = _parse_bool(env["WITH_COMPATIBLE_FORMAT"])
    if env.get("WITH_ASSETS_COMPRESSION"):
        cfg.media.compress = _parse_bool(env["WITH_ASSETS_COMPRESSION"])
    if env.get("COMPRESSION_THRESHOLD"):
        cfg.media.size_threshold = _parse_int(env["COMPRESSION_THRESHOLD"], "COMPRESSION_THRESHOLD")
    if env.get("RESIZE_WIDTH"):
        cfg.media.resize_max_width = _parse_int(env["RESIZE_WIDTH"], "RESIZE_WIDTH")
    if env.get("RESIZE_HEIGHT"):
        cfg.media.resize_max_height = _parse_int(env["RESIZE_HEIGHT"], "RESIZE_HEIGHT")

    if env.get("ISSUE_REPO"):
        cfg.issue.repository = env["ISSUE_REPO"]
    if env.get("ISSUE_NUMBER"):
        cfg.issue.number = _parse_int(env["ISSUE_NUMBER"], "ISSUE_NUMBER")
    if env.get("DELETE_AFTER"):
        cfg.issue.delete_after = _parse_bool(env["DELETE_AFTER"])

    return cfg


def get_github_token(cfg: GitHubConfig, environ: Mapping[str, str] | None = None) -> str | None:
    """Resolve the GitHub token from inline config or environment variables.

    When the personal access token variable is set, its value is the *name*
    of the variable that holds the token (so workflows can pick a secret by
    name). Otherwise the default token variable is used.
    """
    if cfg.token:
        return cfg.token
    env = os.environ if environ is None else environ
    pat_name = env.get(cfg.personal_access_token_env)
    if pat_name:
        return env.get(pat_name)
    return env.get(cfg.token_env)


def validate_config(cfg: AppConfig, require_issue: bool = False) -> None:
    """Check that every option required for a run is present.

    Raises:
        ConfigError: If a required option is missing or malformed
    """
    if not cfg.destination.repository:
        raise ConfigError("The assets repository was not set.")
    _split_repository(cfg.destination.repository, "destination.repository")
    if not cfg.destination.directory:
        raise ConfigError("The assets directory was not set.")

    if not cfg.dry_run:
        if not cfg.destination.committer_name:
            raise ConfigError("The committer name was not supplied.")
        if not cfg.destination.committer_email:
            raise ConfigError("The committer email was not supplied.")

    if cfg.media.compress and not cfg.media.size_threshold:
        raise ConfigError(
            "COMPRESSION_THRESHOLD is required if you want to compress the image files."
        )
    if cfg.media.size_threshold is not None and cfg.media.size_threshold <= 0:
        raise ConfigError("The compression threshold must be a positive number of bytes.")
    for name in ("resize_max_width", "resize_max_height"):
        value = getattr(cfg.media, name)
        if value is not None and value <= 0:
            raise ConfigError(f"media.{name} must be a positive number of pixels.")

    if cfg.retry.max_attempts < 1:
        raise ConfigError("retry.max_attempts must be at least 1.")

    if require_issue:
        if not cfg.issue.repository:
            raise ConfigError("The issue repository was not set.")
        _split_repository(cfg.issue.repository, "issue.repository")
        if cfg.issue.number is None:
            raise ConfigError("The issue number was not set.")
    if cfg.issue.output_mode not in ("body", "rewrite"):
        raise ConfigError("issue.output_mode must be 'body' or 'rewrite'.")


def _split_repository(value: str | None, option: str) -> tuple[str, str]:
    if not value or value.count("/") != 1:
        raise ConfigError(f"{option} must be in 'owner/repo' form, got {value!r}")
    owner, repo = value.split("/")
    if not owner or not repo:
        raise ConfigError(f"{option} must be in 'owner/repo' form, got {value!r}")
    return owner, repo


def _parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return _parse_bool(value)
    return bool(value)


def _parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc
