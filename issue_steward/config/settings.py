"""
Configuration system using Pydantic for type-safe settings management.

Settings are built once at the entry point, either from a YAML file or from
the environment variables a scheduled CI job provides, and then passed to
every component explicitly. No component reads the environment itself.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from issue_steward.engine import protocol
from issue_steward.exceptions import ConfigurationError
from issue_steward.utils.retry import RetryPolicy


class GitHubConfig(BaseModel):
    """Issue tracker connection."""

    token: SecretStr = Field(..., description="GitHub token with issues:write access")
    base_url: str = Field(default="https://api.github.com", description="API base URL (GitHub Enterprise)")


class RepositoryConfig(BaseModel):
    """Target repository."""

    owner: str = Field(..., min_length=1, description="Repository owner/organization")
    name: str = Field(..., min_length=1, description="Repository name")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class GeneratorConfig(BaseModel):
    """Narrative generator (OpenAI-compatible chat completions API)."""

    api_key: SecretStr = Field(..., description="API key for the completions endpoint")
    base_url: str = Field(default="https://api.openai.com/v1", description="API base URL")
    model: str = Field(default="gpt-4o", description="Model identifier")
    temperature: float = Field(default=0.2, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=1500, ge=1, description="Maximum tokens for the response")
    timeout: float = Field(default=120.0, gt=0, description="Request timeout in seconds")


class TrackingConfig(BaseModel):
    """Tracker wire conventions and draft promotion behavior.

    The string defaults must match what already exists in the tracker;
    changing them orphans existing tracking issues and confirmation comments.
    """

    daily_label: str = Field(default=protocol.DAILY_ISSUE_LABEL)
    title_prefix: str = Field(default=protocol.DAILY_ISSUE_TITLE_PREFIX)
    drafts_header: str = Field(default=protocol.DRAFTS_SECTION_HEADER)
    drafts_placeholder: str = Field(default=protocol.DRAFTS_PLACEHOLDER)
    sub_issue_label: str = Field(default=protocol.SUB_ISSUE_LABEL)
    confirmation_marker: str = Field(default=protocol.CONFIRMATION_MARKER)
    approval_reaction: str = Field(default=protocol.APPROVAL_REACTION)
    automation_author_type: str = Field(default=protocol.AUTOMATION_AUTHOR_TYPE)
    collection_limit: int = Field(default=50, ge=1, le=100, description="Max issues/PRs sent to the generator")
    pin_approved_drafts: bool = Field(
        default=True,
        description="Materialize the draft list shown in the approved confirmation comment "
        "instead of the current drafts region",
    )


class RetryPolicyConfig(BaseModel):
    """Attempt budget for one class of external call."""

    max_attempts: int = Field(default=3, ge=1, le=10)
    delay: float = Field(default=1.0, ge=0.0, le=60.0, description="Seconds between attempts")

    def policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.max_attempts, delay=self.delay)


class RetryConfig(BaseModel):
    """Retry budgets per call type."""

    read: RetryPolicyConfig = Field(default_factory=lambda: RetryPolicyConfig(delay=1.0))
    write: RetryPolicyConfig = Field(default_factory=lambda: RetryPolicyConfig(delay=1.5))
    generate: RetryPolicyConfig = Field(default_factory=lambda: RetryPolicyConfig(delay=2.0))


class StewardSettings(BaseSettings):
    """Main settings object.

    Combines all configuration sections. Use ``from_yaml`` for file-based
    configuration or ``from_env`` inside a scheduled CI job.
    """

    model_config = SettingsConfigDict(
        env_prefix="STEWARD_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    github: GitHubConfig
    repository: RepositoryConfig
    generator: GeneratorConfig
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    ci: bool = Field(default=False, description="Running inside an automated CI job")
    github_output: Path | None = Field(default=None, description="File that receives step outputs")

    @classmethod
    def from_yaml(cls, config_path: str) -> StewardSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} and ${VAR_NAME:-default} syntax. When the file leaves ``ci`` or
        ``github_output`` unset they default to the runner's ``CI`` and
        ``GITHUB_OUTPUT`` variables.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            StewardSettings instance

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, encoding="utf-8") as f:
                yaml_content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        for key, value in cls._runner_context(os.environ).items():
            if value:
                config_dict.setdefault(key, value)

        return cls._build(config_dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StewardSettings:
        """Build settings from the variables a GitHub Actions job exposes.

        ``TARGET_REPO_OWNER``/``TARGET_REPO_NAME`` take precedence over the
        ``GITHUB_REPOSITORY_OWNER``/``GITHUB_REPOSITORY`` context variables.

        Args:
            environ: Variables to read. Defaults to ``os.environ``.

        Raises:
            ConfigurationError: If a token, API key or repository identifier is missing
        """
        env = os.environ if environ is None else environ

        owner = env.get("TARGET_REPO_OWNER") or env.get("GITHUB_REPOSITORY_OWNER")
        name = env.get("TARGET_REPO_NAME")
        if not name and "/" in env.get("GITHUB_REPOSITORY", ""):
            name = env["GITHUB_REPOSITORY"].split("/", 1)[1]

        missing = []
        if not env.get("GITHUB_TOKEN"):
            missing.append("GITHUB_TOKEN")
        if not env.get("OPENAI_API_KEY"):
            missing.append("OPENAI_API_KEY")
        if not owner:
            missing.append("TARGET_REPO_OWNER (or GITHUB_REPOSITORY_OWNER)")
        if not name:
            missing.append("TARGET_REPO_NAME (or GITHUB_REPOSITORY)")
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

        generator: dict[str, object] = {"api_key": env["OPENAI_API_KEY"]}
        if env.get("GPT_MODEL"):
            generator["model"] = env["GPT_MODEL"]
        if env.get("GPT_TEMPERATURE"):
            generator["temperature"] = env["GPT_TEMPERATURE"]
        if env.get("OPENAI_BASE_URL"):
            generator["base_url"] = env["OPENAI_BASE_URL"]

        github: dict[str, object] = {"token": env["GITHUB_TOKEN"]}
        if env.get("GITHUB_API_URL"):
            github["base_url"] = env["GITHUB_API_URL"]

        return cls._build(
            {
                "github": github,
                "repository": {"owner": owner, "name": name},
                "generator": generator,
                **cls._runner_context(env),
            }
        )

    @staticmethod
    def _runner_context(env: Mapping[str, str]) -> dict[str, object]:
        """CI flag and step-output file as exposed by the Actions runner."""
        return {"ci": bool(env.get("CI")), "github_output": env.get("GITHUB_OUTPUT") or None}

    @classmethod
    def _build(cls, values: dict) -> StewardSettings:
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Missing or invalid configuration fields: {e}") from e
        except TypeError as e:
            raise ConfigurationError(f"Missing or invalid configuration fields: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        YAML comment lines are left untouched.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))
