"""CLI entry point for issue-steward."""

import asyncio
import sys
import uuid
from datetime import date
from pathlib import Path

import click
import structlog

from issue_steward.config.settings import StewardSettings
from issue_steward.engine.orchestrator import DailyRunOrchestrator
from issue_steward.exceptions import ConfigurationError, StewardError
from issue_steward.models.domain import RunReport
from issue_steward.providers.github_rest import GitHubRestProvider
from issue_steward.providers.narrative import OpenAINarrativeProvider
from issue_steward.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


@click.group()
@click.option("--log-level", default="INFO", help="Logging level")
def cli(log_level: str) -> None:
    """issue-steward: daily repository status and draft promotion."""
    configure_logging(log_level)


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML configuration file (default: read the environment)",
)
@click.option(
    "--date",
    "run_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Tracking issue date (default: today, UTC)",
)
def run(config_path: str | None, run_date) -> None:
    """Post today's status summary and advance draft promotion."""
    try:
        settings = load_settings(config_path)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("config_error", exc_info=True)
        sys.exit(1)

    try:
        report = asyncio.run(_run(settings, run_date.date() if run_date else None))
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        message = e.message if isinstance(e, StewardError) else str(e)
        click.echo(f"Error: {message}", err=True)
        log.error("daily_run_failed", error=message, exc_info=True)
        write_outputs(settings.github_output, {"error": message})
        if settings.ci:
            sys.exit(1)
        return

    _report(settings, report)


def load_settings(config_path: str | None) -> StewardSettings:
    """Settings from ``config_path`` when given, else from the environment."""
    if config_path:
        return StewardSettings.from_yaml(config_path)
    return StewardSettings.from_env()


async def _run(settings: StewardSettings, today: date | None) -> RunReport:
    tracker = GitHubRestProvider(
        token=settings.github.token.get_secret_value(),
        owner=settings.repository.owner,
        repo=settings.repository.name,
        base_url=settings.github.base_url,
    )
    generator = OpenAINarrativeProvider(
        api_key=settings.generator.api_key.get_secret_value(),
        base_url=settings.generator.base_url,
        model=settings.generator.model,
        temperature=settings.generator.temperature,
        max_tokens=settings.generator.max_tokens,
        timeout=settings.generator.timeout,
        retry=settings.retry.generate.policy(),
    )

    try:
        await settings.retry.read.policy().run(tracker.connect, "connect")
        orchestrator = DailyRunOrchestrator(settings, tracker, generator)
        return await orchestrator.run(today)
    finally:
        await tracker.disconnect()
        await generator.aclose()


def _report(settings: StewardSettings, report: RunReport) -> None:
    outputs = report.outputs()
    for name, value in outputs.items():
        click.echo(f"Output {name}: {value}")
    write_outputs(settings.github_output, outputs)


def write_outputs(path: Path | None, outputs: dict[str, str]) -> None:
    """Append step outputs to a GitHub Actions ``GITHUB_OUTPUT`` file.

    Multi-line values use the heredoc-style delimiter syntax.
    """
    if path is None:
        return

    with open(path, "a", encoding="utf-8") as f:
        for name, value in outputs.items():
            if "\n" in value:
                delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
                f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
            else:
                f.write(f"{name}={value}\n")


if __name__ == "__main__":
    cli()
