"""steadycall Command Line Interface.

Entry point for the steadycall CLI tool.
"""

from __future__ import annotations

import random
from pathlib import Path

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from steadycall import __version__
from steadycall.contracts.errors import (
    ApiError,
    ConfigurationError,
    RateLimitError,
    RequestCancelledError,
    ResponseDecodeError,
    TransportError,
)
from steadycall.contracts.rate_limit import RateLimitSnapshot
from steadycall.contracts.retry import RetryPolicy
from steadycall.core.cancellation import CancellationToken
from steadycall.core.config import ClientSettings, load_settings, settings_from_env
from steadycall.core.correlation import correlation_scope
from steadycall.core.logging import configure_logging
from steadycall.engine.backoff import backoff_schedule

__all__ = ["app"]

# 1: the call failed. 2: configuration or usage problem.
EXIT_CALL_FAILED = 1
EXIT_BAD_CONFIG = 2

app = typer.Typer(
    name="steadycall",
    help="steadycall: resilient calls to rate-limited HTTP APIs.",
    no_args_is_help=True,
)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"steadycall version {__version__}")
        raise typer.Exit()


def _read_env_file(env_file: Path | None) -> Path | None:
    """Populate os.environ from a dotenv file; variables already set win.

    With no explicit path the search starts in the working directory and
    walks up, so an installed CLI finds the project's .env rather than one
    beside the package.

    Returns:
        The file that was read, or None when no file was found.
    """
    from dotenv import find_dotenv, load_dotenv

    if env_file is None:
        found = find_dotenv(usecwd=True)
        if not found:
            return None
        env_file = Path(found)
    elif not env_file.is_file():
        typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_BAD_CONFIG)

    load_dotenv(env_file, override=False)
    return env_file


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(False, "--no-dotenv", help="Do not read any .env file."),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Read this .env file instead of searching upward from the working directory.",
    ),
) -> None:
    """steadycall: resilient calls to rate-limited HTTP APIs."""
    if no_dotenv:
        if env_file is not None:
            typer.secho("Warning: --env-file has no effect with --no-dotenv.", fg=typer.colors.YELLOW, err=True)
        return
    _read_env_file(env_file)


def _load_client_settings(config: Path | None) -> ClientSettings:
    """Settings from a YAML file, or from the environment when no file is given."""
    if config is None:
        try:
            return settings_from_env()
        except ConfigurationError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(EXIT_BAD_CONFIG) from None

    config_path = config.expanduser()
    try:
        return load_settings(config_path)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {config}: {e.problem}", err=True)
        raise typer.Exit(EXIT_BAD_CONFIG) from None
    except FileNotFoundError:
        typer.echo(f"Error: Config file not found: {config}", err=True)
        raise typer.Exit(EXIT_BAD_CONFIG) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(EXIT_BAD_CONFIG) from None


def _describe_rate_limit(snapshot: RateLimitSnapshot) -> str:
    parts = [f"remaining={snapshot.remaining}/{snapshot.limit}"]
    if snapshot.reset_at is not None:
        parts.append(f"reset_at={snapshot.reset_at.isoformat()}")
    if snapshot.retry_after_seconds > 0:
        parts.append(f"retry_after={snapshot.retry_after_seconds:g}s")
    return " ".join(parts)


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Prompt text sent as the response input."),
    model: str = typer.Option("gpt-4o", "--model", "-m", help="Model id."),
    instructions: str | None = typer.Option(
        None,
        "--instructions",
        "-i",
        help="System instructions for the model.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to settings YAML file (defaults to OPENAI_API_KEY from the environment).",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        min=0.0,
        help="Overall deadline in seconds, retries and waits included.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR); overrides the config file.",
    ),
) -> None:
    """Send one prompt to the Responses API and print the answer."""
    from steadycall.providers.openai import OpenAIClient

    settings = _load_client_settings(config)
    try:
        configure_logging(
            json_output=json_logs or settings.logging.json_output,
            level=log_level or settings.logging.level,
        )
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_BAD_CONFIG) from None

    request = {"model": model, "input": prompt}
    if instructions:
        request["instructions"] = instructions

    token = CancellationToken(timeout=timeout)
    with correlation_scope() as correlation_id, OpenAIClient(settings) as client:
        try:
            response = client.create_response(request, token)
        except ConfigurationError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(EXIT_BAD_CONFIG) from None
        except RateLimitError as e:
            typer.echo(f"Rate limited: {e}", err=True)
            typer.echo(f"  {_describe_rate_limit(e.rate_limit)}", err=True)
            raise typer.Exit(EXIT_CALL_FAILED) from None
        except RequestCancelledError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(EXIT_CALL_FAILED) from None
        except (ApiError, TransportError, ResponseDecodeError) as e:
            typer.echo(f"Error: {e}", err=True)
            typer.echo(f"  correlation_id={correlation_id}", err=True)
            raise typer.Exit(EXIT_CALL_FAILED) from None

    typer.echo(response.output_text)
    typer.echo(f"[{response.model or model}] tokens: {response.usage.total_tokens}", err=True)
    if response.rate_limit is not None and not response.rate_limit.is_empty:
        typer.echo(f"  {_describe_rate_limit(response.rate_limit)}", err=True)


@app.command()
def backoff(
    max_retries: int = typer.Option(3, "--max-retries", "-r", help="Retries after the initial attempt."),
    base_delay: float = typer.Option(1.0, "--base-delay", help="Initial delay in seconds."),
    max_delay: float = typer.Option(60.0, "--max-delay", help="Delay cap in seconds."),
    seed: int | None = typer.Option(None, "--seed", help="Seed the jitter for a reproducible schedule."),
) -> None:
    """Print the jittered wait before each retry for a policy."""
    try:
        policy = RetryPolicy(max_retries=max_retries, base_delay=base_delay, max_delay=max_delay)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_BAD_CONFIG) from None

    rng = random.Random(seed) if seed is not None else None
    schedule = backoff_schedule(policy, rng=rng)
    if not schedule:
        typer.echo("No retries: the first failure is final.")
        return
    for attempt, delay in enumerate(schedule):
        typer.echo(f"retry {attempt + 1}: wait {delay:.3f}s")
    typer.echo(f"total: {sum(schedule):.3f}s over {policy.max_attempts} attempts")


if __name__ == "__main__":
    app()
