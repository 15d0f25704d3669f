from __future__ import annotations

import json

import typer
from dotenv import load_dotenv

from .config import AppConfig, LoggingConfig, RuntimeConfig
from .cli_formatter import format_rate_limit, format_summary, summary_to_dict
from .main import clear, export_sbom, rate_limit, validate, with_github_token
from ..core.domain.exceptions import ComplianceCheckError
from ..core.domain.url import parse_github_url

load_dotenv()

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _fail(e: ComplianceCheckError) -> None:
    typer.echo(f"Error: {e.user_message}", err=True)
    raise typer.Exit(code=1)


@app.command(name="validate")
def validate_command(
    url: str = typer.Argument(..., help="GitHub repository URL, e.g. https://github.com/owner/repo"),
    token: str | None = typer.Option(None, "--token", help="GitHub token (overrides OSS_COMPLIANCE_GITHUB__TOKEN)"),
    skip_deferred: bool = typer.Option(
        False, "--skip-deferred", help="Skip security, ownership, telemetry and internal-reference probes"
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Console log level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Validate a repository's compliance files, licensing and security settings."""
    try:
        owner, repo = parse_github_url(url)
    except ComplianceCheckError as e:
        _fail(e)

    config = with_github_token(AppConfig(), token)
    config = config.model_copy(
        update={
            "runtime": RuntimeConfig(run_label=f"{owner}_{repo}"),
            "logging": LoggingConfig(
                level=log_level.upper(),
                console_output=True,
                logger_name=config.logging.logger_name,
            ),
        }
    )

    try:
        summary = validate(url, include_deferred=not skip_deferred, config=config)
    except ComplianceCheckError as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps(summary_to_dict(summary), ensure_ascii=False, indent=2))
    else:
        typer.echo(format_summary(summary))

    raise typer.Exit(code=1 if summary.missing_required else 0)


@app.command(name="export-sbom")
def export_sbom_command(
    url: str = typer.Argument(..., help="GitHub repository URL"),
):
    """Export the dependency-graph SBOM as <owner>-<repo>-sbom.json."""
    try:
        path = export_sbom(url)
    except ComplianceCheckError as e:
        _fail(e)

    if path is None:
        typer.echo("No SBOM data available for this repository.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"SBOM written to {path}")


@app.command(name="rate-limit")
def rate_limit_command(
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Show the remaining GitHub API quota."""
    info = rate_limit()
    if json_output:
        payload = None if info is None else {"limit": info.limit, "remaining": info.remaining, "reset": info.reset}
        typer.echo(json.dumps(payload))
    else:
        typer.echo(format_rate_limit(info))


@app.command(name="clear-cache")
def clear_cache_command():
    """Remove cached SBOM analyses."""
    typer.echo("Clearing caches...")
    clear()
    typer.echo("Done.")
