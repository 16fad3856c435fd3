"""reviewapp CLI: all commands."""

import json
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from rich import print as rprint
from rich.table import Table

from reviewapp import settings as settings_module
from reviewapp import workflow
from reviewapp.invocation_log import configure_logging
from reviewapp.models import InvocationResult, Outcome
from reviewapp.providers.base import ChatNotifier, EnvironmentRegistry, PlatformClient, ProviderError
from reviewapp.providers.gitlab import GitLabRegistry
from reviewapp.providers.meta import MetaPlatform
from reviewapp.providers.slack import SlackNotifier
from reviewapp.settings import ReviewSettings, get_settings, public_address

app = typer.Typer(help="reviewapp: deploy and tear down CI review apps", no_args_is_help=True)

ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Profile name from ~/.config/reviewapp/config.toml"),
]
PayloadOpt = Annotated[str | None, typer.Option("--payload", help="CI payload as a JSON object")]
PayloadFileOpt = Annotated[
    Path | None,
    typer.Option("--payload-file", help="Read the JSON payload from a file ('-' for stdin)", allow_dash=True),
]
SlugOpt = Annotated[str | None, typer.Option("--slug", "-s", help="Environment slug (overrides payload)")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging on stderr")] = False,
) -> None:
    configure_logging(verbose)


# ---------------------------------------------------------------------------
# Collaborator factories
# ---------------------------------------------------------------------------


def get_platform(settings: ReviewSettings) -> PlatformClient:
    return MetaPlatform(settings)


def get_registry(settings: ReviewSettings) -> EnvironmentRegistry | None:
    try:
        return GitLabRegistry(settings)
    except ProviderError:
        return None


def get_notifier(settings: ReviewSettings) -> ChatNotifier | None:
    try:
        return SlackNotifier(settings)
    except ProviderError:
        return None


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def load_payload(payload: str | None, payload_file: Path | None, **overrides: str | None) -> dict[str, Any]:
    """Merge a JSON payload (inline or file) with explicit CLI overrides."""
    raw = "{}"
    if payload_file is not None:
        raw = sys.stdin.read() if str(payload_file) == "-" else payload_file.read_text()
    elif payload:
        raw = payload

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        rprint(f"[red]Invalid JSON payload: {exc}[/red]")
        raise typer.Exit(1)
    if not isinstance(data, dict):
        rprint("[red]Payload must be a JSON object.[/red]")
        raise typer.Exit(1)

    data.update({k: v for k, v in overrides.items() if v is not None})
    return data


def _emit(result: InvocationResult) -> None:
    # typer.echo, not rprint: lines like "[init] ..." must not be read as markup
    for line in result.lines:
        typer.echo(line)
    if result.outcome is Outcome.FAILED:
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("deploy")
def deploy_cmd(
    profile: ProfileOpt = None,
    payload: PayloadOpt = None,
    payload_file: PayloadFileOpt = None,
    slug: SlugOpt = None,
    image: Annotated[str | None, typer.Option("--image", "-i", help="Container image to deploy")] = None,
    git_ref: Annotated[str | None, typer.Option("--git-ref")] = None,
    git_sha: Annotated[str | None, typer.Option("--git-sha")] = None,
    git_author: Annotated[str | None, typer.Option("--git-author")] = None,
) -> None:
    """Create or update the review app for a CI environment."""
    data = load_payload(
        payload,
        payload_file,
        slug=slug,
        image=image,
        git_ref=git_ref,
        git_sha=git_sha,
        git_author=git_author,
    )
    settings = get_settings(profile=profile)
    result = workflow.deploy(
        data,
        settings,
        platform=get_platform(settings),
        registry=get_registry(settings),
        notifier=get_notifier(settings),
    )
    _emit(result)


@app.command("stop")
def stop_cmd(
    profile: ProfileOpt = None,
    payload: PayloadOpt = None,
    payload_file: PayloadFileOpt = None,
    slug: SlugOpt = None,
) -> None:
    """Delete the review app for a closed CI environment."""
    data = load_payload(payload, payload_file, slug=slug)
    settings = get_settings(profile=profile)
    _emit(workflow.stop(data, settings, platform=get_platform(settings)))


@app.command("address")
def address_cmd(
    slug: Annotated[str, typer.Argument(help="Environment slug, e.g. pr-42")],
    profile: ProfileOpt = None,
) -> None:
    """Print the public URL a review app is served on."""
    settings = get_settings(profile=profile)
    typer.echo(f"https://{public_address(settings, slug)}")


@app.command("set-default")
def set_default(
    profile: Annotated[str, typer.Argument(help="Profile name to set as default")],
) -> None:
    """Set the default profile in ~/.config/reviewapp/config.toml."""
    settings_module.set_default_profile(profile)
    rprint(f'[green]✓[/green] Default profile set to "{profile}" in {settings_module.CONFIG_PATH}')


@app.command("config-show")
def config_show(profile: ProfileOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    settings = get_settings(profile=profile)

    def mask(val: str | None) -> str:
        if val is None:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"...{val[-5:]}"

    def plain(val: str | None) -> str:
        return val or "[dim](not set)[/dim]"

    table = Table(title="reviewapp Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("meta_url", settings.meta_url)
    table.add_row("meta_token", mask(settings.meta_token.get_secret_value() if settings.meta_token else None))
    table.add_row("target_org", plain(settings.target_org))
    table.add_row("target_env", plain(settings.target_env))
    table.add_row("target_provider", plain(settings.target_provider))
    table.add_row("public address", public_address(settings, "<slug>"))
    table.add_row("gitlab_project_id", settings.gitlab_project_id)
    table.add_row("gitlab_token", mask(settings.gitlab_token.get_secret_value() if settings.gitlab_token else None))
    table.add_row("slack_path", mask(settings.slack_path))
    table.add_row("notify_async", str(settings.notify_async))

    rprint(table)
