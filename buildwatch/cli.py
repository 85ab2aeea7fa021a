"""
buildwatch CLI - Jenkins build status in the terminal.

Usage:
    buildwatch --help               Show all commands
    buildwatch status               Run one refresh cycle and print each project's status
    buildwatch builds my-project    List recent builds of a project
    buildwatch open my-project 42   Open build #42 of a project in the browser
    buildwatch watch                Poll until interrupted, reloading the config file

Jenkins URL, username and token come from JENKINS_URL, JENKINS_USERNAME and
JENKINS_API_TOKEN (or .env); projects and job mappings from buildwatch.yml.
"""

import asyncio

import typer
import yaml

from buildwatch.config import ConfigReloader, get_settings, load_status_config
from buildwatch.core.logging import setup_logging
from buildwatch.host import (
    ConsoleNotifier,
    ConsoleSummaryPresenter,
    EnvironmentCredentialStore,
    launch_in_browser,
)
from buildwatch.jenkins.client import JenkinsClient
from buildwatch.service import BuildStatusService
from buildwatch.tree.nodes import BuildNode, ProjectNode

app = typer.Typer(
    name="buildwatch",
    help="Jenkins build status for your projects",
    no_args_is_help=True,
)


def _print_error(message: str) -> None:
    """Print an error message to stderr."""
    typer.echo(f"❌ {message}", err=True)


def _build_service(reloader: ConfigReloader) -> BuildStatusService:
    settings = get_settings()

    return BuildStatusService(
        config_provider=lambda: reloader.current,
        credentials=EnvironmentCredentialStore(settings.jenkins_api_token),
        presenter=ConsoleSummaryPresenter(),
        notifier=ConsoleNotifier(),
        client=JenkinsClient(timeout_seconds=settings.request_timeout_seconds),
        browser=launch_in_browser,
    )


def _reloader() -> ConfigReloader:
    settings = get_settings()
    setup_logging(settings.debug)
    return ConfigReloader(lambda: load_status_config(settings))


async def _expand_project(service: BuildStatusService, project: str) -> list | None:
    for node in await service.tree.get_root_nodes():
        if isinstance(node, ProjectNode) and node.project_id == project:
            return await service.tree.get_children(node)
    return None


@app.command()
def status() -> None:
    """Run one refresh cycle and print each project's status."""
    service = _build_service(_reloader())
    stats = asyncio.run(service.refresher.run_cycle())
    typer.echo(
        f"\n{stats['projects']} projects | fetched={stats['fetched']} "
        f"failed={stats['failed']} unconfigured={stats['unconfigured']} ({stats['outcome']})"
    )


@app.command()
def builds(project: str = typer.Argument(..., help="Project id from buildwatch.yml")) -> None:
    """List recent builds of a project, newest first."""
    service = _build_service(_reloader())
    nodes = asyncio.run(_expand_project(service, project))
    if nodes is None:
        _print_error(f"No project '{project}' with a Jenkins job mapping")
        raise typer.Exit(1)

    for node in nodes:
        if isinstance(node, BuildNode):
            result = node.build.result.value
            typer.echo(f"{node.label:>6}  {result:<10} {node.description}")
        else:
            typer.echo(node.label)


@app.command("open")
def open_build(
    project: str = typer.Argument(..., help="Project id from buildwatch.yml"),
    number: int = typer.Argument(..., help="Build number"),
) -> None:
    """Open a build of a project in the browser."""
    service = _build_service(_reloader())
    nodes = asyncio.run(_expand_project(service, project)) or []
    for node in nodes:
        if isinstance(node, BuildNode) and node.build.number == number:
            service.open_build_in_browser(node)
            return

    _print_error(f"Build #{number} not found for '{project}'")
    raise typer.Exit(1)


@app.command()
def watch() -> None:
    """Poll Jenkins until interrupted, picking up config file changes."""
    reloader = _reloader()
    service = _build_service(reloader)

    async def _watch() -> None:
        await service.activate()
        try:
            while True:
                await asyncio.sleep(reloader.current.polling_interval_ms / 1000)
                try:
                    event = reloader.reload()
                except (OSError, ValueError, yaml.YAMLError) as e:
                    _print_error(f"Config reload failed, keeping previous config: {e}")
                    continue
                if event is not None:
                    await service.on_config_changed(event)
        finally:
            await service.deactivate()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        typer.echo("\nStopped.")


if __name__ == "__main__":
    app()
