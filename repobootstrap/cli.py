"""
Command-line interface for the workspace bootstrapper.

Provides commands for cloning and installing a development workspace,
previewing the install list and managing configuration.
"""

import platform
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click

from repobootstrap import __version__
from repobootstrap.core.config import BootstrapConfig, Config, resolve_repository_names
from repobootstrap.core.exceptions import BootstrapError
from repobootstrap.core.models import CloneOutcome, RemoteCatalog, RepositoryResult
from repobootstrap.utils.logging_config import setup_logging
from repobootstrap.utils.validation import (
    parse_extra_dependencies,
    validate_remote,
    validate_repository_name,
)


def platform_tags() -> Tuple[str, ...]:
    """Tags selecting platform-specific repositories, e.g. ("linux", "cpython")."""
    return (platform.system().lower(), sys.implementation.name)


def _fail(message: str, log: Optional[str] = None) -> None:
    click.echo(f"Error: {message}", err=True)
    if log:
        click.echo(log, err=True)
    sys.exit(1)


def _select_repositories(
    config: BootstrapConfig, extra_repos: Tuple[str, ...], no_defaults: bool
) -> List[str]:
    names = resolve_repository_names(
        config,
        platform_tags=platform_tags(),
        extra=extra_repos,
        include_defaults=not no_defaults,
    )
    for name in names:
        is_valid, error = validate_repository_name(name)
        if not is_valid:
            _fail(error)
    return names


def _validate_remotes(remotes: Tuple[str, ...]) -> None:
    for remote in remotes:
        is_valid, error = validate_remote(remote)
        if not is_valid:
            _fail(error)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Path to log file"
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON configuration file"
)
@click.pass_context
def cli(ctx, verbose, log_file, config_path):
    """
    Workspace bootstrapper

    Clone a set of repositories from a prioritized list of remotes and
    install them as editable packages.
    """
    ctx.ensure_object(dict)

    try:
        Config.reset()
        if config_path:
            Config.load_from_file(config_path)
        config = Config.load_from_env()
    except BootstrapError as e:
        _fail(str(e))

    verbose = verbose or config.verbose
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config

    log_level = "DEBUG" if verbose else "INFO"
    setup_logging(level=log_level, log_file=Path(log_file) if log_file else None)


@cli.command()
@click.argument("extra_repos", nargs=-1)
@click.option(
    "--remote", "-r", "remotes",
    multiple=True,
    help="Remote base tried before the defaults (repeatable)"
)
@click.option(
    "--concurrent", "-c",
    is_flag=True,
    help="Clone repositories concurrently"
)
@click.option(
    "--shallow", "-s",
    is_flag=True,
    help="Use shallow clones (latest commit of each branch)"
)
@click.option(
    "--no-install", "-C",
    is_flag=True,
    help="Quit after cloning"
)
@click.option(
    "--branch", "-b",
    help="Check out a branch across all repositories"
)
@click.option(
    "--no-defaults", "-D",
    is_flag=True,
    help="Ignore the default repository list (interpreter-specific ones are kept)"
)
@click.option(
    "--workspace", "-w",
    type=click.Path(file_okay=False),
    help="Workspace directory (default: current directory)"
)
@click.option(
    "--extra-dep", "extra_deps",
    multiple=True,
    help="Extra install dependencies as NAME=SPEC (repeatable)"
)
@click.option(
    "--max-retries",
    type=click.IntRange(min=0),
    help="Retries of a remote after a transient connection reset"
)
@click.pass_context
def setup(ctx, extra_repos, remotes, concurrent, shallow, no_install, branch,
          no_defaults, workspace, extra_deps, max_retries):
    """
    Clone the repositories and install them.

    EXTRA_REPOS are cloned after the default repositories.

    Examples:

        repo-bootstrap setup -c -s

        repo-bootstrap setup -D -r git@github.com:me my-fork
    """
    config: BootstrapConfig = ctx.obj["config"]
    _validate_remotes(remotes)

    if workspace:
        config.workspace_dir = workspace
    if concurrent:
        config.acquisition.concurrent = True
    if shallow:
        config.acquisition.shallow = True
    if branch:
        config.acquisition.branch = branch
    if no_install:
        config.installation.enabled = False
    if max_retries is not None:
        config.retry.max_retries = max_retries
    try:
        for name, specs in parse_extra_dependencies(extra_deps).items():
            config.installation.extra_dependencies[name] = specs
    except ValueError as e:
        _fail(str(e))

    names = _select_repositories(config, extra_repos, no_defaults)
    if not names:
        _fail("No repositories selected")

    from repobootstrap.engine import BootstrapEngine

    engine = BootstrapEngine(config, preferred_remotes=remotes)
    state = engine.bootstrap(names)
    summary = BootstrapEngine.summarize(state)

    if not state.succeeded:
        failure = state.failure
        if ctx.obj.get("verbose"):
            for repo in summary["repositories"]:
                click.echo(f"  {repo['name']}: {repo['outcome']}", err=True)
        _fail(str(failure), failure.log)

    click.echo()
    click.echo("=" * 60)
    click.echo("ALL DONE")
    click.echo("=" * 60)
    for repo in summary["repositories"]:
        click.echo(f"  {repo['name']:<20} {repo['outcome']}")
    if summary["install"]:
        click.echo(f"Installed: {' '.join(t['repository'] for t in summary['install'])}")


@cli.command()
@click.argument("extra_repos", nargs=-1)
@click.option(
    "--no-defaults", "-D",
    is_flag=True,
    help="Ignore the default repository list (interpreter-specific ones are kept)"
)
@click.option(
    "--workspace", "-w",
    type=click.Path(file_okay=False),
    help="Workspace directory (default: current directory)"
)
@click.pass_context
def plan(ctx, extra_repos, no_defaults, workspace):
    """
    Show the install list for the repositories already in the workspace.

    Nothing is cloned or installed.
    """
    from repobootstrap.installation.planner import InstallPlanner

    config: BootstrapConfig = ctx.obj["config"]
    if workspace:
        config.workspace_dir = workspace

    names = _select_repositories(config, extra_repos, no_defaults)
    present = [n for n in names if (config.workspace_path / n).exists()]
    missing = [n for n in names if n not in present]

    planner = InstallPlanner(config.workspace_path, config.installation.extra_dependencies)
    tasks = planner.plan(
        RepositoryResult(name=n, outcome=CloneOutcome.SKIPPED) for n in present
    )

    click.echo("Install list:")
    click.echo("-" * 40)
    for task in tasks:
        line = f"  {task.repository_name} ({task.manifest_kind.value})"
        if task.extra_deps:
            line += f" after: {' '.join(task.extra_deps)}"
        click.echo(line)
    if missing:
        click.echo(f"Not cloned yet: {' '.join(missing)}")


@cli.command()
@click.option(
    "--output", "-o",
    type=click.Path(),
    default="bootstrap.json",
    help="Output path for configuration file"
)
def init(output):
    """
    Initialize configuration file.

    Creates a default configuration file that can be customized.
    """
    Config.save_to_file(output)
    click.echo(f"Configuration saved to: {output}")


@cli.command()
@click.option(
    "--remote", "-r", "remotes",
    multiple=True,
    help="Remote base tried before the defaults (repeatable)"
)
@click.option(
    "--no-defaults", "-D",
    is_flag=True,
    help="Ignore the default repository list (interpreter-specific ones are kept)"
)
@click.argument("extra_repos", nargs=-1)
@click.pass_context
def list_repos(ctx, remotes, no_defaults, extra_repos):
    """List the repositories and remotes that would be used."""
    config: BootstrapConfig = ctx.obj["config"]
    _validate_remotes(remotes)
    names = _select_repositories(config, extra_repos, no_defaults)
    catalog = RemoteCatalog.from_remotes(config.acquisition.remotes, remotes)

    click.echo("Repositories:")
    click.echo("-" * 40)
    for name in names:
        click.echo(f"  {name}")
    click.echo("Remotes:")
    click.echo("-" * 40)
    for remote in catalog:
        click.echo(f"  {remote}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
