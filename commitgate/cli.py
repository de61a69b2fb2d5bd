#!/usr/bin/env python3
import os
from pathlib import Path
from typing import Optional

import click
from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError
from rich.console import Console
from rich.markup import escape

from . import __version__
from .changes import GitChangeProvider, ProviderError
from .config import DEFAULT_CONFIG_FILENAME, Config
from .installer import existing_hooks, install_hooks
from .models import PipelineKind
from .observers import ConsoleLogObserver, FileLogObserver
from .report import ReportRenderer
from .runner import PipelineRunner, PreCommitInputs

console = Console(soft_wrap=True)
error_console = Console(stderr=True, soft_wrap=True)


def find_repo_root(path: Path) -> Optional[Path]:
    try:
        repo = Repo(path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return None
    return Path(repo.working_tree_dir) if repo.working_tree_dir else None


class HookContext:
    """Options shared by every subcommand."""

    def __init__(self, path: Path, config_path: Optional[Path], verbose: bool):
        self.path = path
        self.repo_root = find_repo_root(path) or path
        self.config_path = config_path or self.repo_root / DEFAULT_CONFIG_FILENAME
        self.verbose = verbose

    def load_config(self) -> Config:
        return Config.load(self.config_path, console=error_console)

    def create_runner(self, config: Config) -> PipelineRunner:
        runner = PipelineRunner()
        if self.verbose:
            runner.add_observer(ConsoleLogObserver(console))
        log_file = config.get_log_file(self.repo_root)
        if log_file:
            runner.add_observer(FileLogObserver(str(log_file), error_console))
        return runner


def fail(ctx: click.Context, message: str) -> None:
    error_console.print(f"[red]Error: {escape(message)}[/red]")
    ctx.exit(1)


@click.group(invoke_without_command=True)
@click.option(
    "-p",
    "--path",
    default=".",
    help="Path to git repository (defaults to current directory)",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    "-c",
    "--config",
    "config_path",
    envvar="GITHOOKS_CONFIG",
    type=click.Path(dir_okay=False, path_type=Path),
    help=f"Configuration file (defaults to {DEFAULT_CONFIG_FILENAME} in the repository root)",
)
@click.option("-v", "--verbose", is_flag=True, help="Trace every check as it runs")
@click.option("--version", is_flag=True, help="Display version information and exit")
@click.pass_context
def main(
    ctx: click.Context,
    path: Path,
    config_path: Optional[Path],
    verbose: bool,
    version: bool,
):
    """
    Commit-quality gate for Git hooks.

    The pre-commit command checks staged changes, the commit-msg command
    validates the commit message. Both exit non-zero when the commit must
    be aborted.

    Configuration is read from .githooks-config.json in the repository root.
    """
    if version:
        console.print(f"commitgate {__version__}")
        ctx.exit(0)

    ctx.obj = HookContext(path.absolute(), config_path, verbose)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command("pre-commit")
@click.pass_context
def pre_commit(ctx: click.Context):
    """Check the staged changes (git pre-commit hook)."""
    hook: HookContext = ctx.obj
    config = hook.load_config()

    try:
        provider = GitChangeProvider(str(hook.path))
        branch = provider.current_branch()
        changeset = provider.get_staged_changes()
    except ProviderError as e:
        fail(ctx, f"cannot read repository state: {e}")
        return

    runner = hook.create_runner(config)
    result = runner.run(PipelineKind.PRE_COMMIT, PreCommitInputs(changeset, branch), config)
    ReportRenderer(console, runner.checks).render(result, config)
    ctx.exit(result.exit_code)


@main.command("commit-msg")
@click.argument("message_file", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def commit_msg(ctx: click.Context, message_file: Path):
    """Validate the commit message in MESSAGE_FILE (git commit-msg hook)."""
    hook: HookContext = ctx.obj
    config = hook.load_config()

    try:
        message = message_file.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        fail(ctx, f"cannot read commit message file: {e}")
        return

    runner = hook.create_runner(config)
    result = runner.run(PipelineKind.COMMIT_MSG, message, config)
    ReportRenderer(console, runner.checks).render(result, config)
    ctx.exit(result.exit_code)


@main.command("config-list")
@click.pass_context
def config_list(ctx: click.Context):
    """Display the effective configuration."""
    hook: HookContext = ctx.obj
    config = hook.load_config()

    console.print("\n[bold]Current Configuration Settings:[/bold]")
    if config.source:
        console.print(f"[dim]Config file: {escape(config.source.replace(os.sep, '/'))}[/dim]")
    else:
        console.print("[dim]Using default values (no config file found)[/dim]")

    def print_setting(name: str, value: object):
        console.print(f"{name:<22} {escape(str(value))}")

    commit_section = config.commit_msg
    console.print("\n[bold]commit-msg[/bold]")
    print_setting("jira_project", commit_section.jira_project)
    print_setting("min_message_length", commit_section.min_message_length)
    print_setting("max_subject_length", commit_section.max_subject_length)
    print_setting("require_type", commit_section.require_type)
    print_setting("allowed_types", ", ".join(commit_section.allowed_types))

    console.print("\n[bold]pre-commit[/bold]")
    print_setting("protected_branches", ", ".join(config.pre_commit.protected_branches))
    for name, check_config in config.pre_commit.checks.items():
        state = "enabled" if check_config.enabled else "disabled"
        mode = "blocking" if check_config.blocking else "advisory"
        print_setting(name, f"{state}, {mode}")

    console.print(
        f"\nTo modify these settings, create or edit {DEFAULT_CONFIG_FILENAME} in your repository root"
    )


@main.command("install")
@click.option("--force", is_flag=True, help="Overwrite existing hooks without asking")
@click.option(
    "--no-config",
    is_flag=True,
    help=f"Do not create a default {DEFAULT_CONFIG_FILENAME}",
)
@click.pass_context
def install(ctx: click.Context, force: bool, no_config: bool):
    """Install the pre-commit and commit-msg hooks into the repository."""
    hook: HookContext = ctx.obj
    try:
        repo = Repo(hook.path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        fail(ctx, "Not a git repository. Run this command from the root of your git repository")
        return

    hooks_dir = Path(repo.git_dir) / "hooks"
    present = existing_hooks(hooks_dir)
    if present and not force:
        console.print(f"[yellow]⚠ Existing hooks detected: {', '.join(present)}[/yellow]")
        if not click.confirm("Do you want to overwrite existing hooks?", default=False):
            console.print("[yellow]Installation cancelled[/yellow]")
            return

    for hook_name, hook_path in install_hooks(hooks_dir).items():
        console.print(f"[green]✓ {hook_name} hook installed[/green] [dim]{escape(str(hook_path))}[/dim]")

    config_file = hook.config_path
    if not no_config and not config_file.exists():
        Config().save(config_file)
        console.print(f"[green]✓ Created {escape(str(config_file))} with default values[/green]")

    console.print("\nTo bypass hooks (not recommended): git commit --no-verify")
