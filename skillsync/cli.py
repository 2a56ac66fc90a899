"""skillsync CLI — the main entry point for vendoring and syncing skills."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from skillsync import __version__
from skillsync.errors import SkillSyncError, format_error
from skillsync.models.config import CONFIG_FILE, SyncConfig, load_config
from skillsync.reporter import ConsoleReporter

console = Console()
err_console = Console(stderr=True)

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

COMMANDS = {
    "sync": "Pull latest and sync skills",
    "init": "Clone repositories",
    "vendor": "Clone or update vendor repositories",
    "check": "Check for upstream updates",
    "cleanup": "Remove repositories and skills not in configuration",
}


def _configure_logging(verbose: int) -> None:
    """Set up stdlib logging from ``-v`` flags or the ``SKILLSYNC_LOG`` env var."""
    env_level = os.environ.get("SKILLSYNC_LOG", "").upper()
    if env_level:
        if env_level not in _VALID_LEVELS:
            print(
                f"WARNING: invalid SKILLSYNC_LOG level '{env_level}', "
                f"expected one of {', '.join(sorted(_VALID_LEVELS))}; defaulting to INFO",
                file=sys.stderr,
            )
        level = getattr(logging, env_level, logging.INFO)
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose >= 1:
        level = logging.INFO
    else:
        return
    logging.basicConfig(level=logging.WARNING, format=_LOG_FORMAT, stream=sys.stderr, force=True)
    logging.getLogger("skillsync").setLevel(level)


class Context:
    """Options shared by every subcommand."""

    def __init__(self, root: Path, config_path: Path, proxy: str | None, yes: bool):
        self.root = root
        self.config_path = config_path
        self.proxy = proxy
        self.yes = yes
        self.reporter = ConsoleReporter(console, assume_yes=yes)
        self._config: SyncConfig | None = None

    @property
    def config(self) -> SyncConfig:
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config


def _finish(ok: bool) -> None:
    if not ok:
        sys.exit(1)
    console.print("\n[bold blue]Done[/]")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option("--root", "-r", default=".", type=click.Path(file_okay=False), help="Project root")
@click.option("--config", "-c", "config_path", default=None, help=f"Config file (default: <root>/{CONFIG_FILE})")
@click.option("--proxy", default=None, help="HTTP(S) proxy for git network operations")
@click.option("--yes", "-y", is_flag=True, help="Skip prompts and proceed with defaults")
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v info, -vv debug)")
@click.pass_context
def main(ctx: click.Context, root: str, config_path: str | None, proxy: str | None, yes: bool, verbose: int):
    """skillsync — vendor skill repositories and sync their skills.

    Clones the configured repositories under vendor/ (and sources/), copies
    each mapped skill into skills/ with a LICENSE.md and SYNC.md stamp, and
    reports or removes anything configuration no longer declares.
    """
    _configure_logging(verbose)
    root_path = Path(root).resolve()
    ctx.obj = Context(
        root=root_path,
        config_path=Path(config_path) if config_path else root_path / CONFIG_FILE,
        proxy=proxy,
        yes=yes,
    )

    if ctx.invoked_subcommand is not None:
        return

    if yes:
        err_console.print("[red]Command required when using -y flag[/]")
        err_console.print(f"Available commands: {', '.join(COMMANDS)}")
        sys.exit(1)

    console.print("\n[bold blue]skillsync[/]\n")
    for name, hint in COMMANDS.items():
        console.print(f"  [cyan]{name:<8}[/] {hint}")
    action = click.prompt("\nWhat would you like to do?", type=click.Choice(list(COMMANDS)), default="sync")
    ctx.invoke(_SUBCOMMANDS[action])


def _run(action) -> None:
    """Run a command body, mapping unexpected errors to exit code 1."""
    try:
        ok = action()
    except SkillSyncError as e:
        err_console.print(f"[red]Error:[/] {escape(format_error(e))}")
        logging.getLogger(__name__).debug("Command failed", exc_info=True)
        sys.exit(1)
    except Exception as e:
        err_console.print(f"[red]Unexpected error:[/] {escape(format_error(e))}")
        logging.getLogger(__name__).error("Unhandled error", exc_info=True)
        sys.exit(1)
    _finish(ok)


# ── Init ─────────────────────────────────────────────────────────────


@main.command()
@click.pass_obj
def init(obj: Context):
    """Clone every configured source and vendor repository."""
    from skillsync.commands import init_repositories

    console.print("\n[bold blue]skillsync[/] — Init\n")
    _run(lambda: init_repositories(obj.root, obj.config, obj.reporter, skip_prompt=obj.yes, proxy=obj.proxy))


# ── Vendor ───────────────────────────────────────────────────────────


@main.command()
@click.option("--force", "-f", is_flag=True, help="Delete and re-clone every vendor repository")
@click.pass_obj
def vendor(obj: Context, force: bool):
    """Clone missing vendor repositories and reset existing ones to their ref."""
    from skillsync.commands import ensure_vendor_repositories

    console.print("\n[bold blue]skillsync[/] — Vendor\n")
    _run(lambda: ensure_vendor_repositories(obj.root, obj.config, obj.reporter, force=force, proxy=obj.proxy))


# ── Sync ─────────────────────────────────────────────────────────────


@main.command()
@click.pass_obj
def sync(obj: Context):
    """Update repositories and copy their skills into skills/."""
    from skillsync.commands import sync_skills

    console.print("\n[bold blue]skillsync[/] — Sync\n")
    _run(lambda: sync_skills(obj.root, obj.config, obj.reporter, proxy=obj.proxy))


# ── Check ────────────────────────────────────────────────────────────


@main.command()
@click.pass_obj
def check(obj: Context):
    """Report how many commits each repository is behind upstream."""
    from skillsync.commands import report_updates

    console.print("\n[bold blue]skillsync[/] — Check\n")
    _run(lambda: report_updates(obj.root, obj.config, obj.reporter, proxy=obj.proxy))


# ── Cleanup ──────────────────────────────────────────────────────────


@main.command(name="cleanup")
@click.pass_obj
def cleanup_command(obj: Context):
    """Remove repositories and skills that are no longer configured."""
    from skillsync.commands import remove_drift

    console.print("\n[bold blue]skillsync[/] — Cleanup\n")
    _run(lambda: remove_drift(obj.root, obj.config, obj.reporter, skip_prompt=obj.yes))


_SUBCOMMANDS = {
    "init": init,
    "vendor": vendor,
    "sync": sync,
    "check": check,
    "cleanup": cleanup_command,
}


if __name__ == "__main__":
    main()
