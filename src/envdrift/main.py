"""
EnvDrift CLI - Sync .env files without leaking secrets

Main entry point for the envdrift command-line tool.
"""

import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

import click
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .core.config import ConfigError, generate_default_config, load_config, merge_config_with_options
from .core.diff import compute_changes_only, compute_diff
from .core.discovery import display_path, read_file_safe, resolve_env_files
from .core.drift import detect_drift
from .core.lexer import extract_keys, parse
from .core.syncer import generate, render
from .interactive import interactive_sync
from .output import JSON, TEXT, OutputHandler, console, err_console
from .watch import EnvWatcher


CONFIG_FILE = ".envdriftrc.json"

PRE_COMMIT_HOOK = """#!/bin/sh
# EnvDrift pre-commit hook
# Checks for env drift before allowing commit

echo "EnvDrift: Checking for env drift..."

envdrift check --ci

if [ $? -ne 0 ]; then
  echo ""
  echo "Commit blocked: env drift detected!"
  echo "   Run 'envdrift sync' to fix"
  exit 1
fi
"""


def configure_logging(verbose: bool):
    """Send envdrift debug logs to stderr through rich when --verbose is set."""
    if not verbose:
        return

    logger = logging.getLogger("envdrift")
    logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=err_console, show_path=False))


def load_merged_config(project_root: str, **cli_options):
    """
    Load the config file and overlay CLI options.

    Exits with status 1 if the config file is invalid.
    """
    try:
        config, config_path = load_config(project_root)
    except ConfigError as exc:
        err_console.print(f"[red]Error: {escape(str(exc))}[/red]")
        sys.exit(1)

    return merge_config_with_options(config, **cli_options), config_path


def get_file_paths(project_root: str, config) -> tuple:
    """
    Resolve .env and .env.example paths.

    Returns:
        Tuple of (env_path, example_path)
    """
    root = Path(project_root)
    return root / config.input, root / config.output


def make_output(json_flag: bool, quiet: bool, ci: bool) -> OutputHandler:
    return OutputHandler(format=JSON if json_flag else TEXT, quiet=quiet, ci=ci)


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="envdrift")
@click.option('-v', '--verbose', is_flag=True, help='Show debug logging')
@click.pass_context
def cli(ctx, verbose):
    """
    EnvDrift - Sync .env files without leaking secrets
    """
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        OutputHandler().banner()
        click.echo(ctx.get_help())


@cli.command()
@click.option('-i', '--input', 'input_file', help='Input .env file (default: .env)')
@click.option('-o', '--output', 'output_file', help='Output .env.example file (default: .env.example)')
@click.option('--ci', is_flag=True, help='CI mode - minimal output, proper exit codes')
@click.option('--json', 'json_flag', is_flag=True, help='Output results as JSON')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.option('-a', '--all', 'check_all', is_flag=True,
              help='Check all .env files (.env, .env.local, .env.development, etc.)')
@click.option('--project-root', default=".", help='Project root directory')
def check(input_file, output_file, ci, json_flag, quiet, check_all, project_root):
    """
    Detect drift between .env and .env.example.

    Exits with status 1 when drift is found.
    """
    config, config_path = load_merged_config(
        project_root, input=input_file, output=output_file, ci=ci or None
    )
    out = make_output(json_flag, quiet, config.ci)

    out.banner()
    out.print_config_info(config_path, config)

    env_path, example_path = get_file_paths(project_root, config)
    example_entries = parse(read_file_safe(example_path), False)
    example_keys = extract_keys(example_entries)

    if check_all:
        env_files = resolve_env_files(project_root, config.input)
        if not env_files:
            out.fail("No .env files found")
            sys.exit(1)

        results = {}
        for env_file in env_files:
            name = display_path(env_file, project_root)
            env_keys = extract_keys(parse(read_file_safe(env_file), False))
            results[name] = detect_drift(env_keys, example_keys)

        if out.is_json:
            out.json({
                'files': list(results),
                'results': {name: out.drift_payload(r) for name, r in results.items()},
                'synced': all(r.is_synced for r in results.values()),
            })
        else:
            for name, result in results.items():
                out.log(f"\n[bold]Checking {escape(name)}...[/bold]")
                out.print_drift_result(result, replace(config, input=name))

        sys.exit(0 if all(r.is_synced for r in results.values()) else 1)

    if not env_path.is_file():
        out.fail(f"No {config.input} file found")
        out.info(f"  Expected: {escape(str(env_path))}")
        sys.exit(1)

    env_keys = extract_keys(parse(read_file_safe(env_path), False))
    result = detect_drift(env_keys, example_keys)

    out.print_drift_result(result, config)

    if not result.is_synced:
        sys.exit(1)


@cli.command()
@click.option('-i', '--input', 'input_file', help='Input .env file (default: .env)')
@click.option('-o', '--output', 'output_file', help='Output .env.example file (default: .env.example)')
@click.option('-d', '--dry-run', is_flag=True, help='Preview changes without modifying files')
@click.option('-s', '--strict', is_flag=True, help='Scrub ALL values regardless of key name')
@click.option('--ci', is_flag=True, help='CI mode - minimal output, proper exit codes')
@click.option('-m', '--merge', is_flag=True, help='Merge mode - add new keys without removing existing')
@click.option('--sort', is_flag=True, help='Sort keys alphabetically')
@click.option('--group-by-prefix', is_flag=True, help='Group keys by prefix (AWS_, DB_, ...)')
@click.option('--ignore', multiple=True, metavar='KEY', help='Key to ignore (never scrub); repeatable')
@click.option('--no-preserve-comments', is_flag=True, help='Do not preserve comments')
@click.option('--json', 'json_flag', is_flag=True, help='Output results as JSON')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.option('-I', '--interactive', is_flag=True, help='Interactive mode - approve each change')
@click.option('-w', '--watch', is_flag=True, help='Watch mode - auto-sync on file changes')
@click.option('--project-root', default=".", help='Project root directory')
def sync(input_file, output_file, dry_run, strict, ci, merge, sort, group_by_prefix, ignore,
         no_preserve_comments, json_flag, quiet, interactive, watch, project_root):
    """
    Sync and scrub .env.example with values from .env.

    Sensitive values are replaced with placeholders; everything else is
    copied as-is.
    """
    config, config_path = load_merged_config(
        project_root,
        input=input_file,
        output=output_file,
        strict=strict or None,
        ci=ci or None,
        merge=merge or None,
        sort=sort or None,
        group_by_prefix=group_by_prefix or None,
        ignore=ignore or None,
        preserve_comments=False if no_preserve_comments else None,
    )
    out = make_output(json_flag, quiet, config.ci)

    out.banner()
    out.print_config_info(config_path, config)

    if watch:
        run_watch(config, project_root, dry_run, out, quiet)
        return

    env_path, example_path = get_file_paths(project_root, config)

    if not env_path.is_file():
        out.fail(f"No {config.input} file found")
        out.info(f"  Expected: {escape(str(env_path))}")
        sys.exit(1)

    if out.is_rich:
        if config.strict:
            console.print("[yellow]⚠[/yellow] [bold yellow]STRICT MODE[/bold yellow][dim] - All values will be scrubbed[/dim]")
        if config.merge:
            console.print("[blue]⇄[/blue] [bold blue]MERGE MODE[/bold blue][dim] - Preserving existing keys[/dim]")
        if interactive:
            console.print("[magenta]?[/magenta] [bold magenta]INTERACTIVE MODE[/bold magenta][dim] - Approve each change[/dim]")
        if dry_run:
            console.print("[cyan]ℹ[/cyan] [bold cyan]DRY RUN[/bold cyan][dim] - No files will be modified[/dim]")
        console.print(f"[cyan]►[/cyan] [bold]Syncing {escape(config.output)}...[/bold]")
        console.print()

    env_entries = parse(read_file_safe(env_path), config.preserve_comments)
    example_entries = parse(read_file_safe(example_path), config.preserve_comments)

    result = generate(env_entries, example_entries, config.to_scrub_configuration())

    if interactive and not config.ci and not out.is_json:
        answers = interactive_sync(result.entries)
        if answers.cancelled:
            return
        if answers.changed:
            result = replace(
                result,
                entries=answers.entries,
                content=render(answers.entries, grouped=config.group_by_prefix),
            )
            if answers.skipped:
                console.print()
                console.print(f"[dim]Skipped {len(answers.skipped)} key(s): "
                              f"{escape(', '.join(answers.skipped))}[/dim]")

    if dry_run:
        out.print_dry_run_table(result.entries, result.added, result.removed)
        return

    example_path.write_text(result.content, encoding="utf-8")

    out.print_sync_success(config.output, result, str(example_path))


def run_watch(config, project_root: str, dry_run: bool, out: OutputHandler, quiet: bool):
    """Run the watcher until Ctrl+C."""

    def on_sync(summary):
        if quiet:
            return
        stamp = time.strftime("%H:%M:%S")
        status = "Would sync (dry-run)" if dry_run else "✓ Synced"
        console.print(f"[dim]\\[{stamp}][/dim] [green]{status}[/green]")
        if summary.added:
            console.print(f"[green]  + {len(summary.added)} added[/green]")
        if summary.removed:
            console.print(f"[red]  - {len(summary.removed)} removed[/red]")
        console.print(f"[dim]  {summary.scrubbed} values scrubbed[/dim]")

    def on_error(error):
        out.error(str(error))

    watcher = EnvWatcher(config, project_root, dry_run=dry_run, on_sync=on_sync, on_error=on_error)

    if not watcher.env_path.is_file():
        out.fail(f"No {config.input} file found")
        sys.exit(1)

    out.log("[cyan]👁[/cyan]  [bold]Watching for changes...[/bold]")
    out.info(f"   {escape(config.input)} → {escape(config.output)}")
    out.info("   Press Ctrl+C to stop")

    with watcher:
        try:
            wait_for_interrupt()
        except KeyboardInterrupt:
            pass

    out.info("Watch stopped")


def wait_for_interrupt():
    while True:
        time.sleep(1)


@cli.command()
@click.option('-i', '--input', 'input_file', help='Input .env file (default: .env)')
@click.option('-o', '--output', 'output_file', help='Output .env.example file (default: .env.example)')
@click.option('--json', 'json_flag', is_flag=True, help='Output results as JSON')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.option('-c', '--changes-only', is_flag=True, help='Only show changes, hide unchanged keys')
@click.option('--project-root', default=".", help='Project root directory')
def diff(input_file, output_file, json_flag, quiet, changes_only, project_root):
    """
    Show a per-key diff between .env and .env.example.

    Exits with status 1 when any key was added, removed or modified.
    """
    config, config_path = load_merged_config(project_root, input=input_file, output=output_file)
    out = make_output(json_flag, quiet, False)

    out.banner()
    out.print_config_info(config_path, config)

    env_path, example_path = get_file_paths(project_root, config)

    for path, name in ((env_path, config.input), (example_path, config.output)):
        if not path.is_file():
            out.fail(f"No {name} file found")
            sys.exit(1)

    env_entries = parse(read_file_safe(env_path), False)
    example_entries = parse(read_file_safe(example_path), False)

    compute = compute_changes_only if changes_only else compute_diff
    result = compute(env_entries, example_entries)

    out.print_diff(
        result.lines,
        config.input,
        config.output,
        counts={
            'added': result.added,
            'removed': result.removed,
            'modified': result.modified,
            'unchanged': result.unchanged,
        },
    )

    if result.has_changes:
        sys.exit(1)


@cli.command()
@click.option('-f', '--force', is_flag=True, help='Overwrite existing config file')
@click.option('--hook', is_flag=True, help='Setup git pre-commit hook')
@click.option('--project-root', default=".", help='Project root directory')
def init(force, hook, project_root):
    """Initialize EnvDrift in the current project."""
    OutputHandler().banner()

    root = Path(project_root)
    config_path = root / CONFIG_FILE

    if config_path.exists() and not force:
        console.print(f"[yellow]⚠[/yellow] [bold]{CONFIG_FILE} already exists[/bold]")
        console.print("[dim]  Use --force to overwrite[/dim]")
        return

    config_path.write_text(generate_default_config(), encoding="utf-8")
    console.print(f"[green]✓[/green] [bold]Created {CONFIG_FILE}[/bold]")

    if hook:
        install_pre_commit_hook(root)

    console.print()
    console.print("[dim]" + "─" * 40 + "[/dim]")
    console.print("[bold]Next steps:[/bold]")
    console.print(f"[dim]  1. Edit {CONFIG_FILE} to customize[/dim]")
    console.print("[dim]  2. Run [/dim][green]envdrift check[/green][dim] to check for drift[/dim]")
    console.print("[dim]  3. Run [/dim][green]envdrift sync[/green][dim] to sync files[/dim]")

    if not hook:
        console.print()
        console.print("[dim]Tip: Run [/dim][cyan]envdrift init --hook[/cyan][dim] to add a pre-commit hook[/dim]")


def install_pre_commit_hook(root: Path):
    """Create the pre-commit hook, or append to an existing one."""
    git_dir = root / ".git"
    if not git_dir.exists():
        console.print("[yellow]⚠[/yellow] [dim]No .git directory found, skipping hook setup[/dim]")
        return

    hooks_dir = git_dir / "hooks"
    hooks_dir.mkdir(exist_ok=True)
    pre_commit = hooks_dir / "pre-commit"

    if pre_commit.exists():
        existing = pre_commit.read_text(encoding="utf-8")
        if "envdrift" in existing:
            console.print("[dim]  Pre-commit hook already includes EnvDrift[/dim]")
            return
        with open(pre_commit, 'a', encoding="utf-8") as f:
            f.write("\n" + PRE_COMMIT_HOOK)
        console.print("[green]✓[/green] [bold]Added EnvDrift to existing pre-commit hook[/bold]")
        return

    pre_commit.write_text(PRE_COMMIT_HOOK, encoding="utf-8")
    pre_commit.chmod(0o755)
    console.print("[green]✓[/green] [bold]Created pre-commit hook[/bold]")


@cli.command()
@click.option('--json', 'json_flag', is_flag=True, help='Output results as JSON')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.option('--project-root', default=".", help='Project root directory')
def scan(json_flag, quiet, project_root):
    """Scan the project for .env files."""
    config, config_path = load_merged_config(project_root)
    out = make_output(json_flag, quiet, False)

    out.banner()
    out.print_config_info(config_path, config)

    env_files = resolve_env_files(project_root, config.input)

    details = []
    for path in env_files:
        keys = extract_keys(parse(read_file_safe(path), False))
        details.append({
            'path': display_path(path, project_root),
            'keyCount': len(keys),
            'keys': keys,
        })

    if out.is_json:
        out.json({
            'files': details,
            'totalFiles': len(details),
            'totalKeys': sum(d['keyCount'] for d in details),
        })
        return

    if not details:
        out.warn("No .env files found in project")
        return

    out.log(f"[bold]Found {len(details)} .env file(s):[/bold]")
    out.log("")
    for detail in details:
        out.log(f"[green]  ✓ [/green]{escape(detail['path'])}[dim] ({detail['keyCount']} keys)[/dim]")

    out.log("")
    out.info("─" * 40)
    out.log("[dim]Run [green]envdrift check --all[/green] to check all files[/dim]")


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
