"""
Terminal and JSON output for the EnvDrift CLI.

Text output is drawn with rich; JSON and CI output are plain lines so they
can be piped and parsed.
"""

import json
from typing import Any, Dict, List, Optional

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .core.config import EnvDriftConfig
from .core.diff import ADDED, MODIFIED, REMOVED, UNCHANGED, DiffLine
from .core.drift import DriftResult
from .core.inference import ScrubDecision
from .core.syncer import SyncResult


console = Console()
err_console = Console(stderr=True)

TEXT = 'text'
JSON = 'json'


def decision_to_dict(entry: ScrubDecision) -> Dict[str, Any]:
    return {
        'key': entry.key,
        'scrubbedValue': entry.result_value,
        'wasScrubbed': entry.was_scrubbed,
        'reason': entry.reason,
    }


def sync_summary(entries: List[ScrubDecision], added: List[str], removed: List[str]) -> Dict[str, int]:
    return {
        'total': len(entries),
        'scrubbed': sum(1 for e in entries if e.was_scrubbed),
        'added': len(added),
        'removed': len(removed),
    }


class OutputHandler:
    """
    Renders command results.

    Modes:
    - text: colored output (banner and hints suppressed when quiet or ci)
    - json: only machine-readable payloads are printed
    - ci: short plain lines suitable for logs
    """

    def __init__(self, format: str = TEXT, quiet: bool = False, ci: bool = False):
        self.format = format
        self.quiet = quiet
        self.ci = ci

    @property
    def is_json(self) -> bool:
        return self.format == JSON

    @property
    def is_rich(self) -> bool:
        """True when decorated (non-JSON, non-CI, non-quiet) output is wanted."""
        return not (self.is_json or self.quiet or self.ci)

    def banner(self):
        if not self.is_rich:
            return
        console.print(Panel(
            f"[bold green]EnvDrift[/bold green]  [dim]v{__version__}[/dim]\n"
            "[dim]Sync .env files without leaking secrets.[/dim]",
            border_style="green",
            box=box.DOUBLE,
            expand=False,
        ))

    def log(self, message: str):
        if self.quiet or self.is_json:
            return
        console.print(message)

    def info(self, message: str):
        if self.quiet or self.is_json:
            return
        console.print(f"[dim]{message}[/dim]")

    def success(self, message: str):
        if self.is_json:
            return
        if self.quiet:
            click.echo(f"✓ {message}")
            return
        console.print(f"[green]✓[/green] [bold green]{escape(message)}[/bold green]")

    def warn(self, message: str):
        if self.is_json:
            return
        console.print(f"[yellow]⚠[/yellow] {escape(message)}")

    def error(self, message: str):
        if self.is_json:
            return
        err_console.print(f"[red]✗[/red] [bold red]{escape(message)}[/bold red]")

    def json(self, data: Any):
        if not self.is_json:
            return
        click.echo(json.dumps(data, indent=2))

    def fail(self, message: str):
        """Report a fatal error in the current format."""
        if self.is_json:
            click.echo(json.dumps({'error': message}, indent=2))
        else:
            self.error(message)

    def print_config_info(self, config_path, config: EnvDriftConfig):
        if not self.is_rich:
            return
        if config_path:
            console.print(f"[dim]Config: {escape(str(config_path))}[/dim]")
        if config.ignore:
            console.print(f"[dim]Ignored keys: {escape(', '.join(config.ignore))}[/dim]")
        if config.always_scrub:
            console.print(f"[dim]Always scrub: {escape(', '.join(config.always_scrub))}[/dim]")

    def print_drift_result(self, result: DriftResult, config: EnvDriftConfig):
        if self.is_json:
            click.echo(json.dumps(self.drift_payload(result), indent=2))
            return

        if self.ci:
            if result.is_synced:
                click.echo("✓ No drift detected")
            else:
                click.echo("✗ Drift detected")
                if result.missing_in_example:
                    click.echo(f"  Missing in {config.output}: {', '.join(result.missing_in_example)}")
                if result.missing_in_template:
                    click.echo(f"  Missing in {config.input}: {', '.join(result.missing_in_template)}")
            return

        console.print()

        if result.is_synced:
            console.print("[green]✓[/green] [bold green]SYNCED[/bold green][dim] - No drift detected[/dim]")
            console.print(f"[dim]  {escape(config.input)} has {len(result.env_keys)} keys[/dim]")
            console.print(f"[dim]  {escape(config.output)} has {len(result.example_keys)} keys[/dim]")
            return

        console.print("[red]✗[/red] [bold red]DRIFT DETECTED[/bold red]")
        console.print()

        for label, keys in (
            (config.output, result.missing_in_example),
            (config.input, result.missing_in_template),
        ):
            if not keys:
                continue
            console.print(f"[yellow]⚠[/yellow] [bold]Missing in {escape(label)} ({len(keys)}):[/bold]")
            for key in keys:
                console.print(f"[red]  - [/red]{escape(key)}")
            console.print()

        if self.quiet:
            return

        console.print("[dim]" + "─" * 40 + "[/dim]")
        console.print("[dim]Run [green]envdrift sync[/green] to fix drift[/dim]")
        if not config.strict:
            console.print("[dim]    [cyan]--strict[/cyan] to scrub ALL values[/dim]")
        console.print("[dim]    [cyan]--dry-run[/cyan] to preview changes[/dim]")

    @staticmethod
    def drift_payload(result: DriftResult) -> Dict[str, Any]:
        return {
            'synced': result.is_synced,
            'missingInExample': result.missing_in_example,
            'missingInEnv': result.missing_in_template,
            'envKeyCount': len(result.env_keys),
            'exampleKeyCount': len(result.example_keys),
        }

    def print_dry_run_table(self, entries: List[ScrubDecision], added: List[str], removed: List[str]):
        """Show what a sync would write without touching any file."""
        if self.is_json:
            click.echo(json.dumps({
                'dryRun': True,
                'entries': [decision_to_dict(e) for e in entries],
                'added': added,
                'removed': removed,
                'summary': sync_summary(entries, added, removed),
            }, indent=2))
            return

        scrubbed_count = sum(1 for e in entries if e.was_scrubbed)

        if self.ci:
            click.echo(f"Would scrub {scrubbed_count} value(s)")
            if added:
                click.echo(f"Would add {len(added)} key(s): {', '.join(added)}")
            if removed:
                click.echo(f"Would remove {len(removed)} key(s): {', '.join(removed)}")
            return

        console.print()
        console.print("[cyan]►[/cyan] [bold]DRY RUN - Preview of changes:[/bold]")
        console.print()

        table = Table(box=box.ROUNDED)
        table.add_column("Key", no_wrap=True)
        table.add_column("Scrubbed Value", max_width=35, overflow="ellipsis", no_wrap=True)
        table.add_column("Reason")

        new_keys = set(added)
        for entry in entries:
            is_new = entry.key in new_keys
            key_style = "green" if is_new else ("yellow" if entry.was_scrubbed else "white")
            key_cell = f"[{key_style}]{'+ ' if is_new else ''}{escape(entry.key)}[/{key_style}]"
            value_style = "red" if entry.was_scrubbed else "white"
            icon = "[red]⚠[/red]" if entry.was_scrubbed else "[green]✓[/green]"
            table.add_row(
                key_cell,
                f"[{value_style}]{escape(entry.result_value)}[/{value_style}]",
                f"{icon} {escape(entry.reason)}",
            )

        console.print(table)
        console.print()

        if added:
            console.print(f"[green]+ {len(added)} new key(s) would be added[/green]")
        if removed:
            console.print(f"[red]- {len(removed)} key(s) would be removed[/red]")

        console.print("[dim]" + "─" * 40 + "[/dim]")
        console.print(
            f"[yellow]⚠ {scrubbed_count}[/yellow][dim] value(s) would be scrubbed, [/dim]"
            f"[green]{len(entries) - scrubbed_count}[/green][dim] kept as-is[/dim]"
        )
        console.print()
        console.print("[cyan]ℹ[/cyan] [dim]Run without --dry-run to apply changes[/dim]")

    def print_sync_success(self, output_file: str, result: SyncResult, output_path: str):
        entries, added, removed = result.entries, result.added, result.removed
        scrubbed_count = result.scrubbed_count

        if self.is_json:
            click.echo(json.dumps({
                'success': True,
                'outputFile': output_file,
                'entries': [decision_to_dict(e) for e in entries],
                'added': added,
                'removed': removed,
                'summary': sync_summary(entries, added, removed),
            }, indent=2))
            return

        if self.ci or self.quiet:
            click.echo(f"✓ {output_file} updated ({scrubbed_count} values scrubbed)")
            return

        console.print(f"[green]✓[/green] [bold green]{escape(output_file)} updated![/bold green]")
        console.print()

        if added:
            console.print(f"[green]  Added {len(added)} new key(s):[/green]")
            for key in added:
                console.print(f"[green]    + [/green]{escape(key)}")

        if removed:
            console.print(f"[red]  Removed {len(removed)} key(s):[/red]")
            for key in removed:
                console.print(f"[red]    - [/red]{escape(key)}")

        if not added and not removed:
            console.print("[dim]  No keys added or removed[/dim]")

        console.print()
        console.print("[dim]" + "─" * 40 + "[/dim]")
        console.print(f"[green]✓[/green] [dim]{scrubbed_count} sensitive value(s) scrubbed[/dim]")
        console.print(f"[dim]  Output: {escape(output_path)}[/dim]")

    def print_diff(self, lines: List[DiffLine], env_file: str, example_file: str,
                   counts: Optional[Dict[str, int]] = None):
        """
        Print diff lines.

        counts defaults to tallies over `lines`; pass the full-result counts
        when lines were filtered.
        """
        if counts is None:
            counts = {kind: sum(1 for l in lines if l.kind == kind)
                      for kind in (ADDED, REMOVED, MODIFIED, UNCHANGED)}

        if self.is_json:
            click.echo(json.dumps({
                'envFile': env_file,
                'exampleFile': example_file,
                'diff': [line.to_dict() for line in lines],
                'summary': counts,
            }, indent=2))
            return

        if self.ci:
            click.echo(f"{counts[ADDED]} added, {counts[REMOVED]} removed, {counts[MODIFIED]} modified")
            return

        console.print()
        console.print(f"[bold]Diff: [/bold][dim]{escape(env_file)} ↔ {escape(example_file)}[/dim]")
        console.print("[dim]" + "─" * 60 + "[/dim]")
        console.print()

        for line in lines:
            key = escape(line.key)
            env_value = escape(line.env_value or '')
            example_value = escape(line.example_value or '')
            if line.kind == ADDED:
                console.print(f"[green]+ {key}={env_value}[/green]")
            elif line.kind == REMOVED:
                console.print(f"[red]- {key}={example_value}[/red]")
            elif line.kind == MODIFIED:
                console.print(f"[yellow]~ {key}[/yellow]")
                console.print(f"[red]  - {example_value or '(empty)'}[/red]")
                console.print(f"[green]  + {env_value or '(empty)'}[/green]")
            else:
                console.print(f"[dim]  {key}={env_value}[/dim]")

        console.print()
        console.print("[dim]" + "─" * 60 + "[/dim]")
        console.print(
            f"[green]+ {counts[ADDED]} added[/green]  "
            f"[red]- {counts[REMOVED]} removed[/red]  "
            f"[yellow]~ {counts[MODIFIED]} modified[/yellow]"
        )
