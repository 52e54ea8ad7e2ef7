"""
Interactive approval of scrub decisions before .env.example is written.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List

import click
from rich.markup import escape

from .core.inference import ScrubDecision
from .output import console


ACCEPT = {'', 'y', 'yes'}
SKIP = {'n', 'no'}
CUSTOM = {'c', 'custom'}
QUIT = {'q', 'quit'}


@dataclass
class InteractiveResult:
    """Decisions the user accepted, with any custom values applied."""
    entries: List[ScrubDecision] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    overrides: Dict[str, str] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.skipped or self.overrides)


def _show_entry(entry: ScrubDecision):
    console.print("[cyan]" + "─" * 50 + "[/cyan]")
    console.print(f"[bold]Key:[/bold] {escape(entry.key)}")

    if entry.was_scrubbed:
        console.print(f"[dim]Original:[/dim] [red]{escape(entry.original_value or '(empty)')}[/red]")
        console.print(f"[yellow]Scrubbed: {escape(entry.result_value)}[/yellow]")
        console.print(f"[dim]Reason:[/dim] [yellow]{escape(entry.reason)}[/yellow]")
    else:
        console.print(f"[dim]Value:[/dim] [green]{escape(entry.result_value)}[/green]")
        console.print(f"[dim]Reason:[/dim] [green]{escape(entry.reason)}[/green]")


def interactive_sync(
    entries: List[ScrubDecision],
    prompt: Callable[..., str] = click.prompt
) -> InteractiveResult:
    """
    Ask the user to approve each decision.

    Answers: Y/enter accepts, n skips the key, c asks for a custom value,
    q cancels the whole sync.

    Args:
        entries: Decisions from the generator, in output order
        prompt: Prompt function with click.prompt's signature

    Returns:
        InteractiveResult; `cancelled` is True when the user quit
    """
    result = InteractiveResult()

    console.print()
    console.print("[bold cyan]Interactive Sync Mode[/bold cyan]")
    console.print("[dim]For each entry, you can:[/dim]")
    console.print("[dim]  \\[Y/enter] Accept  \\[n] Skip  \\[c] Custom value  \\[q] Quit[/dim]")
    console.print()

    for entry in entries:
        _show_entry(entry)

        answer = prompt("? [Y/n/c/q]", default="", show_default=False).strip().lower()

        if answer in QUIT:
            console.print("[yellow]Sync cancelled[/yellow]")
            result.cancelled = True
            break

        if answer in SKIP:
            result.skipped.append(entry.key)
            console.print(f"[dim]  Skipped {escape(entry.key)}[/dim]")
            continue

        if answer in CUSTOM:
            custom_value = prompt("  Enter custom value", default="", show_default=False)
            result.overrides[entry.key] = custom_value
            result.entries.append(replace(entry, result_value=custom_value))
            console.print("[green]  ✓ Using custom value[/green]")
            continue

        if answer not in ACCEPT:
            console.print(f"[dim]  Unrecognized answer {escape(answer)}, accepting[/dim]")

        result.entries.append(entry)
        console.print("[green]  ✓ Accepted[/green]")

    return result
