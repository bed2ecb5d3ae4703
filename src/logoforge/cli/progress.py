"""
Rich output for CLI operations.

Spinners while the forge works, result panels, the chat transcript and the
option catalog. All output goes to stderr to keep stdout for machine-readable
output (the saved file path).
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from logoforge import ChatMessage, Decoration, Element, Font, GenerationConfig, LogoStyle
from logoforge.core.catalog import option_for, options, quick_edits

# Console for stderr output (preserves stdout for machine output)
console = Console(stderr=True)


@contextmanager
def forge_progress(
    action: str,
    model: str | None = None,
    with_reference: bool = False,
) -> Iterator[None]:
    """
    Display a spinner while a generate or edit request is in flight.

    Args:
        action: Short description, e.g. "Forging logo" or "Refining logo"
        model: The image model being used
        with_reference: Whether a reference image is attached
    """
    progress = Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("[yellow]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    desc_parts = [action]
    if model:
        model_display = model if len(model) <= 40 else f"{model[:37]}..."
        desc_parts.append(f"[dim]({model_display})[/dim]")
    if with_reference:
        desc_parts.append("• [dim cyan]with reference[/dim cyan]")

    with progress:
        task = progress.add_task(" ".join(desc_parts), total=None)
        yield
        progress.update(task, completed=True)


def _choice_text(choice: Element | Font | LogoStyle | Decoration) -> str:
    option = option_for(choice)
    return f"{option.icon} {option.label}".strip()


def print_logo_result(
    output_path: Path,
    config: GenerationConfig,
    model_used: str,
    generation_time: float,
    edits_applied: int = 0,
) -> None:
    """Print a panel describing the saved logo."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")

    table.add_row("Saved to", f"[bold green]{output_path}[/bold green]")
    table.add_row("Server", f"[bold]{config.server_name.upper()}[/bold]")
    table.add_row("Element", _choice_text(config.element))
    table.add_row("Font", _choice_text(config.font))
    table.add_row("Style", _choice_text(config.style))
    table.add_row("Decoration", _choice_text(config.decoration))
    table.add_row("Model", model_used)
    table.add_row("Time", f"{generation_time:.1f}s")
    if edits_applied:
        table.add_row("Edits", str(edits_applied))

    panel = Panel(
        table,
        title="[bold yellow]⚔ Logo Forged[/bold yellow]",
        border_style="yellow",
        padding=(1, 2),
    )
    console.print()
    console.print(panel)


def print_chat_message(message: ChatMessage) -> None:
    """Print one chat message; user lines in amber, assistant lines plain."""
    stamp = datetime.fromtimestamp(message.timestamp).strftime("%H:%M:%S")
    if message.role == "user":
        console.print(f"[dim]{stamp}[/dim] [bold yellow]you[/bold yellow]  {message.text}")
    else:
        console.print(f"[dim]{stamp}[/dim] [bold cyan]forge[/bold cyan] {message.text}")


def print_history(messages: Iterable[ChatMessage]) -> None:
    """Print the whole conversation."""
    messages = list(messages)
    if not messages:
        print_info("No messages yet.")
        return
    for message in messages:
        print_chat_message(message)


def print_options() -> None:
    """Print every catalog category and the quick-edit suggestions."""
    for title, enum_cls in (
        ("Elements", Element),
        ("Fonts", Font),
        ("Styles", LogoStyle),
        ("Decorations", Decoration),
    ):
        table = Table(title=title, title_justify="left", show_lines=False)
        table.add_column("Value", style="cyan", no_wrap=True)
        table.add_column("Label", style="bold")
        table.add_column("Prompt fragment", style="dim")
        for option in options(enum_cls):
            table.add_row(
                option.choice.value.lower().replace("_", "-"),
                f"{option.icon} {option.label}".strip(),
                option.fragment,
            )
        console.print(table)

    table = Table(title="Quick edits", title_justify="left")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Label", style="bold")
    table.add_column("Instruction", style="dim")
    for i, suggestion in enumerate(quick_edits(), start=1):
        table.add_row(str(i), suggestion.label, suggestion.instruction)
    console.print(table)


def print_info(message: str) -> None:
    """Print an info message in cyan."""
    console.print(f"[cyan]ℹ[/cyan] {message}")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]✗[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]✓[/green] {message}")
