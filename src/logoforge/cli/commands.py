"""
Click command definitions for the logoforge CLI.

This module contains the Click command group and all CLI commands
(options, generate, chat).
"""

import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from logoforge import (
    ChatMessage,
    Config,
    ConfigStore,
    Decoration,
    Element,
    Font,
    GenerationSession,
    LogoforgeError,
    LogoStyle,
    ProviderCollaborator,
    ValidationError,
    __version__,
    process_reference_image,
    quick_edits,
)
from logoforge.cli import progress
from logoforge.cli.handlers import report_error, run_with_error_handling
from logoforge.cli.utils import EXIT_API_OR_NETWORK, default_output_path
from logoforge.core.providers import KNOWN_IMAGE_PROVIDERS
from logoforge.core.prompts_loader import get_prompts
from logoforge.logging_config import configure_logging, get_verbosity_from_env


def _choice_values(enum_cls: Any) -> list[str]:
    return [member.value.lower().replace("_", "-") for member in enum_cls]


def _logo_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by generate and chat: logo choices, provider and output."""
    decorators = [
        click.option("--name", "-n", required=True, help="Server name rendered on the logo."),
        click.option(
            "--element",
            "-e",
            default="fire",
            show_default=True,
            help=f"Element: {', '.join(_choice_values(Element))}.",
        ),
        click.option(
            "--font",
            "-f",
            default="gothic",
            show_default=True,
            help=f"Font: {', '.join(_choice_values(Font))}.",
        ),
        click.option(
            "--style",
            "-s",
            default="epic-medieval",
            show_default=True,
            help=f"Style: {', '.join(_choice_values(LogoStyle))}.",
        ),
        click.option(
            "--decoration",
            "-d",
            default="sword",
            show_default=True,
            help=f"Decoration: {', '.join(_choice_values(Decoration))}.",
        ),
        click.option("--out", "-o", type=click.Path(path_type=Path), help="Output file path."),
        click.option(
            "--provider",
            type=click.Choice(list(KNOWN_IMAGE_PROVIDERS), case_sensitive=False),
            default=None,
            help="Image provider (default from config: gemini or openrouter).",
        ),
        click.option("--model", "-m", help="Image model ID (default from config)."),
        click.option(
            "--api-key",
            help="API key for the chosen provider (overrides the environment).",
        ),
        click.option(
            "--language",
            help="Language for the model's confirmation messages (default from config).",
        ),
        click.option(
            "--quiet",
            "-q",
            is_flag=True,
            help="Minimize progress messages; only print result path or errors.",
        ),
        click.option(
            "--verbose",
            "-v",
            "verbose_count",
            count=True,
            help="Increase verbosity: -v also show prompts, -vv show API detail.",
        ),
        click.option(
            "--debug-api",
            is_flag=True,
            help="Log raw API request payload and response (image data truncated).",
        ),
    ]
    for decorator in reversed(decorators):
        fn = decorator(fn)
    return fn


def _apply_verbosity(verbose_count: int, quiet: bool) -> None:
    # CLI flags override LOGOFORGE_VERBOSITY
    verbose_level = min(verbose_count, 2) if verbose_count > 0 else get_verbosity_from_env()
    configure_logging(verbose_level=verbose_level, quiet=quiet)


def _build_session(
    *,
    name: str,
    element: str,
    font: str,
    style: str,
    decoration: str,
    provider: str | None,
    model: str | None,
    api_key: str | None,
    language: str | None,
    debug_api: bool,
) -> tuple[Config, GenerationSession]:
    config = Config.from_env()
    if provider:
        config.default_image_provider = provider.lower()
    if api_key:
        config.set_api_key(api_key)
    if model:
        config.set_image_model(model)
    if language:
        config.language = language
    if debug_api:
        config.debug_api = True
    config.validate()

    store = ConfigStore()
    store.update(
        server_name=name,
        element=element,
        font=font,
        style=style,
        decoration=decoration,
    )
    session = GenerationSession(
        ProviderCollaborator(config=config),
        store,
        language=config.language,
    )
    return config, session


def _save(session: GenerationSession, out: Path | None) -> Path:
    image = session.current_image
    if image is None:
        raise ValidationError("Nothing to save yet: forge a logo first.", field="image")
    config = session.active_config or session.store.snapshot()
    out_path = out or Path(default_output_path(config.server_name, image.extension))
    out_path.write_bytes(image.data)
    return out_path


def _forge(session: GenerationSession, quiet: bool) -> None:
    model = session.collaborator.model
    if quiet:
        message = session.submit_generate()
    else:
        with progress.forge_progress("Forging logo", model=model):
            message = session.submit_generate()
    if message is not None and not quiet:
        progress.print_chat_message(message)


def _refine(session: GenerationSession, instruction: str, quiet: bool) -> bool:
    """Send one edit; returns False when the edit failed."""
    model = session.collaborator.model
    with_reference = session.staged_reference is not None
    if quiet:
        reply = session.submit_edit(instruction)
    else:
        if instruction.strip() or with_reference:
            progress.print_chat_message(_pending_user_message(instruction, with_reference))
        with progress.forge_progress("Refining logo", model=model, with_reference=with_reference):
            reply = session.submit_edit(instruction)
    if reply is None:
        return True
    failed = session.last_error is not None
    if failed:
        report_error(reply.text, quiet)
        if session.needs_credentials:
            progress.print_warning("Reconnect your API key and try again.")
    elif not quiet:
        progress.print_chat_message(reply)
    return not failed


def _pending_user_message(instruction: str, with_reference: bool) -> ChatMessage:
    # Mirrors the text the session records for the user turn
    marker = get_prompts().messages.reference_attached if with_reference else ""
    return ChatMessage(role="user", text=(instruction + marker).strip())


@click.group()
@click.version_option(version=__version__, package_name="logoforge")
def cli() -> None:
    """Forge 3D game-server logos and refine them through conversation."""
    pass


@cli.command()
def options() -> None:
    """List the elements, fonts, styles, decorations and quick edits."""
    run_with_error_handling(progress.print_options)


@cli.command()
@_logo_options
@click.option(
    "--edit",
    "edits",
    multiple=True,
    help="Edit instruction applied after generation (repeatable, applied in order).",
)
@click.option(
    "--reference",
    "-r",
    type=click.Path(exists=True, path_type=Path),
    help="Reference image attached to the first edit.",
)
def generate(
    name: str,
    element: str,
    font: str,
    style: str,
    decoration: str,
    out: Path | None,
    provider: str | None,
    model: str | None,
    api_key: str | None,
    language: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
    edits: tuple[str, ...],
    reference: Path | None,
) -> None:
    """Generate a logo, apply any --edit instructions, and save the result."""
    _apply_verbosity(verbose_count, quiet)

    def do_generate() -> None:
        config, session = _build_session(
            name=name,
            element=element,
            font=font,
            style=style,
            decoration=decoration,
            provider=provider,
            model=model,
            api_key=api_key,
            language=language,
            debug_api=debug_api,
        )
        reference_image = (
            process_reference_image(reference, config=config) if reference is not None else None
        )

        start = time.time()
        _forge(session, quiet)

        instructions = list(edits)
        if reference_image is not None and not instructions:
            instructions = [""]
        applied = 0
        ok = True
        for i, instruction in enumerate(instructions):
            if i == 0 and reference_image is not None:
                session.stage_reference(reference_image)
            if not _refine(session, instruction, quiet):
                ok = False
                break
            applied += 1

        out_path = _save(session, out)
        if not quiet:
            progress.print_logo_result(
                output_path=out_path,
                config=session.active_config or session.store.snapshot(),
                model_used=session.collaborator.model,
                generation_time=time.time() - start,
                edits_applied=applied,
            )
        # Path on stdout for scriptability
        click.echo(str(out_path))
        if not ok:
            raise SystemExit(EXIT_API_OR_NETWORK)

    run_with_error_handling(do_generate, quiet=quiet, debug=debug_api)


_CHAT_HELP = """Commands:
  /ref PATH     stage a reference image for the next edit
  /unref        drop the staged reference
  /suggest N    send quick edit N (see `logoforge options`)
  /history      show the conversation
  /save [PATH]  save the current logo
  /key          enter a new API key
  /help         show this help
  /quit         leave (the logo is saved first)
Anything else is sent as an edit instruction."""


def _chat_command(
    session: GenerationSession, config: Config, out: Path | None, line: str
) -> bool:
    """Run one chat line; returns True when the user asked to leave."""
    suggestions = quick_edits()
    command, _, arg = line.strip().partition(" ")
    arg = arg.strip()
    if command == "/quit":
        out_path = _save(session, out)
        progress.print_success(f"Saved to {out_path}")
        click.echo(str(out_path))
        return True
    if command == "/help":
        progress.console.print(f"[dim]{_CHAT_HELP}[/dim]")
    elif command == "/history":
        progress.print_history(session.history)
    elif command == "/save":
        out_path = _save(session, Path(arg) if arg else out)
        progress.print_success(f"Saved to {out_path}")
    elif command == "/ref":
        if not arg:
            progress.print_warning("Usage: /ref PATH")
        else:
            session.stage_reference(process_reference_image(Path(arg), config=config))
            progress.print_info("Reference staged for the next edit.")
    elif command == "/unref":
        session.clear_reference()
        progress.print_info("Reference dropped.")
    elif command == "/suggest":
        if not arg.isdigit() or not 1 <= int(arg) <= len(suggestions):
            progress.print_warning(f"Usage: /suggest N (1-{len(suggestions)})")
        else:
            _refine(session, suggestions[int(arg) - 1].instruction, quiet=False)
    elif command == "/key":
        key = click.prompt("API key", hide_input=True, err=True)
        config.set_api_key(key)
        session.needs_credentials = False
        progress.print_success("API key updated.")
    elif command.startswith("/"):
        progress.print_warning(f"Unknown command: {command}. Type /help.")
    else:
        _refine(session, line, quiet=False)
    return False


def _chat_loop(session: GenerationSession, config: Config, out: Path | None) -> None:
    progress.console.print(f"[dim]{_CHAT_HELP}[/dim]")
    while True:
        try:
            line = click.prompt("", prompt_suffix="› ", default="", show_default=False, err=True)
        except click.Abort:
            line = "/quit"
        try:
            if _chat_command(session, config, out, line):
                return
        except (LogoforgeError, OSError) as e:
            # Bad reference paths and rejected keys should not end the chat
            progress.print_error(str(e))


@cli.command()
@_logo_options
def chat(
    name: str,
    element: str,
    font: str,
    style: str,
    decoration: str,
    out: Path | None,
    provider: str | None,
    model: str | None,
    api_key: str | None,
    language: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Generate a logo, then refine it interactively."""
    _apply_verbosity(verbose_count, quiet)

    def do_chat() -> None:
        config, session = _build_session(
            name=name,
            element=element,
            font=font,
            style=style,
            decoration=decoration,
            provider=provider,
            model=model,
            api_key=api_key,
            language=language,
            debug_api=debug_api,
        )
        _forge(session, quiet=False)
        _chat_loop(session, config, out)

    run_with_error_handling(do_chat, quiet=quiet, debug=debug_api)


def main() -> None:
    """Entry point for the logoforge console script."""
    cli()


__all__ = ["cli", "main"]
