"""Command-line interface for Gemini Harness."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from gemini_harness import __version__
from gemini_harness.chat import ChatSession, chunk_text
from gemini_harness.client import Client
from gemini_harness.config import load_config
from gemini_harness.errors import GeminiHarnessError
from gemini_harness.types import TextPart

console = Console()


def _make_client(ctx: click.Context) -> Client:
    config, config_file = load_config(ctx.obj["config_path"])
    if config_file:
        console.print(f"[dim]Config: {config_file}[/dim]")
    return Client(config=config, model=ctx.obj["model"])


def _print_chunk(record: dict) -> None:
    console.print(chunk_text(record), end="", markup=False, highlight=False)


@click.group()
@click.option("--config", "-c", "config_path", default=None,
              help="Path to gemini_harness.yaml (auto-detected from CWD or ~/.gemini_harness/)")
@click.option("--model", "-m", default=None, help="Model name (overrides config)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@click.version_option(__version__, prog_name="gemini-harness")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, model: str | None, verbose: bool):
    """Gemini Harness - talk to the Gemini API from the terminal."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["model"] = model


@main.command()
@click.argument("prompt")
@click.option("--stream", "-s", is_flag=True, help="Print the reply as it arrives")
@click.pass_context
def generate(ctx: click.Context, prompt: str, stream: bool):
    """Generate a single reply to PROMPT."""
    try:
        with _make_client(ctx) as client:
            if stream:
                client.generate_content_stream(prompt, on_chunk=_print_chunk)
                console.print()
            else:
                response = client.generate_content(prompt)
                text = chunk_text(response)
                console.print(Markdown(text) if text else "[dim](empty response)[/dim]")
    except GeminiHarnessError as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        ctx.exit(1)


@main.command()
@click.argument("prompt")
@click.option("--output", "-o", "output", required=True, type=click.Path(dir_okay=False),
              help="Where to write the image")
@click.option("--aspect-ratio", default=None, help="e.g. 16:9")
@click.option("--image-size", default=None, help="1K, 2K or 4K")
@click.pass_context
def image(ctx: click.Context, prompt: str, output: str,
          aspect_ratio: str | None, image_size: str | None):
    """Generate an image from PROMPT and save it to --output."""
    try:
        with _make_client(ctx) as client:
            resp = client.generate_image(
                prompt, aspect_ratio=aspect_ratio, image_size=image_size,
            )
            if not resp.success:
                console.print(
                    f"[red]Generation failed: {resp.failure_reason}[/red]"
                    f" {resp.failure_message or ''}"
                )
                ctx.exit(1)
            resp.save(output)
    except GeminiHarnessError as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        ctx.exit(1)
    if resp.text:
        console.print(resp.text)
    console.print(f"[green]Saved {resp.mime_type or 'image'} to {output}[/green]")


def _show_history(chat: ChatSession) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Role")
    table.add_column("Text")
    for i, turn in enumerate(chat.history):
        text = turn.text
        if not any(isinstance(p, TextPart) for p in turn.parts):
            text = f"[dim]({len(turn.parts)} non-text parts)[/dim]"
        table.add_row(str(i), turn.role, text[:120])
    console.print(table)


def handle_line(line: str, chat: ChatSession) -> bool:
    """Process one REPL line.  Returns False when the user asked to quit."""
    command = line.strip().lower()
    if command in ("/quit", "/exit", "/q"):
        return False
    if command == "/history":
        _show_history(chat)
        return True
    if command == "/help":
        console.print("""[bold]Commands:[/bold]
  /history  - Show the conversation so far
  /quit     - Exit""")
        return True

    start = time.monotonic()
    try:
        chat.send_message_stream(line, on_chunk=_print_chunk)
    except GeminiHarnessError as e:
        console.print(f"\n[red]{type(e).__name__}: {e}[/red]")
        return True
    console.print(f"\n[dim]({time.monotonic() - start:.1f}s)[/dim]\n")
    return True


@main.command()
@click.pass_context
def chat(ctx: click.Context):
    """Interactive multi-turn chat (replies are streamed)."""
    try:
        client = _make_client(ctx)
    except GeminiHarnessError as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        ctx.exit(1)
    session_chat = client.start_chat()
    console.print(
        f"[dim]Model: {session_chat.model}. Type /help for commands.[/dim]\n"
    )

    history_path = Path("~/.gemini_harness/history").expanduser()
    history_path.parent.mkdir(parents=True, exist_ok=True)
    prompt_session: PromptSession = PromptSession(history=FileHistory(str(history_path)))
    try:
        while True:
            try:
                user_input = prompt_session.prompt("> ").strip()
            except (EOFError, KeyboardInterrupt):
                break
            if not user_input:
                continue
            if not handle_line(user_input, session_chat):
                break
    finally:
        client.close()
    console.print("[dim]Goodbye![/dim]")


if __name__ == "__main__":
    main()
