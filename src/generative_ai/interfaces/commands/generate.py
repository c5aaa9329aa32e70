from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from generative_ai.client import GoogleGenerativeAI
from generative_ai.errors import GenerativeAIError
from generative_ai.interfaces.commands.common import build_contents
from generative_ai.media.files import read_media_file
from generative_ai.parts import Part, TextPart

console = Console()
err_console = Console(stderr=True)

MEDIA_OPTION: list[Path] | None = typer.Option(
    None,
    "--media",
    exists=True,
    readable=True,
    dir_okay=False,
    help="File to attach as inline data. Can be given several times.",
    show_default=False,
)
HISTORY_OPTION: list[str] | None = typer.Option(
    None,
    "--history",
    help="Earlier turn in 'role:text' form. Can be given several times.",
    show_default=False,
)


def _client() -> GoogleGenerativeAI:
    return GoogleGenerativeAI()


def generate_command(
    prompt: str,
    model: str | None = typer.Option(None, help="Model to call instead of GEMINI_MODEL."),
    system: str | None = typer.Option(None, help="System instruction for the model."),
    media: list[Path] | None = MEDIA_OPTION,
    history: list[str] | None = HISTORY_OPTION,
    stream: bool = typer.Option(False, "--stream", help="Print the response while it is generated."),
    strict: bool = typer.Option(False, "--strict", help="Abort the stream on the first undecodable event."),
) -> None:
    """Generate a response for PROMPT."""
    parts: list[Part] = [TextPart(text=prompt)]
    try:
        parts.extend(read_media_file(path) for path in media or [])
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--media") from exc
    contents = build_contents(parts, history or [])

    try:
        with _client() as client:
            generative_model = client.get_generative_model(model, system_instruction=system)
            if stream:
                reader = generative_model.generate_content_stream(contents, strict=strict)
                for event in reader:
                    console.print(event.text, end="", markup=False, highlight=False, soft_wrap=True)
                console.print()
                for error in reader.errors:
                    err_console.print(f"[yellow]skipped event:[/] {escape(str(error))}", highlight=False)
            else:
                with console.status(f"Generating with {generative_model.model_name}...", spinner="dots"):
                    response = generative_model.generate_content(contents)
                console.print(response.text, markup=False, highlight=False, soft_wrap=True)
    except GenerativeAIError as exc:
        err_console.print(f"[red]error:[/] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=1) from exc
