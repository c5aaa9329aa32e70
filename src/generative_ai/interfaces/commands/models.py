from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from generative_ai.client import GoogleGenerativeAI
from generative_ai.errors import GenerativeAIError

console = Console()
err_console = Console(stderr=True)


def _client() -> GoogleGenerativeAI:
    return GoogleGenerativeAI()


def models_command(
    page_size: int | None = typer.Option(None, min=1, help="Maximum number of models to return."),
    page_token: str | None = typer.Option(None, help="Token of the page to fetch."),
) -> None:
    """List the models available to the configured API key."""
    try:
        with _client() as client:
            response = client.list_models(page_size=page_size, page_token=page_token)
    except GenerativeAIError as exc:
        err_console.print(f"[red]error:[/] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=1) from exc

    table = Table(title="Models")
    table.add_column("Name", overflow="fold")
    table.add_column("Display name")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    for model in response.models:
        table.add_row(model.name, model.display_name, str(model.input_token_limit), str(model.output_token_limit))
    console.print(table)
    if response.next_page_token:
        console.print(f"Next page token: {response.next_page_token}", markup=False, highlight=False)
