from __future__ import annotations

import typer

from generative_ai.interfaces.commands.generate import generate_command
from generative_ai.interfaces.commands.models import models_command

app = typer.Typer(help="Call the Generative Language API from the command line.")
app.command("generate")(generate_command)
app.command("models")(models_command)


def main() -> None:
    """Entrypoint for the CLI application."""
    app()


if __name__ == "__main__":
    main()
