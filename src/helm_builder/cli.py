"""Command-line entry point.

Examples:
    helm-builder run
    helm-builder run --env-file build.env --debug
    helm-builder config
"""

from pathlib import Path
from typing import Annotated

import typer

from .config import load_config
from .console import console, with_error_handling
from .log import configure_logging
from .plugin import execute

app = typer.Typer(
    help="⎈ Helm chart build step: package, publish and deploy charts",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

EnvFileOption = Annotated[
    Path | None,
    typer.Option(
        "--env-file",
        help="Dotenv file to load before reading the environment",
        dir_okay=False,
    ),
]


@app.command()
@with_error_handling
def run(
    env_file: EnvFileOption = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show tool output and trace each command"),
    ] = False,
) -> None:
    """Run the configured actions.

    Settings come from PLUGIN_<KEY> or <KEY> environment variables; see
    [bold]helm-builder config[/bold] for the resolved values.
    """
    configure_logging(debug)
    config = load_config(env_file=env_file)
    if debug and not config.debug:
        config = config.model_copy(update={"debug": True})
    configure_logging(config.debug)

    console.print_header("Helm Builder")
    execute(config, console)
    console.ok("All actions completed")


@app.command("config")
@with_error_handling
def show_config(env_file: EnvFileOption = None) -> None:
    """Print the resolved configuration without running anything."""
    config = load_config(env_file=env_file)
    console.print_settings(config.display_items(), title="Resolved configuration")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
