import pytest
import typer
from rich.console import Console

from helm_builder.console import CLIConsole, with_error_handling
from helm_builder.errors import CommandError, ConfigurationError
from tests.helpers import failed


def test_with_error_handling_handles_builder_error():
    @with_error_handling
    def _command() -> None:
        raise ConfigurationError("Boom", details="extra")

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 1


def test_with_error_handling_handles_command_error():
    @with_error_handling
    def _command() -> None:
        raise CommandError("cluster binding", failed("[red]not markup[/red]"))

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 1


def test_with_error_handling_handles_keyboard_interrupt():
    @with_error_handling
    def _command() -> None:
        raise KeyboardInterrupt

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 130


def test_with_error_handling_lets_unexpected_errors_through():
    @with_error_handling
    def _command() -> None:
        raise ValueError("bug")

    with pytest.raises(ValueError):
        _command()


def test_status_lines_carry_their_prefix():
    output = Console(record=True, width=120, force_terminal=False)
    cli_console = CLIConsole(output)

    cli_console.info("Running action lint")
    cli_console.warn("Chart name differs")

    text = output.export_text()
    assert "ℹ  Running action lint" in text
    assert "⚠️  Chart name differs" in text


def test_handle_error_prints_details_verbatim():
    output = Console(record=True, width=120, force_terminal=False)
    cli_console = CLIConsole(output)

    with pytest.raises(typer.Exit):
        cli_console.handle_error("push failed", details="[bucket] not found")

    text = output.export_text()
    assert "push failed" in text
    assert "[bucket] not found" in text
