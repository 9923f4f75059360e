"""``stackeye`` command-line entry point."""

from __future__ import annotations

try:
    import typer
except ImportError:
    import sys

    print("The stackeye command needs the CLI extras: pip install 'stackeye[cli]'")
    sys.exit(1)

from .commands import auth

app = typer.Typer(
    name="stackeye",
    help="Log in to StackEye from the terminal and manage saved contexts.",
    no_args_is_help=True,
)
app.add_typer(auth.app, name="auth")


@app.command()
def version() -> None:
    """Print the installed stackeye version."""
    from stackeye import __version__

    typer.echo(f"stackeye {__version__}")


if __name__ == "__main__":
    app()
