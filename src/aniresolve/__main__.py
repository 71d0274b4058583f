"""Allow ``python -m aniresolve``."""

from aniresolve.cli.typer_app import app

if __name__ == "__main__":
    app(prog_name="aniresolve")
