"""Entry point for `python -m scriptpack`."""

from scriptpack.cli.commands import app

if __name__ == "__main__":
    app()
