"""Entry-point for `python -m lessonshop`."""

from lessonshop.cli import cli

if __name__ == "__main__":
    cli()
