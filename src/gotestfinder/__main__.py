"""Allow ``python -m gotestfinder``."""

from gotestfinder.cli import cli

if __name__ == "__main__":
    cli()
