"""Price tracker entry point: ``python -m pricetracker``."""

from .cli import cli

if __name__ == "__main__":
    cli()
