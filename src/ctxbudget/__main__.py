"""Allow ``python -m ctxbudget``."""

from ctxbudget import cli

if __name__ == "__main__":
    cli.app()
