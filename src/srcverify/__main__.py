"""Allow ``python -m srcverify``."""

from srcverify.cli import cli

if __name__ == "__main__":
    cli()
