"""Entry point for running scripts: python -m stationery.scripts"""

from stationery.scripts.cli import cli

if __name__ == "__main__":
    cli()
