"""Main entry point for the full feed package."""

from full_feed.cli import cli

if __name__ == "__main__":
    cli()
