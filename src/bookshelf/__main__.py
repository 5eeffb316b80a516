"""Main entry point for the bookshelf package."""

from bookshelf.cli import app


def main():
    """Run the bookshelf command-line interface."""
    app()


if __name__ == "__main__":
    main()
