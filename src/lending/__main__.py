"""Main entry point for the lending package."""

from lending.cli import main


if __name__ == "__main__":
    main()
