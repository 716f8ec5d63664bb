"""Main entry point for the quietly package."""

from quietly.cli import main


if __name__ == "__main__":
    main()
