"""Entry point for 'python -m vidtube' command."""

from vidtube.cli import main

if __name__ == "__main__":
    main()
