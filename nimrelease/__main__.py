"""Entry point for ``python -m nimrelease``."""

from nimrelease.cli.app import main

if __name__ == "__main__":
    main()
