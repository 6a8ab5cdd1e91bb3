"""Entry point that runs the packaged Relay CLI from a source checkout."""

from relay.cli import app, main

__all__ = ["app", "main"]

if __name__ == "__main__":
    main()
