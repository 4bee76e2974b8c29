"""
Entry point for running delugerpc as a module: python -m delugerpc
"""

from delugerpc.cli.commands import app

if __name__ == "__main__":
    app()
