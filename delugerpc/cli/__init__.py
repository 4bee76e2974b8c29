"""Command line interface for delugerpc."""
