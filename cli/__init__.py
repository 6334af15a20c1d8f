"""Subcommand parsers for the dbpost CLI."""
