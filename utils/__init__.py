"""Helpers shared by the API and the CLI: input validation and CLI output."""
