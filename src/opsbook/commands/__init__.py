"""Command groups for the opsbook CLI."""
