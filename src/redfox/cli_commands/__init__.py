"""CLI command modules; importing them registers commands on the shared app."""
