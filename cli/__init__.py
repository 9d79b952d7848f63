"""Typer CLI for running and querying the Tasmota exporter; see ``cli.app``."""
