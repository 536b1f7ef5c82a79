"""Command line interface for the swing screener."""
