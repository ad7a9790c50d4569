"""Command-line interface for pizzamock."""
