"""Command-line interface for the spam filter."""
