"""Command-line interface for sql_interrogator."""
