"""Command-line interface for teaplan."""
