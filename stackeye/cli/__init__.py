"""Command-line interface for StackEye."""
