"""Application shell: command-line entry point."""
