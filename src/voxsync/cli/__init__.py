"""Command line interface for voxsync."""
