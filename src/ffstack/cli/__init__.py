"""Command line interface for ffstack."""
