"""Shared library code for ffstack: errors, logging and terminal UI."""
