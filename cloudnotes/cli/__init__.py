"""Command line interface for cloudnotes."""
