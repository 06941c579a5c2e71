"""Utility modules for the cloudnotes CLI."""
