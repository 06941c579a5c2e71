"""Remote services used by cloudnotes."""
