"""A small interactive shell with pipelines, redirections, heredocs, variable expansion and builtins."""

__version__ = "0.1.0"