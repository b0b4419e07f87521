"""
autocommit - AI-written commit messages, tickets and pull request descriptions.

Analyzes staged git changes (or recent commits), builds a bounded and
redacted evidence digest, asks a text backend for the artifact and checks
that commit messages follow the ``CATEGORY:[TICKET] summary`` shape.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
