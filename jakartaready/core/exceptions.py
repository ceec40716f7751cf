"""Typed error hierarchy for jakartaready.

Analysis operations fail fast with these; the runtime verifier reports
operational failures as result statuses instead.
"""


class JakartaReadyError(Exception):
    """Base exception for all jakartaready errors."""


class InputNotFoundError(JakartaReadyError, FileNotFoundError):
    """Raised when no recognized build file, artifact or resource exists."""


class ParseFailureError(JakartaReadyError, ValueError):
    """Raised when a build file cannot be parsed.

    The underlying cause is chained via ``raise ... from``. Graph
    construction is all-or-nothing, so this aborts the whole analysis.
    """


class MappingTableError(ParseFailureError):
    """Raised when the javax -> jakarta mapping resource is malformed."""
