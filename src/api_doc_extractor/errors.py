"""Exceptions raised by api-doc-extractor.

Only fact-sheet loading and the final document write are fatal. Everything
in between logs and degrades instead of raising.
"""


class ExtractorError(Exception):
    """Base class for fatal extraction errors."""


class FactsError(ExtractorError):
    """The fact sheet or one of its source files could not be read."""


class OutputError(ExtractorError):
    """The generated document could not be written."""
