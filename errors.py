"""
Error kinds raised while building the content graph.

Filesystem failures are not wrapped: they surface as the OSError raised by
os/pathlib and abort the build the same way these do.
"""


class SsgError(Exception):
    """Base class for every non-I/O build failure."""


class PathError(SsgError):
    """A file cannot be expressed relative to the directory being visited."""


class DirectiveParseError(SsgError):
    """A numeric ssg- directive does not hold an integer."""

    def __init__(self, key: str, value: str):
        super().__init__(f"ssg-{key}: expected integer epoch seconds, got {value!r}")
        self.key = key
        self.value = value


class DocumentEncodingError(SsgError):
    """A markdown document is not valid UTF-8."""


class DepthLimitError(SsgError):
    """The source tree is nested deeper than the configured limit."""
