"""
errors.py - Fatal Startup Errors

Raised before traversal begins; planning conflicts and execution
failures are reported as data, not exceptions.
"""


class FnrError(Exception):
    """Base class for fatal errors"""


class InvalidPattern(FnrError, ValueError):
    """Empty pattern, empty glob, or bad capture-group reference"""


class InvalidRegex(InvalidPattern):
    """Regex pattern failed to compile"""


class BaseDirError(FnrError):
    """Base directory is missing or unreadable"""
