"""Scanner error types.

Fatal errors abort the scan of one file and always carry the offending path.
Unresolvable expressions (dynamic keys, dynamic scopes) are not errors: they
are dropped by the resolver and never surface here.
"""
from typing import List, Optional


class ScanError(Exception):
    """Base class for fatal, per-file scan errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class SourceSyntaxError(ScanError, SyntaxError):
    """The file does not parse as Ruby."""

    def __init__(self, message: str, path: Optional[str] = None, line: Optional[int] = None):
        ScanError.__init__(self, message, path)
        self.line = line
        # SyntaxError attributes, so tracebacks and tooling can point at the file
        self.filename = path
        self.lineno = line
        self.msg = message

    def __str__(self) -> str:
        location = self.path or "<source>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"


class CyclicCallError(ScanError, ValueError):
    """An intra-class call graph contains a cycle."""

    def __init__(self, methods: List[str], path: Optional[str] = None):
        self.methods = list(methods)
        super().__init__(f"Cyclic call detected: {' -> '.join(self.methods)}", path)


class ConfigError(ValueError):
    """Invalid scanner configuration value."""

    @classmethod
    def invalid_value(cls, field: str, value: object, reason: str) -> "ConfigError":
        return cls(f"Invalid value for '{field}': {value!r} ({reason})")
