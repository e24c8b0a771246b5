"""Error types raised while resolving a file's dependencies.

Every error is terminal: it is raised where the problem is first seen and
propagates unchanged to the CLI, which prints it and exits non-zero.
"""


class DepCriteriaError(Exception):
    """Base class for all depcriteria failures."""


class ConfigLoadFailure(DepCriteriaError):
    """The alias configuration (tsconfig/jsconfig) is missing or invalid."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Error loading TS config file: {path} ({reason})")


class MissingArgument(DepCriteriaError):
    """A required input (source file, repository root) was not supplied."""


class ParseFailure(DepCriteriaError):
    """The source file could not be turned into a syntax tree."""

    def __init__(self, file_path: str, reason: str):
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Unable to parse {file_path}: {reason}")


class UnresolvedImport(DepCriteriaError):
    """No file exists for a specifier after both resolution phases."""

    def __init__(self, specifier: str):
        self.specifier = specifier
        super().__init__(f"Unable to resolve import id: {specifier}")


class OutOfRepository(DepCriteriaError):
    """A resolved path lies outside the repository root."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Resolved path is outside the repository: {path}")


class UnhandledPathShape(DepCriteriaError):
    """A resolved path sits under a known prefix but has no usable shape."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Cannot derive a package from resolved path: {path}")
