"""depcriteria - resolve a JS/TS file's imports into build dependency criteria.

Pipeline:
    - specifiers: extract distinct import specifiers with tree-sitter
    - resolver: tsconfig path aliases first, node-style resolution second
    - criteria: classify resolved paths as third-party packages or first-party files

Example:
    >>> from depcriteria import resolve_dependencies
    >>> resolve_dependencies("src/app.ts", repo_root="/my/repo")
    [{'type': 'package', 'importId': 'react', ...}]
"""

__version__ = "0.1.0"

from .config import Settings, load_alias_rules
from .criteria import (
    CriteriaClassifier,
    FileCriteria,
    LookupCall,
    PackageCriteria,
    PackageLookup,
    RepoLayout,
)
from .errors import (
    ConfigLoadFailure,
    DepCriteriaError,
    MissingArgument,
    OutOfRepository,
    ParseFailure,
    UnhandledPathShape,
    UnresolvedImport,
)
from .pipeline import DependencyCriteriaResolver, resolve_dependencies
from .resolver import AliasConfig, AliasRules, PathResolver
from .specifiers import extract_file_specifiers, extract_specifiers

__all__ = [
    "__version__",
    # Configuration
    "Settings",
    "load_alias_rules",
    # Resolution
    "AliasConfig",
    "AliasRules",
    "PathResolver",
    "extract_specifiers",
    "extract_file_specifiers",
    # Classification
    "CriteriaClassifier",
    "FileCriteria",
    "LookupCall",
    "PackageCriteria",
    "PackageLookup",
    "RepoLayout",
    # Pipeline
    "DependencyCriteriaResolver",
    "resolve_dependencies",
    # Errors
    "DepCriteriaError",
    "ConfigLoadFailure",
    "MissingArgument",
    "ParseFailure",
    "UnresolvedImport",
    "OutOfRepository",
    "UnhandledPathShape",
]
