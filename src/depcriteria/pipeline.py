"""End-to-end dependency criteria for one source file.

Extraction, resolution and classification run in sequence, fail-fast:
the first error aborts the run and nothing is returned.
"""

import logging
import os
from typing import Dict, List

from .config import Settings, load_alias_rules
from .criteria import Criteria, CriteriaClassifier
from .resolver import PathResolver
from .specifiers import extract_file_specifiers

logger = logging.getLogger(__name__)


class DependencyCriteriaResolver:
    """Turns a source file's imports into build-declaration criteria.

    Attributes:
        settings: Run settings.
        resolver: Path resolver built from the TS config's alias rules.
        classifier: Criteria classifier for the repository.

    Example:
        >>> settings = Settings.from_env(repo_root="/my/repo")
        >>> criteria = DependencyCriteriaResolver(settings).resolve("/my/repo/src/app.ts")
        >>> [c.to_dict()["type"] for c in criteria]
        ['file', 'package']
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.resolver = PathResolver(
            load_alias_rules(settings.tsconfig_path), extensions=settings.extensions
        )
        self.classifier = CriteriaClassifier(settings.repo_root, settings.layout)

    def full_path(self, file_path: str) -> str:
        """Absolute path of a file given relative to the repository root or absolute."""
        if os.path.isabs(file_path):
            return os.path.normpath(file_path)
        return os.path.normpath(os.path.join(self.settings.repo_root, file_path))

    def resolve_imports(self, file_path: str) -> Dict[str, str]:
        """Map each distinct import specifier of a file to its resolved path."""
        base_dir = os.path.dirname(file_path)
        resolved = {}
        # Sorted for stable output; every specifier is handled exactly once
        for specifier in sorted(extract_file_specifiers(file_path)):
            resolved[specifier] = self.resolver.resolve(specifier, base_dir)
        return resolved

    def resolve(self, file_path: str, include_source: bool = False) -> List[Criteria]:
        """Build the criteria list for a file's direct imports.

        Args:
            file_path: Source file, absolute or relative to the repository root.
            include_source: Also append the criteria of the file itself
                (empty import id), for locating its owning target.

        Returns:
            Criteria list; imports resolving into build output are omitted.
        """
        full_path = self.full_path(file_path)
        criteria_list = []

        for specifier, resolved in self.resolve_imports(full_path).items():
            criteria = self.classifier.classify(specifier, resolved)
            if criteria is not None:
                criteria_list.append(criteria)

        if include_source:
            relative = self.classifier.relative_path(full_path)
            criteria_list.append(self.classifier.file_criteria("", relative))

        logger.info("Resolved %d criteria for %s", len(criteria_list), full_path)
        return criteria_list


def resolve_dependencies(file_path: str, repo_root: str = None, include_source: bool = False) -> List[Dict]:
    """Resolve a file's dependency criteria as JSON-ready dicts.

    Convenience wrapper; the repository root defaults to ``$REPO``.
    """
    settings = Settings.from_env(repo_root=repo_root)
    criteria = DependencyCriteriaResolver(settings).resolve(file_path, include_source=include_source)
    return [c.to_dict() for c in criteria]
