"""Classification of resolved dependencies into build-declaration criteria.

A resolved path falls into exactly one of three cases:

- third-party generated package (``plz-out/gen/third_party/js/...``) -> PackageCriteria
- first-party source file (anything outside ``plz-out/``) -> FileCriteria
- other build output (``plz-out/...``) -> no criteria

The criteria only *describe* how a build graph generator should look the
dependency up; which declaration actually exists is decided downstream.
"""

import logging
import os
import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .errors import OutOfRepository, UnhandledPathShape

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupCall:
    """One accepted declaration shape for a first-party file.

    Attributes:
        id: Build rule name (e.g. "js_library").
        srcs: Argument expected to list the file.
        deps: Argument holding dependencies.
        label: Argument holding the target name.
    """

    id: str
    srcs: str
    deps: str = "deps"
    label: str = "name"

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "srcs": self.srcs, "deps": self.deps, "label": self.label}


# Preference order matters: downstream tries them in this order
DEFAULT_FILE_CALLS = (
    LookupCall("js_library", "srcs"),
    LookupCall("js_library", "src"),
    LookupCall("filegroup", "srcs"),
)


@dataclass(frozen=True)
class RepoLayout:
    """Directory conventions of the repository's build system.

    Attributes:
        build_output_dir: Directory the build writes into.
        generated_dir: Subdirectory of build output holding generated rules.
        third_party_dir: Package holding third-party JS libraries.
        package_rule: Rule declaring a third-party library.
        file_calls: Declaration shapes for first-party files, in preference order.
    """

    build_output_dir: str = "plz-out"
    generated_dir: str = "gen"
    third_party_dir: str = "third_party/js"
    package_rule: str = "npm_library"
    file_calls: tuple = DEFAULT_FILE_CALLS

    @property
    def build_output_prefix(self) -> str:
        return self.build_output_dir.strip("/") + "/"

    @property
    def third_party_prefix(self) -> str:
        """e.g. ``plz-out/gen/third_party/js/``."""
        return posixpath.join(self.build_output_dir, self.generated_dir, self.third_party_dir).strip("/") + "/"


@dataclass
class PackageLookup:
    """A package-declaration match: rule ``call_id`` in ``package`` whose ``args`` match."""

    package: str
    call_id: str
    args: Dict[str, str]
    label: str = "name"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package": self.package,
            "call": {"id": self.call_id, "args": dict(self.args), "label": self.label},
        }


@dataclass
class PackageCriteria:
    """Dependency on a third-party package."""

    import_id: str
    lookups: List[PackageLookup] = field(default_factory=list)

    type = "package"

    def packages(self) -> List[str]:
        """Build packages that must be parsed to evaluate the lookups."""
        return [lookup.package for lookup in self.lookups]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "importId": self.import_id,
            "lookups": [lookup.to_dict() for lookup in self.lookups],
        }


@dataclass
class FileCriteria:
    """Dependency on a first-party file, owned by one of ``calls``."""

    import_id: str
    file: str
    calls: List[LookupCall] = field(default_factory=list)

    type = "file"

    def packages(self) -> List[str]:
        return [posixpath.dirname(self.file)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "importId": self.import_id,
            "lookup": {"file": self.file, "calls": [call.to_dict() for call in self.calls]},
        }


Criteria = Union[PackageCriteria, FileCriteria]


class CriteriaClassifier:
    """Maps resolved paths back to build-declaration criteria.

    Attributes:
        repo_root: Absolute repository root.
        layout: Build-system directory conventions.

    Example:
        >>> classifier = CriteriaClassifier("/repo")
        >>> c = classifier.classify("@foo/bar", "/repo/plz-out/gen/third_party/js/@foo/bar/lib/index.js")
        >>> c.lookups[0].package
        'third_party/js/@foo'
    """

    def __init__(self, repo_root: str, layout: RepoLayout = None):
        self.repo_root = os.path.abspath(repo_root)
        self.layout = layout or RepoLayout()

    def relative_path(self, path: str) -> str:
        """Path relative to the repository root, with forward slashes.

        Raises:
            OutOfRepository: If the path is not under the root.
        """
        abs_path = os.path.abspath(path)
        try:
            common = os.path.commonpath([self.repo_root, abs_path])
        except ValueError:
            raise OutOfRepository(path) from None
        if common != self.repo_root or abs_path == self.repo_root:
            raise OutOfRepository(path)

        return os.path.relpath(abs_path, self.repo_root).replace(os.sep, "/")

    def classify(self, import_id: str, resolved: str) -> Optional[Criteria]:
        """Classify one resolved dependency.

        Args:
            import_id: The specifier as written in source.
            resolved: Absolute resolved path.

        Returns:
            PackageCriteria, FileCriteria, or None for build output.

        Raises:
            OutOfRepository: If the path escapes the repository root.
            UnhandledPathShape: If a third-party path names no package.
        """
        relative = self.relative_path(resolved)

        if relative.startswith(self.layout.third_party_prefix):
            return self._package_criteria(import_id, relative)

        if not relative.startswith(self.layout.build_output_prefix):
            return self.file_criteria(import_id, relative)

        logger.info("Skipping %s: resolves into build output (%s)", import_id, relative)
        return None

    def file_criteria(self, import_id: str, relative: str) -> FileCriteria:
        return FileCriteria(import_id=import_id, file=relative, calls=list(self.layout.file_calls))

    def _package_criteria(self, import_id: str, relative: str) -> PackageCriteria:
        # Example: @apollo/client/core/index.js or graphql-tag/lib/graphql-tag.umd.js
        package_path = relative[len(self.layout.third_party_prefix) :]
        segments = package_path.split("/")

        if segments[0].startswith("@"):
            scope, segments = segments[0], segments[1:]
        else:
            scope = ""

        if not segments or not segments[0] or scope == "@":
            logger.warning("Unhandled third-party path shape for %s: %s", import_id, relative)
            raise UnhandledPathShape(relative)

        name = segments[0]
        if len(segments) == 1:
            # Loose file directly under the third-party root, e.g. tiny.js
            name = posixpath.splitext(name)[0]
            logger.warning("Third-party file outside a package directory for %s: %s", import_id, relative)
        package = self.layout.third_party_dir.strip("/")
        if scope:
            package = f"{package}/{scope}"

        return PackageCriteria(
            import_id=import_id,
            lookups=[
                PackageLookup(
                    package=package,
                    call_id=self.layout.package_rule,
                    args={"name": f"^{name}$"},
                )
            ],
        )
