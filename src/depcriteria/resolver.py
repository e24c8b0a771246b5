"""Import path resolution for JavaScript and TypeScript specifiers.

Resolution runs as two explicit phases:

1. Alias phase - the specifier is matched against tsconfig-style path
   aliases (``compilerOptions.paths`` plus the implicit ``baseUrl`` match-all)
   and every rewritten candidate is checked on disk.
2. Conventional phase - node-style resolution of the *original* specifier:
   relative/absolute paths against the importing file's directory, bare
   package names through ``node_modules`` directories walking upwards.

Both phases share the same lookup logic, so an alias target never has to
carry an extension. Extension order is a fixed policy: with the default
``(".js", ".ts", ".tsx")`` a ``foo.js`` always beats ``foo.ts``.

Example:
    >>> rules = AliasRules(base_url="/repo", aliases=[AliasConfig("@/*", ["/repo/src/*"])])
    >>> resolver = PathResolver(rules)
    >>> resolver.resolve("@/utils/helpers", "/repo/src/app")
    '/repo/src/utils/helpers.ts'
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from .errors import UnresolvedImport

logger = logging.getLogger(__name__)

# Module extension support, in resolution priority order
DEFAULT_EXTENSIONS: Tuple[str, ...] = (".js", ".ts", ".tsx")

NODE_MODULES = "node_modules"


@dataclass
class AliasConfig:
    """Configuration for a single path alias.

    Attributes:
        pattern: The alias pattern (e.g., "@/*", "~/", "#components").
        targets: Absolute replacement paths (e.g., ["/repo/src/*"]).
        is_wildcard: Whether the pattern contains a wildcard.
        prefix: Part before the wildcard.
        suffix: Part after the wildcard.
    """

    pattern: str
    targets: List[str]
    is_wildcard: bool = False
    prefix: str = ""
    suffix: str = ""

    def __post_init__(self):
        """Parse pattern into prefix/suffix."""
        if "*" in self.pattern:
            self.is_wildcard = True
            idx = self.pattern.index("*")
            self.prefix = self.pattern[:idx]
            self.suffix = self.pattern[idx + 1 :]
        else:
            self.prefix = self.pattern

    def matches(self, specifier: str) -> Optional[str]:
        """Check if a specifier matches this alias.

        Args:
            specifier: The import specifier to check.

        Returns:
            The wildcard portion if matched ("" for exact patterns), None otherwise.
        """
        if not self.is_wildcard:
            return "" if specifier == self.pattern else None

        if len(specifier) < len(self.prefix) + len(self.suffix):
            return None
        if not specifier.startswith(self.prefix) or not specifier.endswith(self.suffix):
            return None

        end = len(specifier) - len(self.suffix)
        return specifier[len(self.prefix) : end]

    def apply(self, wildcard_part: str) -> List[str]:
        """Substitute the captured wildcard portion into every target."""
        results = []
        for target in self.targets:
            if "*" in target:
                idx = target.index("*")
                results.append(target[:idx] + wildcard_part + target[idx + 1 :])
            else:
                results.append(target)
        return results

    @property
    def specificity(self) -> Tuple[int, int]:
        """Sort key: exact patterns first, then longest literal prefix."""
        return (1 if self.is_wildcard else 0, -len(self.prefix))


@dataclass(frozen=True)
class AliasRules:
    """Path aliases loaded from the project's TS config.

    Attributes:
        base_url: Absolute base directory for alias targets ("" when unset).
        aliases: Aliases in declaration order; targets are already absolute.
        match_all: Whether a bare specifier may also resolve as ``<base_url>/<specifier>``.
    """

    base_url: str = ""
    aliases: List[AliasConfig] = field(default_factory=list)
    match_all: bool = True

    def candidates(self, specifier: str) -> Iterator[Tuple[AliasConfig, str]]:
        """Yield (alias, rewritten path) pairs, most specific alias first.

        Relative and absolute specifiers are never aliased.
        """
        if _is_path_like(specifier):
            return

        for alias in sorted(self.aliases, key=lambda a: a.specificity):
            wildcard = alias.matches(specifier)
            if wildcard is None:
                continue
            for target in alias.apply(wildcard):
                yield alias, target

        if self.match_all and self.base_url:
            if not any(a.pattern == "*" for a in self.aliases):
                yield AliasConfig("*", [os.path.join(self.base_url, "*")]), os.path.join(
                    self.base_url, specifier
                )


def _is_path_like(specifier: str) -> bool:
    """Whether a specifier is relative (./, ../) or absolute."""
    return (
        specifier in (".", "..")
        or specifier.startswith(("./", "../"))
        or os.path.isabs(specifier)
    )


class PathResolver:
    """Resolves import specifiers to absolute files on disk.

    Attributes:
        alias_rules: Alias configuration, read-only for the resolver's lifetime.
        extensions: Recognized extensions, in priority order.

    Example:
        >>> resolver = PathResolver(AliasRules(), extensions=(".js", ".ts"))
        >>> resolver.resolve("./a", "/repo/src")  # a.js and a.ts both exist
        '/repo/src/a.js'
    """

    def __init__(self, alias_rules: AliasRules = None, extensions: Sequence[str] = DEFAULT_EXTENSIONS):
        self.alias_rules = alias_rules or AliasRules()
        self.extensions = tuple(extensions)

    def resolve(self, specifier: str, base_dir: str) -> str:
        """Resolve one specifier to exactly one absolute path.

        Args:
            specifier: The import specifier as written in source.
            base_dir: Directory containing the importing file.

        Returns:
            Absolute path of the resolved file.

        Raises:
            UnresolvedImport: If neither phase finds an existing file.
        """
        resolved = self.resolve_alias(specifier)
        if resolved is not None:
            logger.debug("%s -> %s (alias)", specifier, resolved)
            return resolved

        resolved = self.resolve_conventional(specifier, base_dir)
        if resolved is not None:
            logger.debug("%s -> %s", specifier, resolved)
            return resolved

        raise UnresolvedImport(specifier)

    def resolve_alias(self, specifier: str) -> Optional[str]:
        """Alias phase: try every alias rewrite of the specifier."""
        for alias, candidate in self.alias_rules.candidates(specifier):
            resolved = self._load(os.path.abspath(candidate))
            if resolved is not None:
                return resolved
            logger.debug("Alias %s: no file for %s", alias.pattern, candidate)
        return None

    def resolve_conventional(self, specifier: str, base_dir: str) -> Optional[str]:
        """Conventional phase: node-style resolution of the specifier."""
        base_dir = os.path.abspath(base_dir)

        if _is_path_like(specifier):
            return self._load(os.path.normpath(os.path.join(base_dir, specifier)))

        for modules_dir in self._node_modules_paths(base_dir):
            resolved = self._load(os.path.join(modules_dir, specifier))
            if resolved is not None:
                return resolved
        return None

    def _load(self, path: str) -> Optional[str]:
        """Load a path as a file, then as a directory."""
        return self._load_as_file(path) or self._load_as_directory(path)

    def _load_as_file(self, path: str) -> Optional[str]:
        """Try the literal path (when it already has a recognized extension), then path + ext."""
        if path.endswith(self.extensions) and os.path.isfile(path):
            return path

        for ext in self.extensions:
            candidate = path + ext
            if os.path.isfile(candidate):
                return candidate
        return None

    def _load_as_directory(self, path: str) -> Optional[str]:
        """Try the directory index, then the entry declared in package.json."""
        if not os.path.isdir(path):
            return None

        index = self._load_as_file(os.path.join(path, "index"))
        if index is not None:
            return index

        main = self._package_main(path)
        if main is None:
            return None

        entry = os.path.normpath(os.path.join(path, main))
        if entry == path:
            return None
        return self._load_as_file(entry) or self._load_as_directory(entry)

    def _package_main(self, directory: str) -> Optional[str]:
        """Read the ``main`` field from a directory's package.json."""
        package_json = os.path.join(directory, "package.json")
        if not os.path.isfile(package_json):
            return None

        try:
            with open(package_json, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable %s: %s", package_json, e)
            return None

        main = data.get("main") if isinstance(data, dict) else None
        if not isinstance(main, str) or not main:
            return None
        return main

    def _node_modules_paths(self, base_dir: str) -> List[str]:
        """List node_modules directories from base_dir up to the filesystem root."""
        paths = []
        current = base_dir
        while True:
            if os.path.basename(current) != NODE_MODULES:
                paths.append(os.path.join(current, NODE_MODULES))
            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent
        return paths
