"""Run configuration and TS config (tsconfig.json / jsconfig.json) loading.

The repository root comes from the ``REPO`` environment variable unless it is
given explicitly. The alias rules are read from ``<repo>/tsconfig.json``:

    {
      "extends": "./tsconfig.base.json",
      "compilerOptions": {
        "baseUrl": ".",
        "paths": {"@/*": ["src/*"], "*": ["plz-out/gen/third_party/js/*"]}
      }
    }
"""

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from .criteria import RepoLayout
from .errors import ConfigLoadFailure, MissingArgument
from .resolver import DEFAULT_EXTENSIONS, AliasConfig, AliasRules

REPO_ENV_VAR = "REPO"
TSCONFIG_NAME = "tsconfig.json"

# Strings are matched first so that "//" inside a value is left alone
_COMMENT_RE = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r'("(?:\\.|[^"\\])*")|,(\s*[}\]])')


@dataclass
class Settings:
    """Everything a run needs, resolved once at startup.

    Attributes:
        repo_root: Absolute repository root.
        tsconfig_path: Alias configuration file.
        extensions: Recognized module extensions, in priority order.
        layout: Build-system directory conventions.
    """

    repo_root: str
    tsconfig_path: str
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    layout: RepoLayout = field(default_factory=RepoLayout)

    @classmethod
    def from_env(cls, repo_root: str = None, tsconfig_path: str = None, environ=None) -> "Settings":
        """Build settings, falling back to the environment for the repository root.

        Raises:
            MissingArgument: If no repository root is available.
        """
        environ = os.environ if environ is None else environ
        repo_root = repo_root or environ.get(REPO_ENV_VAR)
        if not repo_root:
            raise MissingArgument(
                f"A repository root is required (set ${REPO_ENV_VAR} or pass --repo)"
            )

        # Trim a possible trailing '/' for normalisation
        repo_root = os.path.abspath(repo_root.rstrip("/") or "/")
        if tsconfig_path is None:
            tsconfig_path = os.path.join(repo_root, TSCONFIG_NAME)

        return cls(repo_root=repo_root, tsconfig_path=os.path.abspath(tsconfig_path))


def strip_json_comments(content: str) -> str:
    """Remove // and /* */ comments and trailing commas from JSON text."""
    content = _COMMENT_RE.sub(lambda m: m.group(1) or "", content)
    return _TRAILING_COMMA_RE.sub(lambda m: m.group(1) or m.group(2), content)


def _read_config(config_path: Path) -> Dict[str, Any]:
    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadFailure(str(config_path), e.strerror or str(e)) from e

    try:
        config = json.loads(strip_json_comments(content))
    except json.JSONDecodeError as e:
        raise ConfigLoadFailure(str(config_path), f"invalid JSON: {e}") from e

    if not isinstance(config, dict):
        raise ConfigLoadFailure(str(config_path), "top-level value must be an object")
    return config


def _with_json_suffix(path: Path) -> Path:
    """``tsconfig.base`` -> ``tsconfig.base.json``; names already ending in ``.json`` are kept."""
    if path.suffix == ".json":
        return path
    return path.with_name(path.name + ".json")


def _resolve_extends(extends: str, config_path: Path) -> Path:
    """Locate a config named by ``extends``: a relative path or a node package."""
    if extends.startswith(".") or os.path.isabs(extends):
        parent_path = config_path.parent / extends
    else:
        parent_path = None
        for directory in [config_path.parent, *config_path.parent.parents]:
            candidate = directory / "node_modules" / extends
            if candidate.exists() or _with_json_suffix(candidate).exists():
                parent_path = candidate
                break
        if parent_path is None:
            raise ConfigLoadFailure(str(config_path), f"cannot find extended config '{extends}'")

    if parent_path.is_dir():
        parent_path = parent_path / TSCONFIG_NAME
    elif not parent_path.is_file():
        parent_path = _with_json_suffix(parent_path)
    return parent_path


def _parse_tsconfig(
    config_path: Path, seen: Set[str] = None
) -> Tuple[Dict[str, List[str]], Optional[str], Optional[str]]:
    """Parse a TS config, following its extends chain.

    Returns:
        Tuple of (paths dict, absolute baseUrl or None, directory paths are relative to).
    """
    if seen is None:
        seen = set()

    config_str = str(config_path.resolve())
    if config_str in seen:
        raise ConfigLoadFailure(config_str, "circular extends")
    seen.add(config_str)

    config = _read_config(config_path)
    compiler_options = config.get("compilerOptions")
    if compiler_options is None:
        compiler_options = {}
    elif not isinstance(compiler_options, dict):
        raise ConfigLoadFailure(str(config_path), "compilerOptions must be an object")

    paths = compiler_options.get("paths")
    paths_dir = str(config_path.parent) if paths is not None else None

    base_url = compiler_options.get("baseUrl")
    if base_url is not None:
        if not isinstance(base_url, str):
            raise ConfigLoadFailure(str(config_path), "compilerOptions.baseUrl must be a string")
        base_url = os.path.normpath(os.path.join(config_path.parent, base_url))

    extends = config.get("extends")
    if isinstance(extends, str):
        extends = [extends]
    for parent in extends or []:
        parent_paths, parent_base, parent_dir = _parse_tsconfig(
            _resolve_extends(parent, config_path), seen
        )
        if paths is None and parent_paths:
            paths, paths_dir = parent_paths, parent_dir
        if base_url is None:
            base_url = parent_base

    if paths is not None and not isinstance(paths, dict):
        raise ConfigLoadFailure(str(config_path), "compilerOptions.paths must be an object")

    return paths or {}, base_url, paths_dir


def load_alias_rules(config_path: str) -> AliasRules:
    """Load alias rules from a TS config file.

    Targets are made absolute against ``baseUrl``, or against the directory
    of the config declaring ``paths`` when no ``baseUrl`` is set.

    Raises:
        ConfigLoadFailure: If the file (or one it extends) is absent or malformed.
    """
    path = Path(config_path)
    if not path.is_file():
        raise ConfigLoadFailure(config_path, "file not found")

    paths, base_url, paths_dir = _parse_tsconfig(path)
    target_base = base_url or paths_dir or str(path.parent)

    aliases = []
    for pattern, targets in paths.items():
        if isinstance(targets, str):
            targets = [targets]
        if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
            raise ConfigLoadFailure(config_path, f"targets for '{pattern}' must be strings")
        aliases.append(
            AliasConfig(
                pattern=pattern,
                targets=[os.path.normpath(os.path.join(target_base, t)) for t in targets],
            )
        )

    return AliasRules(base_url=base_url or "", aliases=aliases)
