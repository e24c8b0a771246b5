"""Shared fixtures: a small Please-style JS/TS repository."""

import json
import logging

import pytest

APP_SOURCE = """\
import React from 'react';
import { bar } from '@foo/bar';
import { helper } from '@/utils/helpers';
import { a } from './a';
import { helper as localHelper } from './utils/helpers';
import schema from '../plz-out/gen/src/generated/schema';
import ReactAgain from 'react';

export const app = () => helper(a, bar, schema, localHelper, React, ReactAgain);
"""


def write(path, content=""):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def repo(tmp_path):
    """Create a repository with first-party sources, third-party packages and build output."""
    root = tmp_path / "repo"

    write(
        root / "tsconfig.json",
        json.dumps(
            {
                "compilerOptions": {
                    "baseUrl": ".",
                    "paths": {
                        "@/*": ["src/*"],
                        "*": ["plz-out/gen/third_party/js/*"],
                    },
                }
            },
            indent=2,
        ),
    )

    # First-party sources
    write(root / "src" / "app.ts", APP_SOURCE)
    write(root / "src" / "a.js", "export const a = 1;")
    write(root / "src" / "a.ts", "export const a = 1;")
    write(root / "src" / "utils" / "helpers.ts", "export const helper = () => {};")
    write(root / "src" / "components" / "index.ts", "export const Button = 1;")

    # Third-party packages generated by the build
    third_party = root / "plz-out" / "gen" / "third_party" / "js"
    write(third_party / "react" / "index.js", "module.exports = {};")
    write(third_party / "@foo" / "bar" / "package.json", json.dumps({"main": "lib/index.js"}))
    write(third_party / "@foo" / "bar" / "lib" / "index.js", "module.exports = {};")

    # Other build output
    write(root / "plz-out" / "gen" / "src" / "generated" / "schema.js", "export default {};")

    return root


@pytest.fixture(autouse=True)
def reset_cli_logging():
    """Drop handlers the CLI attaches, so they never outlive a captured stderr."""
    yield
    logger = logging.getLogger("depcriteria")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
