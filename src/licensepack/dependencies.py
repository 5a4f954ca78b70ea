# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Load the resolved-dependency list written by the dependency task.

The file is a JSON array of ``{"group", "name", "version"}`` objects::

    [
      {"group": "com.squareup.okio", "name": "okio", "version": "3.9.0"},
      {"group": "com.google.android.gms", "name": "play-services-base", "version": "18.5.0"}
    ]

Builds that produce no dependency list (debug variants) write the single
absent marker ``{"group": "absent", "name": "absent", "version": "absent"}``
instead; see :data:`licensepack._types.ABSENT_ARTIFACT`.

Usage::

    from licensepack.dependencies import load_dependencies_json

    artifacts = load_dependencies_json(Path('build/dependencies.json'))
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Final

import jsonschema

from licensepack._types import ArtifactInfo
from licensepack.errors import DependencyListError
from licensepack.logging import get_logger

log = get_logger('licensepack.dependencies')

#: JSON Schema for the resolved-dependency list.
DEPENDENCIES_SCHEMA: Final[dict[str, Any]] = {
    '$schema': 'https://json-schema.org/draft/2020-12/schema',
    'type': 'array',
    'items': {
        'type': 'object',
        'required': ['group', 'name', 'version'],
        'properties': {
            'group': {'type': 'string'},
            'name': {'type': 'string'},
            'version': {'type': 'string'},
        },
    },
}


def validate_dependencies(data: Any, source: Path | str) -> list[ArtifactInfo]:  # noqa: ANN401
    """Validate parsed dependency JSON and convert it to artifacts.

    Duplicate entries collapse; the first occurrence keeps its position.

    Raises:
        DependencyListError: Listing every schema violation.
    """
    validator = jsonschema.Draft202012Validator(DEPENDENCIES_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        raise DependencyListError(
            source,
            [f'{".".join(str(p) for p in e.absolute_path) or "(root)"}: {e.message}' for e in errors],
        )
    artifacts = dict.fromkeys(
        ArtifactInfo(group=entry['group'], name=entry['name'], version=entry['version']) for entry in data
    )
    return list(artifacts)


def load_dependencies_json(path: Path) -> list[ArtifactInfo]:
    """Read and validate a resolved-dependency list.

    Args:
        path: Path to the dependency JSON file.

    Returns:
        Artifacts in first-seen order, without duplicates.

    Raises:
        DependencyListError: If the file is unreadable, is not JSON, or
            does not match :data:`DEPENDENCIES_SCHEMA`.
    """
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except OSError as exc:
        raise DependencyListError(path, [f'cannot read file: {exc.strerror or exc}']) from exc
    except json.JSONDecodeError as exc:
        raise DependencyListError(path, [f'invalid JSON at line {exc.lineno}: {exc.msg}']) from exc

    artifacts = validate_dependencies(data, path)
    log.debug('loaded_dependencies', path=str(path), count=len(artifacts))
    return artifacts


__all__ = [
    'DEPENDENCIES_SCHEMA',
    'load_dependencies_json',
    'validate_dependencies',
]
