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

"""Configuration for licensepack runs.

Settings are read from a ``licensepack.toml`` file, or from the
``[tool.licensepack]`` table when the file is a ``pyproject.toml``::

    vendor_groups = ["com.google.android.gms", "com.google.firebase"]
    granular_base_version = 14
    license_artifact_suffix = "-license"
    repositories = ["~/.m2/repository", "~/.gradle/caches/modules-2/files-2.1"]
    line_separator = "native"   # "lf", "crlf" or "native"

CLI flags are merged on top by :func:`resolve_config`.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Final

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from licensepack.errors import ConfigError
from licensepack.logging import get_logger
from licensepack.policy import (
    DEFAULT_VENDOR_GROUPS,
    GRANULAR_BASE_VERSION,
    LICENSE_ARTIFACT_SUFFIX,
    VendorPolicy,
)

__all__ = [
    'CONFIG_FILENAME',
    'LINE_SEPARATORS',
    'LicensePackConfig',
    'load_config',
    'resolve_config',
]

log = get_logger('licensepack.config')

CONFIG_FILENAME: Final[str] = 'licensepack.toml'

LINE_SEPARATORS: Final[dict[str, str]] = {
    'lf': '\n',
    'crlf': '\r\n',
    'native': os.linesep,
}

_DEFAULT_REPOSITORIES: Final[tuple[str, ...]] = (
    '~/.m2/repository',
    '~/.gradle/caches/modules-2/files-2.1',
)


@dataclass(frozen=True)
class LicensePackConfig:
    """Resolved settings for one run.

    Attributes:
        vendor_groups: Group IDs that get vendor bundle handling.
        granular_base_version: First vendor major version that embeds
            its own license bundle.
        license_artifact_suffix: Suffix of vendor license companion
            artifacts.
        repositories: Local repository roots searched for POMs and
            archives.
        line_separator: Separator written after each pack entry and
            each metadata line.
    """

    vendor_groups: tuple[str, ...] = DEFAULT_VENDOR_GROUPS
    granular_base_version: int = GRANULAR_BASE_VERSION
    license_artifact_suffix: str = LICENSE_ARTIFACT_SUFFIX
    repositories: tuple[Path, ...] = tuple(Path(r).expanduser() for r in _DEFAULT_REPOSITORIES)
    line_separator: str = os.linesep

    @property
    def policy(self) -> VendorPolicy:
        """The vendor policy these settings describe."""
        return VendorPolicy(
            vendor_groups=self.vendor_groups,
            granular_base_version=self.granular_base_version,
            license_artifact_suffix=self.license_artifact_suffix,
        )


def _string_list(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _parse_table(table: dict[str, Any], source: Path) -> LicensePackConfig:
    errors: list[str] = []
    values: dict[str, Any] = {}
    base = source.parent

    for key, value in table.items():
        if key == 'vendor_groups':
            if _string_list(value):
                values[key] = tuple(value)
            else:
                errors.append('vendor_groups: expected a list of strings')
        elif key == 'granular_base_version':
            if isinstance(value, int) and not isinstance(value, bool):
                values[key] = value
            else:
                errors.append(f'granular_base_version: expected integer, got {type(value).__name__}')
        elif key == 'license_artifact_suffix':
            if isinstance(value, str) and value:
                values[key] = value
            else:
                errors.append('license_artifact_suffix: expected a non-empty string')
        elif key == 'repositories':
            if _string_list(value):
                values[key] = tuple(base / Path(v).expanduser() for v in value)
            else:
                errors.append('repositories: expected a list of strings')
        elif key == 'line_separator':
            if value in LINE_SEPARATORS:
                values[key] = LINE_SEPARATORS[value]
            else:
                errors.append(f'line_separator: {value!r} is not one of: {", ".join(sorted(LINE_SEPARATORS))}')
        else:
            errors.append(f'{key}: unknown setting')

    if errors:
        raise ConfigError(source, errors)
    return replace(LicensePackConfig(), **values)


def load_config(path: Path | None) -> LicensePackConfig:
    """Load settings from *path*, or defaults when *path* is ``None``.

    A ``pyproject.toml`` contributes only its ``[tool.licensepack]``
    table; any other file is read whole.

    Raises:
        ConfigError: If the file is unreadable, not TOML, or contains
            unknown keys or wrongly typed values.
    """
    if path is None:
        return LicensePackConfig()

    try:
        with path.open('rb') as f:
            data = tomllib.load(f)
    except OSError as exc:
        raise ConfigError(path, [f'cannot read file: {exc.strerror or exc}']) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(path, [f'invalid TOML: {exc}']) from exc

    if path.name == 'pyproject.toml':
        data = data.get('tool', {}).get('licensepack', {})
        if not isinstance(data, dict):
            raise ConfigError(path, ['[tool.licensepack] must be a table'])

    config = _parse_table(data, path)
    log.debug('loaded_config', path=str(path))
    return config


def resolve_config(
    config: LicensePackConfig,
    *,
    repositories: list[Path] | None = None,
    line_separator: str | None = None,
) -> LicensePackConfig:
    """Merge CLI overrides on top of file settings.

    Args:
        config: Settings loaded from file (or defaults).
        repositories: Replaces the configured repository roots when given.
        line_separator: One of :data:`LINE_SEPARATORS`' keys.

    Raises:
        ConfigError: If *line_separator* is not a known name.
    """
    if repositories:
        config = replace(config, repositories=tuple(p.expanduser() for p in repositories))
    if line_separator is not None:
        if line_separator not in LINE_SEPARATORS:
            raise ConfigError('--line-separator', [f'{line_separator!r} is not one of: lf, crlf, native'])
        config = replace(config, line_separator=LINE_SEPARATORS[line_separator])
    return config
