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

"""Error types for licensepack.

Two tiers of failure exist during a run:

- **Soft**: something is simply not there (no descriptor, no embedded
  bundle). Callers receive ``None`` or catch :class:`DescriptorParseError`,
  log, and move on to the next dependency.
- **Fatal**: every other subclass of :class:`LicensePackError`. These
  abort the whole run; the CLI turns them into exit status 1.
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    'AbsentDependencyError',
    'ConfigError',
    'DependencyListError',
    'DescriptorParseError',
    'IndexParseError',
    'LicensePackError',
    'LicenseReadError',
    'MetadataFormatError',
]


class LicensePackError(Exception):
    """Base class for every error raised by licensepack."""


class _ValidationErrors(LicensePackError):
    """A list of human-readable problems found in one input file.

    Attributes:
        source: File (or label) the problems were found in.
        errors: List of human-readable error strings.
    """

    what = 'input'

    def __init__(self, source: Path | str, errors: list[str]) -> None:
        self.source = str(source)
        self.errors = errors
        bullet_list = '\n'.join(f'  - {e}' for e in errors)
        super().__init__(f'{self.source}: {self.what} has {len(errors)} validation error(s):\n{bullet_list}')


class DependencyListError(_ValidationErrors):
    """Raised when the resolved-dependency JSON is malformed."""

    what = 'dependency list'


class IndexParseError(_ValidationErrors):
    """Raised when an embedded ``third_party_licenses.json`` is malformed."""

    what = 'embedded license index'


class ConfigError(_ValidationErrors):
    """Raised when a configuration file has unknown keys or wrong types."""

    what = 'configuration'


class DescriptorParseError(LicensePackError):
    """Raised when a POM descriptor cannot be parsed.

    This is the soft tier: the run logs it and skips the dependency.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f'{path}: {reason}')


class LicenseReadError(LicensePackError):
    """Raised when license bytes cannot be read from an artifact archive."""

    def __init__(self, archive: Path, reason: str = 'Failed to read license text.') -> None:
        self.archive = archive
        super().__init__(f'{archive}: {reason}')


class AbsentDependencyError(LicensePackError):
    """Raised when the absent-dependency marker is mixed with real dependencies."""


class MetadataFormatError(LicensePackError):
    """Raised when a metadata index line is not ``<offset>:<length> <name>``."""

    def __init__(self, line_number: int, line: str) -> None:
        self.line_number = line_number
        self.line = line
        super().__init__(f'line {line_number}: malformed metadata entry {line!r}')
