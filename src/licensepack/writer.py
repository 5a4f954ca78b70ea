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

"""Output files of a generation run.

The pack itself is streamed by :class:`~licensepack.store.LicenseStore`
while dependencies are processed. This module prepares the output
locations and writes the two files that can only be produced once every
dependency has been seen: the metadata index and the manifest.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from licensepack._types import ExtendedArtifactInfo
from licensepack.logging import get_logger

__all__ = [
    'LICENSES_FILENAME',
    'MANIFEST_FILENAME',
    'METADATA_FILENAME',
    'OutputPaths',
    'prepare_outputs',
    'write_manifest',
    'write_metadata',
]

log = get_logger('licensepack.writer')

LICENSES_FILENAME: Final[str] = 'third_party_licenses'
METADATA_FILENAME: Final[str] = 'third_party_license_metadata'
MANIFEST_FILENAME: Final[str] = 'dependencies_with_licenses.json'


@dataclass(frozen=True)
class OutputPaths:
    """Where a run writes its outputs.

    Attributes:
        raw_resource_dir: Directory that holds the pack and metadata.
        licenses: Pack file, or ``None`` if the host did not declare one.
        metadata: Metadata index file.
        manifest: Extended dependency manifest (JSON).
    """

    raw_resource_dir: Path
    licenses: Path | None
    metadata: Path
    manifest: Path

    @classmethod
    def in_directory(cls, raw_resource_dir: Path, *, manifest: Path | None = None) -> OutputPaths:
        """Default file names inside *raw_resource_dir*."""
        return cls(
            raw_resource_dir=raw_resource_dir,
            licenses=raw_resource_dir / LICENSES_FILENAME,
            metadata=raw_resource_dir / METADATA_FILENAME,
            manifest=manifest or raw_resource_dir / MANIFEST_FILENAME,
        )


def prepare_outputs(paths: OutputPaths) -> None:
    """Create output directories and truncate every output file."""
    paths.raw_resource_dir.mkdir(parents=True, exist_ok=True)
    if paths.licenses is None:
        log.error('license_file_undefined')
    for path in (paths.licenses, paths.metadata, paths.manifest):
        if path is None:
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b'')


def write_metadata(path: Path, lines: Iterable[str], *, line_separator: str = os.linesep) -> int:
    """Write metadata index lines, each followed by *line_separator*.

    Returns:
        Number of lines written.
    """
    separator = line_separator.encode('utf-8')
    count = 0
    with path.open('wb') as f:
        for line in lines:
            f.write(line.encode('utf-8'))
            f.write(separator)
            count += 1
    log.debug('metadata_written', path=str(path), lines=count)
    return count


def write_manifest(path: Path, records: Iterable[ExtendedArtifactInfo]) -> int:
    """Write the extended dependency manifest as pretty-printed JSON.

    Returns:
        Number of records written.
    """
    payload = [record.to_json() for record in records]
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding='utf-8')
    log.debug('manifest_written', path=str(path), records=len(payload))
    return len(payload)
