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

r"""Deduplicating, append-only license store.

Every license text is written to the pack at most once. Attributions
that carry an identical text share its offset; attributions that repeat
a dedup key are ignored.

Data Flow::

    append(dep, bytes)
        │
        ├─ dep.key already recorded ──────────────→ no-op (first wins)
        │
        ├─ text already in pack ─────┐
        │                            ├──→ metadata[dep.key] = "o:l name"
        └─ new text ─→ write bytes   │    manifest += ExtendedArtifactInfo
                       + separator ──┘

Pack layout for texts ``"MIT TEXT"`` and ``"BSD TEXT"`` with ``\n``::

    bytes 0..7   MIT TEXT   → "0:8"
    byte  8      \n
    bytes 9..16  BSD TEXT   → "9:8"
    byte  17     \n

Usage::

    store = LicenseStore()
    store.append(Dependency.keyed('a'), b'MIT TEXT')   # → LicenseOffset(0, 8)
    store.append(Dependency.keyed('b'), b'MIT TEXT')   # → LicenseOffset(0, 8)
    store.metadata_lines                               # ['0:8 a', '0:8 b']
"""

from __future__ import annotations

import io
import os
from typing import BinaryIO

from licensepack._types import Dependency, ExtendedArtifactInfo, LicenseOffset
from licensepack.logging import get_logger

__all__ = [
    'LicenseStore',
]

log = get_logger('licensepack.store')


class LicenseStore:
    """Accumulates deduplicated license texts for one generation run.

    Args:
        sink: Binary stream the pack bytes are appended to. Defaults to
            an in-memory buffer.
        line_separator: Separator written after each new text. Defaults
            to the platform line separator.
    """

    def __init__(
        self,
        sink: BinaryIO | None = None,
        *,
        line_separator: str = os.linesep,
    ) -> None:
        self.sink: BinaryIO = sink if sink is not None else io.BytesIO()
        self._separator = line_separator.encode('utf-8')
        self._cursor = 0
        self._offsets: dict[bytes, LicenseOffset] = {}
        self._metadata: dict[str, str] = {}
        self._extended: dict[ExtendedArtifactInfo, None] = {}

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def cursor(self) -> int:
        """Number of bytes written to the pack so far."""
        return self._cursor

    @property
    def metadata_lines(self) -> list[str]:
        """Metadata index lines in insertion order."""
        return list(self._metadata.values())

    @property
    def extended_artifacts(self) -> list[ExtendedArtifactInfo]:
        """Distinct manifest records in first-seen order."""
        return list(self._extended)

    @property
    def offsets(self) -> dict[bytes, LicenseOffset]:
        """Copy of the license bytes → offset mapping."""
        return dict(self._offsets)

    def __contains__(self, key: object) -> bool:
        return key in self._metadata

    def __len__(self) -> int:
        return len(self._metadata)

    # ── Mutation ─────────────────────────────────────────────────────

    def append(self, dependency: Dependency, license_bytes: bytes) -> LicenseOffset | None:
        """Record an attribution and its license text.

        Args:
            dependency: The attribution; ``dependency.key`` is the dedup key.
            license_bytes: License text, usually UTF-8. Compared byte for byte.

        Returns:
            The offset the attribution points at, or ``None`` if the key
            was already recorded.
        """
        if dependency.key in self._metadata:
            log.debug('duplicate_key_skipped', key=dependency.key)
            return None

        # Exact bytes; texts need not be valid UTF-8.
        offset = self._offsets.get(license_bytes)
        if offset is None:
            offset = LicenseOffset(start=self._cursor, length=len(license_bytes))
            self._offsets[license_bytes] = offset
            self._write(license_bytes)
            self._write(self._separator)
        else:
            log.debug('license_text_reused', key=dependency.key, offset=str(offset))

        self._metadata[dependency.key] = dependency.build_metadata_line(offset)
        self._extended[
            ExtendedArtifactInfo(
                group=dependency.group_id,
                artifact=dependency.artifact_id,
                version=dependency.version,
                display_name=dependency.name,
                license_name=dependency.license_name,
            )
        ] = None
        return offset

    def _write(self, content: bytes) -> None:
        self.sink.write(content)
        self._cursor += len(content)
