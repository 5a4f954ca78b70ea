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

"""Random access to a generated license pack.

This is the consumer side of the format: the metadata index is parsed
once, and each license text is read by seeking straight to its byte
range. The pack is never scanned.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from licensepack._types import LicenseOffset
from licensepack.errors import MetadataFormatError

__all__ = [
    'LicensePackReader',
    'MetadataEntry',
    'parse_metadata',
]

_METADATA_LINE: Final[re.Pattern[str]] = re.compile(r'^(?P<start>\d+):(?P<length>\d+) (?P<name>.*)$')


@dataclass(frozen=True)
class MetadataEntry:
    """One line of the metadata index."""

    offset: LicenseOffset
    name: str


def parse_metadata(text: str) -> list[MetadataEntry]:
    """Parse metadata index content.

    Raises:
        MetadataFormatError: On the first line that is not
            ``<offset>:<length> <name>``.
    """
    entries: list[MetadataEntry] = []
    for number, line in enumerate(text.splitlines(), start=1):
        if not line:
            continue
        match = _METADATA_LINE.match(line)
        if match is None:
            raise MetadataFormatError(number, line)
        entries.append(
            MetadataEntry(
                offset=LicenseOffset(start=int(match.group('start')), length=int(match.group('length'))),
                name=match.group('name'),
            )
        )
    return entries


class LicensePackReader:
    """Reads license texts out of a pack through its metadata index.

    Args:
        pack_path: The ``third_party_licenses`` file.
        metadata_path: The ``third_party_license_metadata`` file.
    """

    def __init__(self, pack_path: Path, metadata_path: Path) -> None:
        self.pack_path = pack_path
        self.entries = parse_metadata(metadata_path.read_text(encoding='utf-8'))

    def __iter__(self) -> Iterator[MetadataEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def read_bytes(self, offset: LicenseOffset) -> bytes:
        """Return the raw bytes stored at *offset*."""
        with self.pack_path.open('rb') as f:
            f.seek(offset.start)
            return f.read(offset.length)

    def read_text(self, entry: MetadataEntry) -> str:
        """Return the license text for *entry*.

        Bytes that are not valid UTF-8 decode to U+FFFD; use
        :meth:`read_bytes` for the exact stored content.
        """
        return self.read_bytes(entry.offset).decode('utf-8', errors='replace')

    def find(self, name: str) -> list[MetadataEntry]:
        """Entries whose display name equals *name*."""
        return [entry for entry in self.entries if entry.name == name]
