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

"""Extract license bundles embedded in vendor artifacts.

Some vendor archives (Play services and Firebase AARs, or their
``-license`` companion artifacts for older releases) ship the licenses
of everything they bundle as two zip entries:

- ``third_party_licenses.json``: index mapping a license key to the
  byte range of its text: ``{"<key>": {"start": 0, "length": 1024}}``.
- ``third_party_licenses.txt``: the concatenated texts.

A missing entry means "no embedded licenses" and is not an error. A
read failure once extraction has started means the archive is corrupt
and aborts the run.
"""

from __future__ import annotations

import json
import zipfile
from collections.abc import MutableSet
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Final

import jsonschema

from licensepack._types import Dependency
from licensepack.errors import IndexParseError, LicenseReadError
from licensepack.logging import get_logger
from licensepack.store import LicenseStore

__all__ = [
    'INDEX_ENTRY',
    'INDEX_SCHEMA',
    'TEXT_ENTRY',
    'EmbeddedLicense',
    'add_embedded_licenses',
    'parse_license_index',
    'read_slice',
]

log = get_logger('licensepack.embedded')

INDEX_ENTRY: Final[str] = 'third_party_licenses.json'
TEXT_ENTRY: Final[str] = 'third_party_licenses.txt'

_CHUNK_SIZE: Final[int] = 1024

#: JSON Schema for the embedded index. ``null`` means an empty bundle.
INDEX_SCHEMA: Final[dict[str, Any]] = {
    '$schema': 'https://json-schema.org/draft/2020-12/schema',
    'type': ['object', 'null'],
    'additionalProperties': {
        'type': 'object',
        'required': ['start', 'length'],
        'properties': {
            'start': {'type': 'integer', 'minimum': 0},
            'length': {'type': 'integer'},
        },
    },
}


@dataclass(frozen=True)
class EmbeddedLicense:
    """One entry of an embedded license index."""

    key: str
    start: int
    length: int


def parse_license_index(raw: bytes, source: Path | str) -> list[EmbeddedLicense]:
    """Parse and validate an embedded license index.

    Returns:
        Entries in index order; empty for a ``null`` index.

    Raises:
        IndexParseError: If the index is not JSON or violates
            :data:`INDEX_SCHEMA`.
    """
    try:
        data = json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise IndexParseError(source, [f'{INDEX_ENTRY} is not valid JSON: {exc}']) from exc

    validator = jsonschema.Draft202012Validator(INDEX_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        raise IndexParseError(
            source,
            [f'{".".join(str(p) for p in e.absolute_path) or "(root)"}: {e.message}' for e in errors],
        )
    if data is None:
        return []
    return [EmbeddedLicense(key=key, start=value['start'], length=value['length']) for key, value in data.items()]


def read_slice(stream: IO[bytes], offset: int, length: int) -> bytes:
    """Read *length* bytes starting at *offset* from a forward-only stream.

    Args:
        stream: Stream positioned at its beginning.
        offset: Bytes to skip first.
        length: Bytes to read; ``<= 0`` reads to the end of the stream.

    Returns:
        The bytes read. Shorter than *length* if the stream ends early.
    """
    remaining = offset
    while remaining > 0:
        skipped = stream.read(min(remaining, 64 * _CHUNK_SIZE))
        if not skipped:
            break
        remaining -= len(skipped)

    if length <= 0:
        return stream.read()

    chunks: list[bytes] = []
    remaining = length
    while remaining > 0:
        chunk = stream.read(min(remaining, _CHUNK_SIZE))
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b''.join(chunks)


def add_embedded_licenses(
    archive: Path,
    store: LicenseStore,
    seen_keys: MutableSet[str],
) -> int:
    """Append every not-yet-seen embedded license of *archive* to *store*.

    Args:
        archive: Path to the AAR/JAR.
        store: The run's license store.
        seen_keys: Bundle keys already extracted during this run, shared
            across archives. Updated in place.

    Returns:
        Number of bundle entries newly extracted.

    Raises:
        IndexParseError: If the index entry is malformed.
        LicenseReadError: If the archive is corrupt or an entry cannot
            be read.
    """
    extracted: list[tuple[str, bytes]] = []
    try:
        with zipfile.ZipFile(archive) as zf:
            names = set(zf.namelist())
            if INDEX_ENTRY not in names or TEXT_ENTRY not in names:
                log.debug('no_embedded_licenses', archive=str(archive))
                return 0

            with zf.open(INDEX_ENTRY) as index_stream:
                entries = parse_license_index(index_stream.read(), f'{archive}!/{INDEX_ENTRY}')

            for entry in entries:
                if entry.key in seen_keys:
                    continue
                # Entry streams are forward-only; reopen for every slice.
                with zf.open(TEXT_ENTRY) as text_stream:
                    extracted.append((entry.key, read_slice(text_stream, entry.start, entry.length)))
                seen_keys.add(entry.key)
    except (OSError, zipfile.BadZipFile, EOFError) as exc:
        raise LicenseReadError(archive) from exc

    for key, content in extracted:
        store.append(Dependency.keyed(key), content)

    log.debug('embedded_licenses_extracted', archive=str(archive), added=len(extracted))
    return len(extracted)
