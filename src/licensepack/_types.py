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

"""Value types shared by every stage of a run.

Nothing here imports from the rest of ``licensepack``; every other
module may import from here.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    'ABSENT_ARTIFACT',
    'ArtifactInfo',
    'Dependency',
    'ExtendedArtifactInfo',
    'LicenseOffset',
]


@dataclass(frozen=True)
class ArtifactInfo:
    """Identity of a resolved dependency.

    Attributes:
        group: Maven group ID (e.g. ``"com.squareup.okio"``).
        name: Artifact ID (e.g. ``"okio"``).
        version: Resolved version string.
    """

    group: str
    name: str
    version: str

    @property
    def coordinate(self) -> str:
        """``group:name:version`` as printed by build tools."""
        return f'{self.group}:{self.name}:{self.version}'

    def __str__(self) -> str:
        return self.coordinate


#: Sentinel written by the dependency task when a build variant has no
#: dependency list (e.g. debug builds).
ABSENT_ARTIFACT = ArtifactInfo(group='absent', name='absent', version='absent')


@dataclass(frozen=True)
class LicenseOffset:
    """Byte range of one license text inside the pack.

    The separator that follows every text in the pack is never part
    of ``length``.
    """

    start: int
    length: int

    def __str__(self) -> str:
        return f'{self.start}:{self.length}'


@dataclass(frozen=True)
class Dependency:
    """A license attribution record.

    Attributes:
        key: Dedup key. ``group:artifact`` for single-license
            descriptors, ``group:artifact <licenseName>`` for each license
            of a multi-license descriptor, the bundle key for embedded
            licenses.
        name: Display name written to the metadata index.
        group_id: Maven group ID, empty for embedded bundle entries.
        artifact_id: Artifact ID, empty for embedded bundle entries.
        version: Version string, empty for embedded bundle entries.
        license_name: Declared license name, empty when unknown.
    """

    key: str
    name: str
    group_id: str = ''
    artifact_id: str = ''
    version: str = ''
    license_name: str = ''

    @classmethod
    def keyed(cls, key: str) -> Dependency:
        """Attribution that only carries a key (used as its display name too)."""
        return cls(key=key, name=key)

    def build_metadata_line(self, offset: LicenseOffset | str) -> str:
        """Render the metadata index line for this attribution."""
        return f'{offset} {self.name}'


@dataclass(frozen=True)
class ExtendedArtifactInfo:
    """Manifest record: an artifact enriched with its resolved license."""

    group: str
    artifact: str
    version: str
    display_name: str
    license_name: str

    def to_json(self) -> dict[str, str]:
        """Return the manifest's JSON shape."""
        return {
            'group': self.group,
            'artifact': self.artifact,
            'version': self.version,
            'displayName': self.display_name,
            'licenseName': self.license_name,
        }
