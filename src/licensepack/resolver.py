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

"""Locate descriptor and archive files for resolved artifacts.

Dependency resolution belongs to the host build tool; licensepack only
needs two lookups, expressed by the :class:`ArtifactResolver` protocol.
"Not found" is a normal answer (``None``), never an exception.

:class:`LocalRepositoryResolver` answers them from directories already
populated by the build, in either of two layouts::

    Maven repository (~/.m2/repository)
    └── com/squareup/okio/okio/3.9.0/
        ├── okio-3.9.0.pom
        └── okio-3.9.0.jar

    Gradle module cache (~/.gradle/caches/modules-2/files-2.1)
    └── com.squareup.okio/okio/3.9.0/
        ├── 3c1f.../okio-3.9.0.pom
        └── 9be2.../okio-3.9.0.jar
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

from licensepack._types import ArtifactInfo
from licensepack.logging import get_logger

__all__ = [
    'LIBRARY_EXTENSIONS',
    'ArtifactResolver',
    'LocalRepositoryResolver',
]

log = get_logger('licensepack.resolver')

#: Archive extensions tried, in order, for a library file.
LIBRARY_EXTENSIONS: tuple[str, ...] = ('aar', 'jar')


@runtime_checkable
class ArtifactResolver(Protocol):
    """Locates files belonging to a resolved artifact."""

    def pom_file(self, artifact: ArtifactInfo) -> Path | None:
        """Return the artifact's POM descriptor, or ``None`` if unknown."""
        ...

    def library_file(self, artifact: ArtifactInfo) -> Path | None:
        """Return the artifact's archive (AAR or JAR), or ``None`` if unknown."""
        ...


class LocalRepositoryResolver:
    """Resolve artifacts against local Maven repositories and Gradle caches.

    Roots are searched in order; the first match wins.

    Args:
        roots: Repository root directories. ``~`` is expanded.
    """

    def __init__(self, roots: Iterable[Path]) -> None:
        self.roots: tuple[Path, ...] = tuple(Path(r).expanduser() for r in roots)

    def _find(self, artifact: ArtifactInfo, extension: str) -> Path | None:
        filename = f'{artifact.name}-{artifact.version}.{extension}'
        for root in self.roots:
            maven_path = root.joinpath(*artifact.group.split('.'), artifact.name, artifact.version, filename)
            if maven_path.is_file():
                return maven_path
            version_dir = root / artifact.group / artifact.name / artifact.version
            if version_dir.is_dir():
                for candidate in sorted(version_dir.glob(f'*/{filename}')):
                    if candidate.is_file():
                        return candidate
        return None

    def pom_file(self, artifact: ArtifactInfo) -> Path | None:
        """Return the artifact's POM descriptor, or ``None`` if not cached."""
        path = self._find(artifact, 'pom')
        log.debug('resolved_pom', artifact=artifact.coordinate, path=str(path) if path else None)
        return path

    def library_file(self, artifact: ArtifactInfo) -> Path | None:
        """Return the artifact's AAR or JAR, or ``None`` if not cached."""
        for extension in LIBRARY_EXTENSIONS:
            path = self._find(artifact, extension)
            if path is not None:
                log.debug('resolved_library', artifact=artifact.coordinate, path=str(path))
                return path
        return None
