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

r"""One license pack generation run.

Data Flow::

    dependencies.json
          │
          ▼
    ┌───────────────┐   ABSENT only   ┌────────────────────────┐
    │ load + check  │────────────────→│ placeholder attribution│
    └──────┬────────┘                 └───────────┬────────────┘
           │ per artifact                         │
           ▼                                      │
    ┌───────────────┐  descriptor ┌──────────┐    │
    │ VendorPolicy  │────────────→│ POM      │──┐ │
    │   .plan()     │  embedded   ├──────────┤  │ │
    │               │────────────→│ AAR/JAR  │──┤ │
    └───────────────┘             └──────────┘  ▼ ▼
                                         ┌──────────────┐
                                         │ LicenseStore │──→ third_party_licenses
                                         └──────┬───────┘
                                                ▼
                               third_party_license_metadata + manifest

Every output is truncated before processing starts, so a run that fails
part-way never leaves a stale pack next to fresh metadata.

Usage::

    from licensepack.task import generate_licenses

    result = generate_licenses(
        dependencies_json=Path('build/dependencies.json'),
        outputs=OutputPaths.in_directory(Path('build/generated/raw')),
        resolver=LocalRepositoryResolver(config.repositories),
        config=config,
    )
"""

from __future__ import annotations

import contextlib
import io
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Final

from licensepack._types import ABSENT_ARTIFACT, ArtifactInfo, Dependency
from licensepack.config import LicensePackConfig
from licensepack.dependencies import load_dependencies_json
from licensepack.embedded import add_embedded_licenses
from licensepack.errors import AbsentDependencyError, DescriptorParseError
from licensepack.logging import get_logger
from licensepack.pom import attributions_from_pom, parse_pom
from licensepack.resolver import ArtifactResolver
from licensepack.store import LicenseStore
from licensepack.writer import OutputPaths, prepare_outputs, write_manifest, write_metadata

__all__ = [
    'ABSENT_DEPENDENCY_KEY',
    'ABSENT_DEPENDENCY_TEXT',
    'GenerationResult',
    'LicensesTask',
    'generate_licenses',
]

log = get_logger('licensepack.task')

ABSENT_DEPENDENCY_KEY: Final[str] = 'Debug License Info'
ABSENT_DEPENDENCY_TEXT: Final[str] = (
    'Licenses are only provided in build variants '
    '(e.g. release) where the Android Gradle Plugin '
    'generates an app dependency list.'
)


@dataclass(frozen=True)
class GenerationResult:
    """Summary of a finished run.

    Attributes:
        attributions: Number of metadata lines written.
        distinct_texts: Number of distinct license texts in the pack.
        pack_bytes: Size of the pack in bytes.
        skipped: Coordinates of dependencies that contributed nothing
            because their descriptor was missing or unreadable.
        metadata_lines: The metadata index, in file order.
    """

    attributions: int
    distinct_texts: int
    pack_bytes: int
    skipped: tuple[str, ...] = ()
    metadata_lines: tuple[str, ...] = ()


class LicensesTask:
    """Attributes licenses for a dependency list into a :class:`LicenseStore`.

    Args:
        resolver: Locates POMs and archives for artifacts.
        config: Vendor policy and output formatting settings.
    """

    def __init__(self, resolver: ArtifactResolver, config: LicensePackConfig | None = None) -> None:
        self.resolver = resolver
        self.config = config or LicensePackConfig()
        self.policy = self.config.policy
        self.skipped: list[str] = []
        self._embedded_keys: set[str] = set()

    # ── Processing ───────────────────────────────────────────────────

    def process(self, artifacts: list[ArtifactInfo], store: LicenseStore) -> None:
        """Attribute every artifact, in order, into *store*.

        Raises:
            AbsentDependencyError: If the absent marker is mixed with
                real dependencies.
            LicenseReadError: If an embedded bundle cannot be read.
        """
        self.skipped = []
        self._embedded_keys = set()

        if ABSENT_ARTIFACT in artifacts:
            if len(artifacts) > 1:
                raise AbsentDependencyError(
                    'A dependency list containing the absent-dependency marker must not contain other artifacts.'
                )
            self.add_debug_license(store)
            return

        for artifact in artifacts:
            plan = self.policy.plan(artifact)
            if plan.read_descriptor:
                self.add_licenses_from_pom(artifact, store)
            if plan.extract_embedded:
                self.add_embedded_licenses(artifact, store)

    def add_debug_license(self, store: LicenseStore) -> None:
        """Append the placeholder used when no dependency list exists."""
        store.append(Dependency.keyed(ABSENT_DEPENDENCY_KEY), ABSENT_DEPENDENCY_TEXT.encode('utf-8'))

    def add_licenses_from_pom(self, artifact: ArtifactInfo, store: LicenseStore) -> None:
        """Attribute *artifact* from its POM; skip it if the POM is unusable."""
        pom_path = self.resolver.pom_file(artifact)
        if pom_path is None or not pom_path.is_file():
            log.error('pom_not_found', artifact=artifact.coordinate, path=str(pom_path) if pom_path else None)
            self.skipped.append(artifact.coordinate)
            return

        try:
            descriptor = parse_pom(pom_path)
        except DescriptorParseError as exc:
            log.warning('pom_unparseable', artifact=artifact.coordinate, path=str(pom_path), reason=exc.reason)
            self.skipped.append(artifact.coordinate)
            return

        attributions = attributions_from_pom(descriptor, artifact)
        if not attributions:
            log.debug('pom_declares_no_license', artifact=artifact.coordinate)
            return
        for dependency, license_bytes in attributions:
            store.append(dependency, license_bytes)

    def add_embedded_licenses(self, artifact: ArtifactInfo, store: LicenseStore) -> None:
        """Extract the license bundle shipped inside a vendor archive."""
        archive = self.resolver.library_file(artifact)
        if archive is None:
            log.warning('vendor_archive_not_found', artifact=artifact.coordinate)
            return
        add_embedded_licenses(archive, store, self._embedded_keys)

    # ── Whole run ────────────────────────────────────────────────────

    def run(self, dependencies_json: Path, outputs: OutputPaths) -> GenerationResult:
        """Regenerate every output from *dependencies_json*.

        Raises:
            LicensePackError: On any fatal condition. Outputs are left
                truncated or partially written.
        """
        prepare_outputs(outputs)
        artifacts = load_dependencies_json(dependencies_json)

        with contextlib.ExitStack() as stack:
            if outputs.licenses is None:
                sink: BinaryIO = io.BytesIO()
            else:
                sink = stack.enter_context(outputs.licenses.open('ab'))
            store = LicenseStore(sink, line_separator=self.config.line_separator)
            self.process(artifacts, store)

        write_metadata(outputs.metadata, store.metadata_lines, line_separator=self.config.line_separator)
        write_manifest(outputs.manifest, store.extended_artifacts)

        result = GenerationResult(
            attributions=len(store),
            distinct_texts=len(store.offsets),
            pack_bytes=store.cursor,
            skipped=tuple(self.skipped),
            metadata_lines=tuple(store.metadata_lines),
        )
        log.info(
            'license_pack_generated',
            dependencies=len(artifacts),
            attributions=result.attributions,
            distinct_texts=result.distinct_texts,
            pack_bytes=result.pack_bytes,
            skipped=len(result.skipped),
        )
        return result


def generate_licenses(
    dependencies_json: Path,
    outputs: OutputPaths,
    resolver: ArtifactResolver,
    config: LicensePackConfig | None = None,
) -> GenerationResult:
    """Run one generation with a fresh :class:`LicensesTask`."""
    return LicensesTask(resolver, config).run(dependencies_json, outputs)
