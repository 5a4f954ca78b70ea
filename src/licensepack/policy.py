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

r"""Decide where each dependency's licenses come from.

Ordinary dependencies are attributed from their POM. Vendor artifacts
(Play services and Firebase) also bundle the licenses of the code they
embed, and where that bundle lives changed at version 14::

    ┌───────────────────────────────┬──────────────┬──────────────────┐
    │ Artifact                      │ Read POM     │ Extract bundle   │
    ├───────────────────────────────┼──────────────┼──────────────────┤
    │ org.example:lib:1.0           │ yes          │ no               │
    │ gms:play-services-base:18.0.0 │ yes          │ yes (granular)   │
    │ gms:play-services-base:12.0.1 │ yes          │ no               │
    │ gms:play-services-license:12  │ no           │ yes (companion)  │
    └───────────────────────────────┴──────────────┴──────────────────┘

Pre-granular releases only carry their bundle in the ``-license``
companion artifact, which is pulled in as a runtime dependency.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

from licensepack._types import ArtifactInfo
from licensepack.logging import get_logger

__all__ = [
    'DEFAULT_VENDOR_GROUPS',
    'GRANULAR_BASE_VERSION',
    'LICENSE_ARTIFACT_SUFFIX',
    'ProcessingPlan',
    'VendorPolicy',
]

log = get_logger('licensepack.policy')

GRANULAR_BASE_VERSION: Final[int] = 14
LICENSE_ARTIFACT_SUFFIX: Final[str] = '-license'
DEFAULT_VENDOR_GROUPS: Final[tuple[str, ...]] = (
    'com.google.android.gms',
    'com.google.firebase',
)

_LEADING_DIGITS: Final[re.Pattern[str]] = re.compile(r'\d+')


@dataclass(frozen=True)
class ProcessingPlan:
    """What to do with one dependency."""

    read_descriptor: bool
    extract_embedded: bool


@dataclass(frozen=True)
class VendorPolicy:
    """Version-gated rules for vendor artifact families.

    Attributes:
        vendor_groups: Group IDs (case-insensitive) that get vendor treatment.
        granular_base_version: First major version that embeds its own
            license bundle.
        license_artifact_suffix: Suffix of the companion artifact that
            carries the bundle for older releases.
    """

    vendor_groups: tuple[str, ...] = DEFAULT_VENDOR_GROUPS
    granular_base_version: int = GRANULAR_BASE_VERSION
    license_artifact_suffix: str = LICENSE_ARTIFACT_SUFFIX
    _lowered: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, '_lowered', frozenset(g.lower() for g in self.vendor_groups))

    def is_vendor_group(self, group: str) -> bool:
        """``True`` if *group* belongs to a vendor family."""
        return group.lower() in self._lowered

    def is_license_artifact(self, name: str) -> bool:
        """``True`` if *name* is a vendor ``-license`` companion artifact."""
        return name.endswith(self.license_artifact_suffix)

    def is_granular_version(self, version: str) -> bool:
        """``True`` if the release embeds its own license bundle.

        Only the leading digits of the first dot-separated component
        count, so ``"14"``, ``"14.0.0"`` and ``"15-beta01"`` are granular.
        A first component without leading digits is not granular.
        """
        first = version.split('.')[0].strip()
        match = _LEADING_DIGITS.match(first)
        if match is None:
            log.warning('unparseable_vendor_version', version=version)
            return False
        return int(match.group()) >= self.granular_base_version

    def plan(self, artifact: ArtifactInfo) -> ProcessingPlan:
        """Decide how to attribute *artifact*."""
        if not self.is_vendor_group(artifact.group):
            return ProcessingPlan(read_descriptor=True, extract_embedded=False)
        companion = self.is_license_artifact(artifact.name)
        return ProcessingPlan(
            read_descriptor=not companion,
            extract_embedded=companion or self.is_granular_version(artifact.version),
        )
