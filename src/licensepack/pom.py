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

r"""Read license declarations from Maven POM descriptors.

A POM declares its licenses as::

    <project>
      <name>OkHttp</name>
      <licenses>
        <license>
          <name>The Apache Software License, Version 2.0</name>
          <url>https://www.apache.org/licenses/LICENSE-2.0.txt</url>
        </license>
      </licenses>
    </project>

The license *URL* is what ends up in the pack for descriptor-sourced
attributions; only embedded bundles carry full license texts.

Key Concepts::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ Explanation                                    │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Dedup key           │ ``group:artifact`` for one declared license;   │
    │                     │ ``group:artifact <license name>`` per license  │
    │                     │ when a POM declares several.                   │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Display name        │ The POM's ``<name>``, or ``group:artifact``    │
    │                     │ when it is blank.                              │
    └─────────────────────┴────────────────────────────────────────────────┘
"""

from __future__ import annotations

import xml.etree.ElementTree as ET  # noqa: N817, S405
from dataclasses import dataclass
from pathlib import Path

from licensepack._types import ArtifactInfo, Dependency
from licensepack.errors import DescriptorParseError

__all__ = [
    'DeclaredLicense',
    'PomDescriptor',
    'attributions_from_pom',
    'parse_pom',
]

_POM_NS = '{http://maven.apache.org/POM/4.0.0}'


@dataclass(frozen=True)
class DeclaredLicense:
    """One ``<license>`` entry of a POM."""

    name: str
    url: str


@dataclass(frozen=True)
class PomDescriptor:
    """The parts of a POM that matter for license attribution.

    Attributes:
        name: Project display name (``<name>``), empty if absent.
        licenses: Declared licenses in document order.
    """

    name: str
    licenses: tuple[DeclaredLicense, ...] = ()


def _text(elem: ET.Element | None) -> str:
    # Collapsed to one line: display names end up in the line-based index.
    if elem is None or elem.text is None:
        return ''
    return ' '.join(elem.text.split())


def parse_pom(path: Path) -> PomDescriptor:
    """Parse a POM file into a :class:`PomDescriptor`.

    Both namespaced (``xmlns="http://maven.apache.org/POM/4.0.0"``) and
    bare POMs are accepted.

    Raises:
        DescriptorParseError: If the file cannot be read, is not
            well-formed XML, or its root element is not ``<project>``.
    """
    try:
        tree = ET.parse(path)  # noqa: S314
    except OSError as exc:
        raise DescriptorParseError(path, f'cannot read descriptor: {exc.strerror or exc}') from exc
    except ET.ParseError as exc:
        raise DescriptorParseError(path, f'malformed XML: {exc}') from exc

    root = tree.getroot()
    if root.tag not in (f'{_POM_NS}project', 'project'):
        raise DescriptorParseError(path, f'expected a <project> root element, got <{root.tag}>')

    ns = _POM_NS if root.tag.startswith(_POM_NS) else ''
    licenses: list[DeclaredLicense] = []
    licenses_elem = root.find(f'{ns}licenses')
    if licenses_elem is not None:
        for license_elem in licenses_elem.findall(f'{ns}license'):
            licenses.append(
                DeclaredLicense(
                    name=_text(license_elem.find(f'{ns}name')),
                    url=_text(license_elem.find(f'{ns}url')),
                )
            )

    return PomDescriptor(name=_text(root.find(f'{ns}name')), licenses=tuple(licenses))


def attributions_from_pom(
    descriptor: PomDescriptor,
    artifact: ArtifactInfo,
) -> list[tuple[Dependency, bytes]]:
    """Turn a parsed POM into attributions paired with their license bytes.

    Returns:
        An empty list when no license is declared; one attribution keyed
        ``group:artifact`` for a single license; one attribution per
        license keyed ``group:artifact <license name>`` otherwise.
    """
    if not descriptor.licenses:
        return []

    base_key = f'{artifact.group}:{artifact.name}'
    display_name = descriptor.name or base_key

    def _attribution(key: str, lic: DeclaredLicense) -> tuple[Dependency, bytes]:
        dependency = Dependency(
            key=key,
            name=display_name,
            group_id=artifact.group,
            artifact_id=artifact.name,
            version=artifact.version,
            license_name=lic.name,
        )
        return dependency, lic.url.encode('utf-8')

    if len(descriptor.licenses) == 1:
        return [_attribution(base_key, descriptor.licenses[0])]
    return [_attribution(f'{base_key} {lic.name}', lic) for lic in descriptor.licenses]
