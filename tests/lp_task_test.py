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

"""End-to-end tests for a license pack generation run."""

from __future__ import annotations

import json
import zipfile
from pathlib import Path

import pytest
from licensepack._types import ABSENT_ARTIFACT, ArtifactInfo
from licensepack.config import LicensePackConfig
from licensepack.embedded import INDEX_ENTRY, TEXT_ENTRY
from licensepack.errors import AbsentDependencyError, DependencyListError, LicenseReadError
from licensepack.reader import LicensePackReader
from licensepack.resolver import LocalRepositoryResolver
from licensepack.store import LicenseStore
from licensepack.task import (
    ABSENT_DEPENDENCY_KEY,
    ABSENT_DEPENDENCY_TEXT,
    GenerationResult,
    LicensesTask,
    generate_licenses,
)
from licensepack.writer import OutputPaths

_GMS = 'com.google.android.gms'
_CONFIG = LicensePackConfig(line_separator='\n')

# ── Helpers ──────────────────────────────────────────────────────────


def _version_dir(repo: Path, group: str, name: str, version: str) -> Path:
    path = repo.joinpath(*group.split('.'), name, version)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _add_pom(
    repo: Path,
    group: str,
    name: str,
    version: str,
    licenses: list[tuple[str, str]],
    *,
    display_name: str = '',
) -> None:
    """Publish a POM declaring *licenses* as (name, url) pairs."""
    license_xml = ''.join(f'<license><name>{n}</name><url>{u}</url></license>' for n, u in licenses)
    name_xml = f'<name>{display_name}</name>' if display_name else ''
    pom = (
        '<project xmlns="http://maven.apache.org/POM/4.0.0">'
        f'<groupId>{group}</groupId><artifactId>{name}</artifactId><version>{version}</version>'
        f'{name_xml}<licenses>{license_xml}</licenses></project>'
    )
    (_version_dir(repo, group, name, version) / f'{name}-{version}.pom').write_text(pom, encoding='utf-8')


def _add_aar(repo: Path, group: str, name: str, version: str, bundle: dict[str, str] | None) -> None:
    """Publish an AAR embedding *bundle* (key → text) as a license bundle."""
    path = _version_dir(repo, group, name, version) / f'{name}-{version}.aar'
    with zipfile.ZipFile(path, 'w') as zf:
        zf.writestr('classes.jar', b'')
        if bundle is not None:
            index: dict[str, dict[str, int]] = {}
            text = b''
            for key, value in bundle.items():
                encoded = value.encode('utf-8')
                index[key] = {'start': len(text), 'length': len(encoded)}
                text += encoded + b'\n'
            zf.writestr(INDEX_ENTRY, json.dumps(index))
            zf.writestr(TEXT_ENTRY, text)


def _write_deps(tmp_path: Path, artifacts: list[ArtifactInfo]) -> Path:
    path = tmp_path / 'dependencies.json'
    payload = [{'group': a.group, 'name': a.name, 'version': a.version} for a in artifacts]
    path.write_text(json.dumps(payload), encoding='utf-8')
    return path


@pytest.fixture()
def repo(tmp_path: Path) -> Path:
    """Empty Maven-layout repository."""
    path = tmp_path / 'repo'
    path.mkdir()
    return path


@pytest.fixture()
def outputs(tmp_path: Path) -> OutputPaths:
    """Output paths under ``tmp_path/out/raw``."""
    return OutputPaths.in_directory(tmp_path / 'out' / 'raw')


def _run(tmp_path: Path, repo: Path, outputs: OutputPaths, artifacts: list[ArtifactInfo]) -> GenerationResult:
    return generate_licenses(
        dependencies_json=_write_deps(tmp_path, artifacts),
        outputs=outputs,
        resolver=LocalRepositoryResolver([repo]),
        config=_CONFIG,
    )


# ── Scenarios ────────────────────────────────────────────────────────


class TestGenerate:
    """Tests for full generation runs."""

    def test_shared_license_text_stored_once(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test shared license text stored once."""
        _add_pom(repo, 'g1', 'a1', '1.0', [('MIT', 'MIT TEXT')])
        _add_pom(repo, 'g2', 'a2', '2.0', [('MIT', 'MIT TEXT')])
        result = _run(tmp_path, repo, outputs, [ArtifactInfo('g1', 'a1', '1.0'), ArtifactInfo('g2', 'a2', '2.0')])

        assert outputs.licenses is not None
        assert outputs.licenses.read_bytes() == b'MIT TEXT\n'
        assert outputs.metadata.read_text(encoding='utf-8') == '0:8 g1:a1\n0:8 g2:a2\n'
        assert result.attributions == 2
        assert result.distinct_texts == 1
        assert result.pack_bytes == 9

    def test_manifest(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test manifest."""
        _add_pom(repo, 'g1', 'a1', '1.0', [('MIT', 'MIT TEXT')], display_name='Library One')
        _run(tmp_path, repo, outputs, [ArtifactInfo('g1', 'a1', '1.0')])

        manifest_text = outputs.manifest.read_text(encoding='utf-8')
        assert manifest_text.startswith('[\n  {')
        assert json.loads(manifest_text) == [
            {
                'group': 'g1',
                'artifact': 'a1',
                'version': '1.0',
                'displayName': 'Library One',
                'licenseName': 'MIT',
            },
        ]

    def test_multi_license_descriptor(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test multi license descriptor."""
        _add_pom(repo, 'g', 'a', '1.0', [('license1', 'TEXT ONE'), ('license2', 'TEXT TWO')], display_name='A')
        task = LicensesTask(LocalRepositoryResolver([repo]), _CONFIG)
        store = LicenseStore(line_separator='\n')
        task.process([ArtifactInfo('g', 'a', '1.0')], store)

        assert 'g:a license1' in store
        assert 'g:a license2' in store
        assert len(store) == 2
        assert store.metadata_lines == ['0:8 A', '9:8 A']

    def test_offsets_address_stored_text(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test offsets address stored text."""
        texts = {'a': 'Apache License 2.0', 'b': 'MIT Lizenz für alle', 'c': 'BSD'}
        artifacts = []
        for name, text in texts.items():
            _add_pom(repo, 'g', name, '1.0', [(name.upper(), text)], display_name=name)
            artifacts.append(ArtifactInfo('g', name, '1.0'))
        _run(tmp_path, repo, outputs, artifacts)

        assert outputs.licenses is not None
        reader = LicensePackReader(outputs.licenses, outputs.metadata)
        assert {entry.name: reader.read_text(entry) for entry in reader} == texts

    def test_multiline_display_name_stays_readable(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test multiline display name stays readable."""
        _add_pom(repo, 'g', 'a', '1.0', [('MIT', 'MIT TEXT')], display_name='Library\n    One')
        _run(tmp_path, repo, outputs, [ArtifactInfo('g', 'a', '1.0')])

        assert outputs.licenses is not None
        reader = LicensePackReader(outputs.licenses, outputs.metadata)
        assert [(entry.name, reader.read_text(entry)) for entry in reader] == [('Library One', 'MIT TEXT')]

    def test_metadata_follows_input_order(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test metadata follows input order."""
        names = ['zeta', 'alpha', 'mu']
        for name in names:
            _add_pom(repo, 'g', name, '1.0', [('L', name)], display_name=name)
        result = _run(tmp_path, repo, outputs, [ArtifactInfo('g', n, '1.0') for n in names])
        assert [line.split(' ', 1)[1] for line in result.metadata_lines] == names

    def test_missing_pom_is_skipped(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test missing pom is skipped."""
        _add_pom(repo, 'g', 'present', '1.0', [('MIT', 'MIT TEXT')])
        artifacts = [ArtifactInfo('g', 'missing', '1.0'), ArtifactInfo('g', 'present', '1.0')]
        result = _run(tmp_path, repo, outputs, artifacts)
        assert result.skipped == ('g:missing:1.0',)
        assert result.metadata_lines == ('0:8 g:present',)

    def test_unparseable_pom_is_skipped(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test unparseable pom is skipped."""
        (_version_dir(repo, 'g', 'bad', '1.0') / 'bad-1.0.pom').write_text('<project>', encoding='utf-8')
        result = _run(tmp_path, repo, outputs, [ArtifactInfo('g', 'bad', '1.0')])
        assert result.skipped == ('g:bad:1.0',)
        assert result.attributions == 0

    def test_pom_without_licenses_contributes_nothing(
        self, tmp_path: Path, repo: Path, outputs: OutputPaths
    ) -> None:
        """Test pom without licenses contributes nothing."""
        _add_pom(repo, 'g', 'a', '1.0', [])
        result = _run(tmp_path, repo, outputs, [ArtifactInfo('g', 'a', '1.0')])
        assert result.attributions == 0
        assert result.skipped == ()
        assert outputs.metadata.read_bytes() == b''

    def test_outputs_are_regenerated(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test outputs are regenerated."""
        _add_pom(repo, 'g', 'a', '1.0', [('MIT', 'MIT TEXT')])
        _run(tmp_path, repo, outputs, [ArtifactInfo('g', 'a', '1.0')])
        _run(tmp_path, repo, outputs, [ArtifactInfo('g', 'a', '1.0')])
        assert outputs.licenses is not None
        assert outputs.licenses.read_bytes() == b'MIT TEXT\n'
        assert outputs.metadata.read_text(encoding='utf-8') == '0:8 g:a\n'

    def test_malformed_dependency_list(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test malformed dependency list."""
        deps = tmp_path / 'dependencies.json'
        deps.write_text('[{"group": "g"}]', encoding='utf-8')
        with pytest.raises(DependencyListError):
            generate_licenses(deps, outputs, LocalRepositoryResolver([repo]), _CONFIG)

    def test_undefined_pack_path_still_writes_metadata(self, tmp_path: Path, repo: Path) -> None:
        """Test undefined pack path still writes metadata."""
        _add_pom(repo, 'g', 'a', '1.0', [('MIT', 'MIT TEXT')])
        raw = tmp_path / 'raw'
        outputs = OutputPaths(raw_resource_dir=raw, licenses=None, metadata=raw / 'meta', manifest=raw / 'm.json')
        result = generate_licenses(
            _write_deps(tmp_path, [ArtifactInfo('g', 'a', '1.0')]),
            outputs,
            LocalRepositoryResolver([repo]),
            _CONFIG,
        )
        assert result.attributions == 1
        assert (raw / 'meta').read_text(encoding='utf-8') == '0:8 g:a\n'


# ── Absent dependency marker ─────────────────────────────────────────


class TestAbsentDependency:
    """Tests for the absent-dependency path."""

    def test_absent_alone_writes_placeholder(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test absent alone writes placeholder."""
        result = _run(tmp_path, repo, outputs, [ABSENT_ARTIFACT])
        length = len(ABSENT_DEPENDENCY_TEXT.encode('utf-8'))
        assert result.metadata_lines == (f'0:{length} {ABSENT_DEPENDENCY_KEY}',)
        assert outputs.licenses is not None
        assert outputs.licenses.read_text(encoding='utf-8') == ABSENT_DEPENDENCY_TEXT + '\n'

    def test_absent_with_real_dependency_is_fatal(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test absent with real dependency is fatal."""
        _add_pom(repo, 'g', 'a', '1.0', [('MIT', 'MIT TEXT')])
        with pytest.raises(AbsentDependencyError):
            _run(tmp_path, repo, outputs, [ABSENT_ARTIFACT, ArtifactInfo('g', 'a', '1.0')])

    def test_fatal_error_leaves_outputs_truncated(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test fatal error leaves outputs truncated."""
        outputs.raw_resource_dir.mkdir(parents=True)
        outputs.metadata.write_text('0:3 stale\n', encoding='utf-8')
        with pytest.raises(AbsentDependencyError):
            _run(tmp_path, repo, outputs, [ArtifactInfo('g', 'a', '1.0'), ABSENT_ARTIFACT])
        assert outputs.metadata.read_bytes() == b''


# ── Vendor artifacts ─────────────────────────────────────────────────


class TestVendorArtifacts:
    """Tests for vendor bundle handling inside a run."""

    def test_granular_vendor_reads_pom_and_bundle(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test granular vendor reads pom and bundle."""
        _add_pom(repo, _GMS, 'play-services-base', '18.5.0', [('Android SDK', 'SDK TERMS')], display_name='base')
        _add_aar(repo, _GMS, 'play-services-base', '18.5.0', {'JSR 305': 'BSD TEXT', 'Protobuf': 'PB TEXT'})
        result = _run(tmp_path, repo, outputs, [ArtifactInfo(_GMS, 'play-services-base', '18.5.0')])
        assert result.metadata_lines == ('0:9 base', '10:8 JSR 305', '19:7 Protobuf')

    def test_pre_granular_vendor_reads_pom_only(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test pre granular vendor reads pom only."""
        _add_pom(repo, _GMS, 'play-services-base', '13.9.9', [('Android SDK', 'SDK TERMS')], display_name='base')
        _add_aar(repo, _GMS, 'play-services-base', '13.9.9', {'JSR 305': 'BSD TEXT'})
        result = _run(tmp_path, repo, outputs, [ArtifactInfo(_GMS, 'play-services-base', '13.9.9')])
        assert result.metadata_lines == ('0:9 base',)

    def test_license_companion_bundle_only(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test license companion bundle only."""
        _add_pom(repo, _GMS, 'play-services-base-license', '12.0.1', [('Android SDK', 'SDK TERMS')])
        _add_aar(repo, _GMS, 'play-services-base-license', '12.0.1', {'JSR 305': 'BSD TEXT'})
        result = _run(tmp_path, repo, outputs, [ArtifactInfo(_GMS, 'play-services-base-license', '12.0.1')])
        assert result.metadata_lines == ('0:8 JSR 305',)

    def test_bundle_keys_extracted_once_per_run(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test bundle keys extracted once per run."""
        for name in ('play-services-base', 'play-services-maps'):
            _add_pom(repo, _GMS, name, '18.0.0', [('Android SDK', 'SDK TERMS')], display_name=name)
            _add_aar(repo, _GMS, name, '18.0.0', {'JSR 305': 'BSD TEXT'})
        result = _run(
            tmp_path,
            repo,
            outputs,
            [ArtifactInfo(_GMS, 'play-services-base', '18.0.0'), ArtifactInfo(_GMS, 'play-services-maps', '18.0.0')],
        )
        assert result.metadata_lines == ('0:9 play-services-base', '10:8 JSR 305', '0:9 play-services-maps')

    def test_missing_vendor_archive_is_not_fatal(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test missing vendor archive is not fatal."""
        _add_pom(repo, _GMS, 'play-services-base', '18.5.0', [('Android SDK', 'SDK TERMS')], display_name='base')
        result = _run(tmp_path, repo, outputs, [ArtifactInfo(_GMS, 'play-services-base', '18.5.0')])
        assert result.metadata_lines == ('0:9 base',)

    def test_archive_without_bundle(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test archive without bundle."""
        _add_pom(repo, _GMS, 'play-services-base', '18.5.0', [('Android SDK', 'SDK TERMS')], display_name='base')
        _add_aar(repo, _GMS, 'play-services-base', '18.5.0', None)
        result = _run(tmp_path, repo, outputs, [ArtifactInfo(_GMS, 'play-services-base', '18.5.0')])
        assert result.metadata_lines == ('0:9 base',)

    def test_corrupt_vendor_archive_aborts(self, tmp_path: Path, repo: Path, outputs: OutputPaths) -> None:
        """Test corrupt vendor archive aborts."""
        _add_pom(repo, _GMS, 'play-services-base', '18.5.0', [('Android SDK', 'SDK TERMS')])
        version_dir = _version_dir(repo, _GMS, 'play-services-base', '18.5.0')
        (version_dir / 'play-services-base-18.5.0.aar').write_bytes(b'garbage')
        with pytest.raises(LicenseReadError):
            _run(tmp_path, repo, outputs, [ArtifactInfo(_GMS, 'play-services-base', '18.5.0')])
