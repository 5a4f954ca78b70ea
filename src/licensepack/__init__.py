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

"""Generate deduplicated third-party license packs for app builds.

A run turns a resolved dependency list into three files:

- ``third_party_licenses``: every distinct license text, stored once.
- ``third_party_license_metadata``: ``"<offset>:<length> <name>"`` lines
  addressing byte ranges of the pack.
- an extended dependency manifest (JSON) with the resolved license names.

Usage::

    from licensepack.task import generate_licenses

    result = generate_licenses(
        dependencies_json=Path('dependencies.json'),
        outputs=OutputPaths.in_directory(Path('build/raw')),
        resolver=LocalRepositoryResolver([Path('~/.m2/repository')]),
    )
"""

__version__ = '0.1.0'
