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

"""Command-line entry point.

Exit codes:
    0  Outputs generated (or listed).
    1  A fatal error aborted the run.

Usage::

    licensepack generate --dependencies build/dependencies.json \\
        --output-dir build/generated/raw --repository ~/.m2/repository
    licensepack show --output-dir build/generated/raw
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.table import Table

from licensepack import __version__
from licensepack.config import CONFIG_FILENAME, LINE_SEPARATORS, load_config, resolve_config
from licensepack.errors import LicensePackError
from licensepack.logging import configure_logging, get_logger
from licensepack.reader import LicensePackReader
from licensepack.resolver import LocalRepositoryResolver
from licensepack.task import GenerationResult, generate_licenses
from licensepack.writer import LICENSES_FILENAME, METADATA_FILENAME, OutputPaths

__all__ = [
    'build_parser',
    'main',
]

log = get_logger('licensepack.cli')

_PREVIEW_WIDTH = 60


def build_parser() -> argparse.ArgumentParser:
    """Build the ``licensepack`` argument parser."""
    parser = argparse.ArgumentParser(
        prog='licensepack',
        description='Generate deduplicated third-party license packs.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging.')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Log one JSON object per line.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    gen = subparsers.add_parser('generate', help='Regenerate the license pack, metadata and manifest.')
    gen.add_argument('--dependencies', type=Path, required=True, help='Resolved-dependency JSON file.')
    gen.add_argument('--output-dir', type=Path, required=True, help='Raw resource directory for the pack.')
    gen.add_argument('--manifest', type=Path, default=None, help='Extended dependency manifest path.')
    gen.add_argument(
        '--repository',
        type=Path,
        action='append',
        default=None,
        help='Local Maven repository or Gradle cache root (repeatable).',
    )
    gen.add_argument('--config', type=Path, default=None, help=f'Path to {CONFIG_FILENAME} or pyproject.toml.')
    gen.add_argument('--line-separator', choices=sorted(LINE_SEPARATORS), default=None)

    show = subparsers.add_parser('show', help='List the attributions of a generated pack.')
    show.add_argument('--output-dir', type=Path, required=True, help='Directory holding the pack.')

    return parser


def _print_summary(console: Console, result: GenerationResult, outputs: OutputPaths) -> None:
    console.print(
        f'[bold green]✓[/] {result.attributions} attribution(s), '
        f'{result.distinct_texts} distinct license text(s), '
        f'{result.pack_bytes} bytes → {outputs.raw_resource_dir}'
    )
    if result.skipped:
        console.print(f'[yellow]{len(result.skipped)} dependency(ies) without a usable POM:[/]')
        for coordinate in result.skipped:
            console.print(f'  • {coordinate}')


def _cmd_generate(args: argparse.Namespace, console: Console) -> int:
    config = resolve_config(
        load_config(args.config),
        repositories=args.repository,
        line_separator=args.line_separator,
    )
    outputs = OutputPaths.in_directory(args.output_dir, manifest=args.manifest)
    result = generate_licenses(
        dependencies_json=args.dependencies,
        outputs=outputs,
        resolver=LocalRepositoryResolver(config.repositories),
        config=config,
    )
    _print_summary(console, result, outputs)
    return 0


def _cmd_show(args: argparse.Namespace, console: Console) -> int:
    reader = LicensePackReader(args.output_dir / LICENSES_FILENAME, args.output_dir / METADATA_FILENAME)
    table = Table(title=f'{len(reader)} attribution(s)')
    table.add_column('Offset', justify='right')
    table.add_column('Length', justify='right')
    table.add_column('Name')
    table.add_column('License')
    for entry in reader:
        text = reader.read_text(entry).strip()
        preview = text.splitlines()[0] if text else ''
        if len(preview) > _PREVIEW_WIDTH:
            preview = preview[: _PREVIEW_WIDTH - 1] + '…'
        table.add_row(str(entry.offset.start), str(entry.offset.length), entry.name, preview)
    console.print(table)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)
    console = Console()

    try:
        if args.command == 'generate':
            return _cmd_generate(args, console)
        return _cmd_show(args, console)
    except LicensePackError as exc:
        log.error('licensepack_failed', error=str(exc))
        return 1
    except OSError as exc:
        log.error('licensepack_io_failed', error=str(exc))
        return 1


if __name__ == '__main__':
    raise SystemExit(main())
