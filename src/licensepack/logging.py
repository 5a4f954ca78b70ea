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

"""Structured logging for licensepack.

Log output goes to stderr, either through structlog's console renderer or
as one JSON object per line (``--json-log``). stdout is reserved for the
rich summary printed by ``licensepack generate`` and the table printed by
``licensepack show``, so either can be piped without log noise.

Levels map onto the two error tiers of a run::

    ┌─────────┬──────────────────────────────────────────────────────────┐
    │ Level   │ Events                                                   │
    ├─────────┼──────────────────────────────────────────────────────────┤
    │ error   │ pom_not_found, license_file_undefined,                   │
    │         │ licensepack_failed                                       │
    │ warning │ pom_unparseable, vendor_archive_not_found,               │
    │         │ unparseable_vendor_version                               │
    │ info    │ license_pack_generated (one line per run)                │
    │ debug   │ resolved_pom, license_text_reused, duplicate_key_skipped │
    └─────────┴──────────────────────────────────────────────────────────┘

``-q`` keeps only the first two rows, so a CI log shows exactly the
dependencies that were skipped. ``-v`` adds the per-artifact resolution
and dedup decisions.

POM and archive paths point deep into ``~/.m2`` or the Gradle module
cache; :func:`shorten_home_paths` rewrites the home directory prefix of
every event value to ``~``.

Usage::

    from licensepack.logging import configure_logging, get_logger

    configure_logging(quiet=True, json_log=True)
    log = get_logger('licensepack.task')
    log.warning('vendor_archive_not_found', artifact='com.google.firebase:firebase-common:21.0.0')
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog


def _level(*, verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    return logging.DEBUG if verbose else logging.INFO


def _renderer(json_log: bool) -> structlog.types.Processor:
    if json_log:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
    shorten_paths: bool = True,
) -> None:
    """Route structlog through the stdlib root logger on stderr.

    Safe to call again; each call replaces the previous handlers.

    Args:
        verbose: Include debug events.
        quiet: Only warnings and errors. Wins over *verbose*.
        json_log: Render JSON lines instead of console output.
        shorten_paths: Rewrite the home directory prefix to ``~``.
    """
    logging.basicConfig(
        format='%(message)s',
        stream=sys.stderr,
        level=_level(verbose=verbose, quiet=quiet),
        force=True,
    )

    global _home_prefix  # noqa: PLW0603
    _home_prefix = str(Path.home()) if shorten_paths else ''

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            shorten_home_paths,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(json_log),
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = 'licensepack') -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger.

    Args:
        name: Logger name, used for filtering and identification.

    Returns:
        A :class:`structlog.stdlib.BoundLogger` instance.
    """
    return structlog.get_logger(name)


# Populated by configure_logging(); empty disables the rewrite.
_home_prefix: str = ''


def _shorten(value: object) -> object:
    if not _home_prefix:
        return value
    if isinstance(value, Path):
        value = str(value)
    if isinstance(value, str) and (value == _home_prefix or value.startswith(_home_prefix + os.sep)):
        return '~' + value[len(_home_prefix) :]
    return value


def shorten_home_paths(
    logger: Any,  # noqa: ANN401
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor: rewrite ``$HOME/...`` values to ``~/...``."""
    if not _home_prefix:
        return event_dict
    return {k: _shorten(v) for k, v in event_dict.items()}


__all__ = [
    'configure_logging',
    'get_logger',
    'shorten_home_paths',
]
