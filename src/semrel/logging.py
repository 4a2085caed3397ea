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


"""Structured logging for semrel.

Every event is a snake_case name plus key/value fields, rendered by
`structlog <https://www.structlog.org/>`_ on stderr so stdout carries only
the computed result (``semrel version | xargs echo``)::

    2026-10-18T09:12:03Z [info ] found_version  provider=GitHub repo=acme/widgets
                                                 package=pkgA branch=main version=1.2.0

``--json-log`` switches to one JSON object per line for CI log scrapers.

A release run concerns exactly one repository, package and branch;
:func:`bind_run_context` attaches them once so every later event (from the
selector, the providers, the HTTP layer...) carries them without each call
site repeating them.

Usage::

    from semrel.logging import bind_run_context, configure_logging, get_logger

    configure_logging(verbose=True)
    bind_run_context(provider='GitHub', repo='acme/widgets', package='pkgA', branch='main')
    log = get_logger(__name__)
    log.info('found_version', version='1.2.0')
"""

from __future__ import annotations

import logging
import sys

import structlog

# Fields bound by bind_run_context, in the order they are rendered.
RUN_CONTEXT_KEYS: tuple[str, ...] = ('provider', 'repo', 'package', 'branch')


def _level(*, verbose: bool, quiet: bool) -> int:
    # --quiet wins: CI jobs pass both when they only want the result.
    if quiet:
        return logging.WARNING
    return logging.DEBUG if verbose else logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
) -> None:
    """Route structlog through the stdlib root logger on stderr.

    Safe to call more than once; the last call wins. Any run context bound
    by a previous call is cleared.

    Args:
        verbose: Emit debug events (every provider request, skipped tags).
        quiet: Only emit warnings and errors.
        json_log: Render JSON lines instead of console output.
    """
    logging.basicConfig(
        format='%(message)s',
        stream=sys.stderr,
        level=_level(verbose=verbose, quiet=quiet),
        force=True,
    )
    structlog.contextvars.clear_contextvars()

    if json_log:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(sort_keys=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt='iso', utc=True),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def bind_run_context(**fields: str) -> None:
    """Attach the run's identity to every later event.

    Only :data:`RUN_CONTEXT_KEYS` are accepted; empty values are left out
    (no package scope, for instance).

    Raises:
        TypeError: On a key outside :data:`RUN_CONTEXT_KEYS`.
    """
    unknown = sorted(set(fields) - set(RUN_CONTEXT_KEYS))
    if unknown:
        msg = f'unknown run context field(s): {", ".join(unknown)}'
        raise TypeError(msg)
    structlog.contextvars.bind_contextvars(**{key: fields[key] for key in RUN_CONTEXT_KEYS if fields.get(key)})


def get_logger(name: str = 'semrel') -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)


__all__ = [
    'RUN_CONTEXT_KEYS',
    'bind_run_context',
    'configure_logging',
    'get_logger',
]
