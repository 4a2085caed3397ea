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


"""Structured error system for semrel.

Every error has a unique ``SR-NAMED-KEY`` code, a human-readable message,
and an optional hint with a suggested fix. A failed resolution never
produces a tag, a release or a changelog write: each error below is
terminal for the run that raised it.

Code categories::

    SR-CONFIG-*        Configuration errors
    SR-SLUG-*          Repository identifier errors
    SR-BRANCH-*        Branch identity errors
    SR-MAINTENANCE-*   Maintenance / pre-release line errors
    SR-VERSION-*       Version parsing errors
    SR-COMMIT-*        Commit lookup errors
    SR-PROVIDER-*      GitHub / GitLab transport errors
    SR-UPDATE-*        Manifest update errors

Usage::

    from semrel.errors import E, SemrelError

    raise SemrelError(
        code=E.SLUG_MALFORMED,
        message="Repository slug 'widgets' is not in owner/name form",
        hint='Pass --slug acme/widgets.',
    )
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.markup import escape as rich_escape


class ErrorCode(str, Enum):
    """Enumeration of all semrel diagnostic codes."""

    # Configuration
    CONFIG_INVALID_KEY = 'SR-CONFIG-INVALID-KEY'
    CONFIG_INVALID_VALUE = 'SR-CONFIG-INVALID-VALUE'
    CONFIG_PARSE_ERROR = 'SR-CONFIG-PARSE-ERROR'
    CONFIG_MISSING_REQUIRED = 'SR-CONFIG-MISSING-REQUIRED'

    # Repository identity
    SLUG_MALFORMED = 'SR-SLUG-MALFORMED'
    BRANCH_NO_DEFAULT = 'SR-BRANCH-NO-DEFAULT'
    BRANCH_NO_CURRENT = 'SR-BRANCH-NO-CURRENT'

    # Resolution
    MAINTENANCE_INVALID = 'SR-MAINTENANCE-INVALID'
    VERSION_INVALID = 'SR-VERSION-INVALID'
    COMMIT_NOT_FOUND = 'SR-COMMIT-NOT-FOUND'

    # Provider
    PROVIDER_FAILURE = 'SR-PROVIDER-FAILURE'
    PROVIDER_AUTH = 'SR-PROVIDER-AUTH'

    # Post-release side effects
    UPDATE_FAILED = 'SR-UPDATE-FAILED'


# Convenience alias for shorter imports.
E = ErrorCode


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata for a single error code.

    Attributes:
        code: The ``SR-NAMED-KEY`` error code.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    code: ErrorCode
    message: str
    hint: str = ''


class SemrelError(Exception):
    """Base exception for all semrel errors.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(f'[{code.value}] {message}')

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def hint(self) -> str:
        """Suggestion for fixing this error, or empty string."""
        return self.info.hint


ERRORS: dict[ErrorCode, ErrorInfo] = {
    E.SLUG_MALFORMED: ErrorInfo(
        code=E.SLUG_MALFORMED,
        message='The repository slug is not in owner/name form.',
        hint="Pass --slug owner/name or set 'slug' in semrel.toml.",
    ),
    E.BRANCH_NO_DEFAULT: ErrorInfo(
        code=E.BRANCH_NO_DEFAULT,
        message='The repository did not report a default branch.',
        hint="Set 'default_branch' in semrel.toml or pass --default-branch.",
    ),
    E.BRANCH_NO_CURRENT: ErrorInfo(
        code=E.BRANCH_NO_CURRENT,
        message='The current branch could not be determined.',
        hint='Pass --branch with the branch being released.',
    ),
    E.MAINTENANCE_INVALID: ErrorInfo(
        code=E.MAINTENANCE_INVALID,
        message='The maintained version cannot be released from this line.',
        hint=(
            'A pre-release maintained version needs an earlier pre-release tag on the same line, '
            'and maintained versions are never released from the default branch.'
        ),
    ),
    E.COMMIT_NOT_FOUND: ErrorInfo(
        code=E.COMMIT_NOT_FOUND,
        message='The commit hash to release was not found in the fetched history.',
        hint='Check --commit-hash; it must be reachable from --sha and newer than the previous release.',
    ),
    E.PROVIDER_FAILURE: ErrorInfo(
        code=E.PROVIDER_FAILURE,
        message='The GitHub or GitLab API returned an error.',
        hint='Re-run with --verbose to see the failing request.',
    ),
    E.PROVIDER_AUTH: ErrorInfo(
        code=E.PROVIDER_AUTH,
        message='No API token was found for the repository provider.',
        hint='Pass --token or set GITHUB_TOKEN / GITLAB_TOKEN.',
    ),
}


def explain(code: str) -> str | None:
    """Return a detailed explanation for an error code.

    Args:
        code: The error code string, e.g. ``"SR-SLUG-MALFORMED"``.

    Returns:
        A formatted explanation string, or ``None`` if the code is unknown.
    """
    try:
        error_code = ErrorCode(code)
    except ValueError:
        return None

    info = ERRORS.get(error_code)
    if info is None:
        return f'{code}: No detailed explanation available.'

    lines = [f'{code}: {info.message}']
    if info.hint:
        lines.append(f'  Hint: {info.hint}')
    return '\n'.join(lines)


def render_error(exc: SemrelError, *, file: TextIO | None = None) -> None:
    """Render an error in Rust-compiler style, colored on a TTY.

    Output format::

        error[SR-SLUG-MALFORMED]: Repository slug 'widgets' is not in owner/name form
          |
          = hint: Pass --slug acme/widgets.

    Args:
        exc: The error to render.
        file: Output stream (defaults to ``sys.stderr``).
    """
    out = file or sys.stderr

    if out.isatty():
        console = Console(file=out, highlight=False)
        msg = rich_escape(exc.info.message)
        console.print(
            f'[bold red]error[/bold red][bold red]\\[{exc.code.value}][/bold red][bold]: {msg}[/bold]',
        )
        if exc.hint:
            hint = rich_escape(exc.hint)
            console.print('  [dim]|[/dim]')
            console.print(f'  [dim]=[/dim] [cyan]hint[/cyan]: {hint}')
        console.print()
    else:
        print(f'error[{exc.code.value}]: {exc.info.message}', file=out)  # noqa: T201 - CLI output
        if exc.hint:
            print('  |', file=out)  # noqa: T201 - CLI output
            print(f'  = hint: {exc.hint}', file=out)  # noqa: T201 - CLI output
        print(file=out)  # noqa: T201 - CLI output


__all__ = [
    'E',
    'ERRORS',
    'ErrorCode',
    'ErrorInfo',
    'SemrelError',
    'explain',
    'render_error',
]
