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


"""Conventional Commits classifier.

Pure implementation: depends only on ``re`` and :mod:`._types`.
No I/O, no logging, no side effects.
"""

from __future__ import annotations

import re

from semrel.commit_parsing._types import Change, Commit

# Subject line: type(scope)!: subject
COMMIT_PATTERN: re.Pattern[str] = re.compile(
    r'^(?P<type>\w+)'  # type (e.g. feat, fix, chore)
    r'(?:\((?P<scope>[^)]*)\))?'  # optional scope in parens
    r'(?P<breaking>!)?'  # optional inline breaking marker
    r': '  # colon + space
    r'(?P<subject>.+)$',  # subject
)

# Footer marker, searched in the whole message.
BREAKING_PATTERN: re.Pattern[str] = re.compile(r'BREAKING[ -]CHANGES?')

MINOR_TYPES: frozenset[str] = frozenset({'feat'})
PATCH_TYPES: frozenset[str] = frozenset({'fix'})


class ConventionalCommitParser:
    """Classifier for `Conventional Commits <https://www.conventionalcommits.org/>`_.

    Args:
        package_scope: When non-empty, only commits whose scope equals it
            exactly (case-sensitive) are classified; every other commit is
            kept for SHA bookkeeping but contributes nothing.
    """

    def __init__(self, package_scope: str = '') -> None:
        """Initialize with an optional package scope filter."""
        self.package_scope = package_scope

    def parse(self, message: str, sha: str = '') -> Commit:
        """Classify one commit message.

        Args:
            message: The full commit message (subject, body and footers).
            sha: The commit SHA.

        Returns:
            A :class:`Commit`. Unmatched or out-of-scope commits have an
            empty ``type`` and all change flags false.
        """
        raw = tuple(message.split('\n'))
        match = COMMIT_PATTERN.match(raw[0].rstrip('\r'))
        if match is None:
            return Commit(sha=sha, raw=raw)

        scope = match.group('scope') or ''
        if self.package_scope and scope != self.package_scope:
            return Commit(sha=sha, raw=raw)

        commit_type = match.group('type').lower()
        breaking = bool(match.group('breaking')) or BREAKING_PATTERN.search(message) is not None
        return Commit(
            sha=sha,
            raw=raw,
            type=commit_type,
            scope=scope,
            subject=match.group('subject'),
            change=Change(
                major=breaking,
                minor=commit_type in MINOR_TYPES,
                patch=commit_type in PATCH_TYPES,
            ),
        )
