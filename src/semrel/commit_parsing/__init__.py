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


"""Commit message classification.

Turns raw commit messages into :class:`Commit` records carrying the
conventional-commit type, scope, subject and the bump flags the commit
contributes. Both repository backends call :func:`classify`, so the
grammar lives in exactly one place.

Usage::

    from semrel.commit_parsing import BumpType, classify

    commit = classify('feat(pkgA): add export', sha='abc123', package_scope='pkgA')
    assert commit.type == 'feat'
    assert commit.change.bump == BumpType.MINOR

    # Out-of-scope commits are kept but carry nothing.
    other = classify('feat(pkgB): add export', sha='def456', package_scope='pkgA')
    assert other.type == ''
"""

from semrel.commit_parsing._conventional import (
    BREAKING_PATTERN,
    COMMIT_PATTERN,
    ConventionalCommitParser,
)
from semrel.commit_parsing._types import (
    BUMP_PRECEDENCE,
    BumpType,
    Change,
    Commit,
    max_bump,
)


def classify(message: str, sha: str = '', package_scope: str = '') -> Commit:
    """Classify a single commit message.

    Convenience wrapper around :meth:`ConventionalCommitParser.parse`.

    Args:
        message: The full commit message.
        sha: The commit SHA.
        package_scope: Optional scope filter (see :class:`ConventionalCommitParser`).
    """
    return ConventionalCommitParser(package_scope).parse(message, sha=sha)


__all__ = [
    'BREAKING_PATTERN',
    'BUMP_PRECEDENCE',
    'COMMIT_PATTERN',
    'BumpType',
    'Change',
    'Commit',
    'ConventionalCommitParser',
    'classify',
    'max_bump',
]
