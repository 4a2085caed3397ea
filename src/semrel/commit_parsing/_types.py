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


"""Pure types for commit classification.

This module has **zero** runtime dependencies beyond the standard library.
Everything here is a frozen dataclass or an enum: no I/O, no logging, no
side effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class BumpType(Enum):
    """Semver bump types, ordered by precedence (highest first).

    The "strongest" bump wins across a set of commits: one breaking
    commit makes the whole release ``MAJOR`` no matter how many
    ``feat:`` or ``fix:`` commits come with it.
    """

    MAJOR = 'major'
    MINOR = 'minor'
    PATCH = 'patch'
    NONE = 'none'


# Bump precedence: lower index = higher precedence.
BUMP_PRECEDENCE: list[BumpType] = [
    BumpType.MAJOR,
    BumpType.MINOR,
    BumpType.PATCH,
    BumpType.NONE,
]


def max_bump(a: BumpType, b: BumpType) -> BumpType:
    """Return the higher-precedence bump type.

    >>> max_bump(BumpType.MINOR, BumpType.PATCH)
    <BumpType.MINOR: 'minor'>
    >>> max_bump(BumpType.NONE, BumpType.MAJOR)
    <BumpType.MAJOR: 'major'>
    """
    a_idx = BUMP_PRECEDENCE.index(a)
    b_idx = BUMP_PRECEDENCE.index(b)
    return BUMP_PRECEDENCE[min(a_idx, b_idx)]


@dataclass(frozen=True)
class Change:
    """Importance flags contributed by one commit.

    The flags are independent for a single commit (a breaking ``fix`` has
    both ``major`` and ``patch`` set) and are OR-ed across a commit set.

    Attributes:
        major: The commit carries a breaking-change marker.
        minor: The commit is a ``feat``.
        patch: The commit is a ``fix``.
    """

    major: bool = False
    minor: bool = False
    patch: bool = False

    @property
    def bump(self) -> BumpType:
        """The strongest bump these flags call for."""
        if self.major:
            return BumpType.MAJOR
        if self.minor:
            return BumpType.MINOR
        if self.patch:
            return BumpType.PATCH
        return BumpType.NONE

    def __or__(self, other: Change) -> Change:
        """Combine two changes flag by flag."""
        return Change(
            major=self.major or other.major,
            minor=self.minor or other.minor,
            patch=self.patch or other.patch,
        )


@dataclass(frozen=True)
class Commit:
    """One commit, classified against a package scope.

    A commit whose subject is not a conventional commit, or whose scope
    is not the configured package, keeps its SHA and raw message but has
    an empty ``type`` and no change flags.

    Attributes:
        sha: The full commit SHA, preserved exactly as the provider sent it.
        raw: The full message split on newlines.
        type: Lowercased commit type (``"feat"``, ``"fix"``...), or ``""``.
        scope: The scope from ``type(scope):``, or ``""``.
        subject: The text after ``: `` on the first line, or ``""``.
        change: The bump flags this commit contributes.
    """

    sha: str
    raw: tuple[str, ...] = ()
    type: str = ''
    scope: str = ''
    subject: str = ''
    change: Change = field(default_factory=Change)

    @property
    def classified(self) -> bool:
        """Whether the commit was accepted as a conventional commit in scope."""
        return bool(self.type)

    @property
    def body(self) -> tuple[str, ...]:
        """Message lines after the subject line."""
        return self.raw[1:]
