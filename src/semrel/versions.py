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


"""Semantic versions, version constraints and release records.

Key Concepts::

    ┌─────────────────────────┬─────────────────────────────────────────────┐
    │ Concept                 │ Plain-English                               │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Version                 │ ``MAJOR.MINOR.PATCH[-pre][+build]``, ordered│
    │                         │ by SemVer 2.0.0 precedence. Build metadata  │
    │                         │ never affects ordering or equality.         │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ VersionConstraint       │ A maintenance line such as ``1.x``,         │
    │                         │ ``~1.2``, ``>=1.0.0 <2.0.0`` or a           │
    │                         │ pre-release line like ``2.0.0-beta``.       │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Release                 │ A tag's commit SHA plus its parsed version. │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ NoPriorRelease          │ "Nothing was released on this line yet".    │
    │                         │ Reads as SHA ``''`` / version ``0.0.0`` so  │
    │                         │ bump arithmetic has a baseline, but is its  │
    │                         │ own type so callers can tell it apart.      │
    └─────────────────────────┴─────────────────────────────────────────────┘

Precedence examples::

    1.0.0-alpha < 1.0.0-alpha.1 < 1.0.0-beta < 1.0.0-beta.2 < 1.0.0-rc.1 < 1.0.0
    1.9.0 < 1.10.0 < 2.0.0
"""

from __future__ import annotations

import functools
import operator
import re
from collections.abc import Callable
from dataclasses import dataclass, field

from semrel.errors import E, SemrelError

# Lenient SemVer: optional "v", minor/patch may be omitted (coerced to 0).
_VERSION_RE = re.compile(
    r'^v?(?P<major>\d+)'
    r'(?:\.(?P<minor>\d+))?'
    r'(?:\.(?P<patch>\d+))?'
    r'(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?'
    r'(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$'
)

# One constraint term: optional operator followed by a (partial) version.
_TERM_RE = re.compile(
    r'(?P<op>!=|>=|<=|==|~>|=|>|<|~|\^)?\s*'
    r'(?P<version>v?(?:\d+|[xX*])(?:\.(?:\d+|[xX*]))*(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?)'
)

_WILDCARDS: frozenset[str] = frozenset({'x', 'X', '*'})


def _prerelease_key(prerelease: tuple[str, ...]) -> tuple[object, ...]:
    """Sort key for pre-release identifiers (a release sorts last)."""
    if not prerelease:
        return (1,)
    idents: list[tuple[int, int, str]] = []
    for ident in prerelease:
        if ident.isdigit():
            idents.append((0, int(ident), ''))
        else:
            idents.append((1, 0, ident))
    return (0, tuple(idents))


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A semantic version.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        prerelease: Dot-separated pre-release identifiers (``('beta', '2')``).
        build: Dot-separated build metadata identifiers.
    """

    major: int
    minor: int = 0
    patch: int = 0
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a version string such as ``v1.2.3-rc.1+build.5``.

        Raises:
            SemrelError: If ``text`` is not a semantic version.
        """
        m = _VERSION_RE.match(text.strip())
        if m is None:
            raise SemrelError(
                code=E.VERSION_INVALID,
                message=f'{text!r} is not a semantic version',
                hint='Use MAJOR.MINOR.PATCH with optional -prerelease and +build parts.',
            )
        prerelease = m.group('prerelease')
        build = m.group('build')
        return cls(
            major=int(m.group('major')),
            minor=int(m.group('minor') or 0),
            patch=int(m.group('patch') or 0),
            prerelease=tuple(prerelease.split('.')) if prerelease else (),
            build=tuple(build.split('.')) if build else (),
        )

    def _key(self) -> tuple[object, ...]:
        return (self.major, self.minor, self.patch, _prerelease_key(self.prerelease))

    def __eq__(self, other: object) -> bool:
        """Compare by precedence; build metadata is ignored."""
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: Version) -> bool:
        """Order by SemVer precedence."""
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        """Hash consistently with :meth:`__eq__`."""
        return hash(self._key())

    def __str__(self) -> str:
        """Render as ``MAJOR.MINOR.PATCH[-pre][+build]``."""
        text = f'{self.major}.{self.minor}.{self.patch}'
        if self.prerelease:
            text += '-' + '.'.join(self.prerelease)
        if self.build:
            text += '+' + '.'.join(self.build)
        return text

    @property
    def is_prerelease(self) -> bool:
        """Whether the version carries a pre-release component."""
        return bool(self.prerelease)

    @property
    def base(self) -> Version:
        """The numeric triple alone."""
        return Version(self.major, self.minor, self.patch)

    def bump_major(self) -> Version:
        """Increment major; zero minor and patch; drop pre-release and build."""
        return Version(self.major + 1, 0, 0)

    def bump_minor(self) -> Version:
        """Increment minor; zero patch; drop pre-release and build."""
        return Version(self.major, self.minor + 1, 0)

    def bump_patch(self) -> Version:
        """Increment patch; drop pre-release and build."""
        return Version(self.major, self.minor, self.patch + 1)

    def with_prerelease(self, prerelease: tuple[str, ...]) -> Version:
        """Return the same numeric triple with a new pre-release (build dropped)."""
        return Version(self.major, self.minor, self.patch, prerelease)


INITIAL_VERSION = Version(0, 0, 0)

_OPS: dict[str, Callable[[Version, Version], bool]] = {
    '=': operator.eq,
    '!=': operator.ne,
    '>': operator.gt,
    '>=': operator.ge,
    '<': operator.lt,
    '<=': operator.le,
}


@dataclass(frozen=True)
class _Comparator:
    op: str
    version: Version

    def allows(self, version: Version) -> bool:
        return _OPS[self.op](version, self.version)

    def admits_prerelease(self, version: Version) -> bool:
        return self.version.is_prerelease and self.version.base == version.base


@dataclass(frozen=True)
class _PrereleaseLine:
    version: Version

    def allows(self, version: Version) -> bool:
        n = len(self.version.prerelease)
        return version.base == self.version.base and version.prerelease[:n] == self.version.prerelease

    def admits_prerelease(self, version: Version) -> bool:
        return self.allows(version)


_Term = _Comparator | _PrereleaseLine


def _invalid_constraint(text: str, reason: str) -> SemrelError:
    return SemrelError(
        code=E.MAINTENANCE_INVALID,
        message=f'Invalid version constraint {text!r}: {reason}',
        hint="Use forms like '1.x', '1.2', '~1.2', '^1.2.3', '>=1.0.0 <2.0.0' or '2.0.0-beta'.",
    )


def _split_partial(text: str, raw: str) -> list[int] | None:
    """Numeric components of a partial version, or None if it is a full version."""
    body = raw[1:] if raw.startswith('v') else raw
    if '-' in body or '+' in body:
        return None
    parts = body.split('.')
    if len(parts) > 3:
        raise _invalid_constraint(text, f'{raw!r} has more than three components')
    nums: list[int] = []
    seen_wildcard = False
    for part in parts:
        if part in _WILDCARDS:
            seen_wildcard = True
            continue
        if seen_wildcard:
            raise _invalid_constraint(text, f'{raw!r} has a number after a wildcard')
        nums.append(int(part))
    if len(nums) == 3:
        return None
    return nums


def _padded(nums: list[int]) -> Version:
    return Version(*(nums + [0] * (3 - len(nums))))


def _prefix_upper(nums: list[int]) -> Version | None:
    """Smallest version outside the prefix line ``nums`` (None for ``*``)."""
    if not nums:
        return None
    if len(nums) == 1:
        return Version(nums[0] + 1)
    return Version(nums[0], nums[1] + 1)


def _caret_upper(major: int, minor: int, patch: int, depth: int) -> Version:
    if major > 0 or depth == 1:
        return Version(major + 1)
    if minor > 0 or depth == 2:
        return Version(0, minor + 1)
    return Version(0, 0, patch + 1)


def _parse_term(text: str, op: str, raw: str) -> list[_Term]:
    op = '=' if op == '==' else op
    nums = _split_partial(text, raw)

    if nums is None:
        try:
            version = Version.parse(raw)
        except SemrelError as exc:
            raise _invalid_constraint(text, f'{raw!r} is not a version') from exc
        if not op:
            if version.is_prerelease:
                return [_PrereleaseLine(version)]
            return [_Comparator('=', version)]
        if op in ('~', '~>'):
            return [_Comparator('>=', version), _Comparator('<', Version(version.major, version.minor + 1))]
        if op == '^':
            upper = _caret_upper(version.major, version.minor, version.patch, 3)
            return [_Comparator('>=', version), _Comparator('<', upper)]
        return [_Comparator(op, version)]

    lower = _padded(nums)
    upper = _prefix_upper(nums)
    if op in ('', '=', '~', '~>'):
        terms: list[_Term] = [_Comparator('>=', lower)]
        if upper is not None:
            terms.append(_Comparator('<', upper))
        return terms
    if op == '^':
        if not nums:
            return [_Comparator('>=', lower)]
        return [_Comparator('>=', lower), _Comparator('<', _caret_upper(lower.major, lower.minor, lower.patch, len(nums)))]
    if op == '>=':
        return [_Comparator('>=', lower)]
    if op == '<':
        return [_Comparator('<', lower)]
    if op == '>':
        if upper is None:
            raise _invalid_constraint(text, "'>*' can never match")
        return [_Comparator('>=', upper)]
    if op == '<=':
        return [] if upper is None else [_Comparator('<', upper)]
    raise _invalid_constraint(text, f"operator {op!r} needs a full MAJOR.MINOR.PATCH version")


@dataclass(frozen=True)
class VersionConstraint:
    """A set of acceptable versions, parsed from a maintenance-line string.

    Alternatives are separated by ``||``; terms inside one alternative
    (separated by whitespace or commas) must all hold. Ranges only admit
    pre-release versions when one of their own bounds is a pre-release of
    the same ``MAJOR.MINOR.PATCH``, so ``1.x`` never selects ``1.3.0-rc.1``.

    Attributes:
        text: The constraint string as given.
    """

    text: str
    alternatives: tuple[tuple[_Term, ...], ...] = field(default=(), repr=False)

    @classmethod
    def parse(cls, text: str) -> VersionConstraint:
        """Parse a constraint string.

        Raises:
            SemrelError: ``SR-MAINTENANCE-INVALID`` if the string is malformed.
        """
        alternatives: list[tuple[_Term, ...]] = []
        for chunk in text.split('||'):
            chunk = chunk.strip()
            if not chunk:
                raise _invalid_constraint(text, 'empty alternative')
            terms: list[_Term] = []
            consumed = 0
            for m in _TERM_RE.finditer(chunk):
                gap = chunk[consumed : m.start()]
                if gap.strip(' ,\t'):
                    raise _invalid_constraint(text, f'unexpected {gap.strip()!r}')
                terms.extend(_parse_term(text, m.group('op') or '', m.group('version')))
                consumed = m.end()
            if consumed == 0 or chunk[consumed:].strip(' ,\t'):
                raise _invalid_constraint(text, f'cannot parse {chunk!r}')
            alternatives.append(tuple(terms))
        return cls(text=text, alternatives=tuple(alternatives))

    def allows(self, version: Version) -> bool:
        """Return ``True`` if ``version`` satisfies the constraint."""
        for terms in self.alternatives:
            if not all(term.allows(version) for term in terms):
                continue
            if version.is_prerelease and not any(term.admits_prerelease(version) for term in terms):
                continue
            return True
        return False

    def __str__(self) -> str:
        """Return the constraint text as given."""
        return self.text


@dataclass(frozen=True)
class Release:
    """A previous release: the tagged commit and its version.

    Attributes:
        sha: Commit SHA the release tag points at.
        version: Parsed version of the tag.
    """

    sha: str
    version: Version


@dataclass(frozen=True)
class NoPriorRelease:
    """No release exists yet on the selected line (first-ever release)."""

    sha: str = field(default='', init=False)
    version: Version = field(default=INITIAL_VERSION, init=False)


PriorRelease = Release | NoPriorRelease


__all__ = [
    'INITIAL_VERSION',
    'NoPriorRelease',
    'PriorRelease',
    'Release',
    'Version',
    'VersionConstraint',
]
