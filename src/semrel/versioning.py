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


"""Version resolution from classified commits.

Folds the change flags of every commit since the previous release into a
single bump and applies it to the previous version.

Conventional Commit → BumpType mapping::

    BREAKING CHANGE (or ``!``)  →  major
    feat:                       →  minor
    fix:                        →  patch
    docs:, chore:, ci:, etc.    →  none

The fold is order-independent: one breaking commit anywhere makes the
release ``MAJOR``, even if that commit is a ``fix``.

When nothing qualifies, :func:`get_new_version` returns ``None`` and the
branch policy in :func:`fallback_bump` decides: the default line advances
by a minor, every other tracked line (hotfix / maintenance) by a patch.

Pre-release lines (a maintained version such as ``2.0.0-beta``) never
leave their numeric triple; the pre-release counter advances instead::

    2.0.0-beta.3  --(any bump)-->  2.0.0-beta.4
    2.0.0-beta    --(any bump)-->  2.0.0-beta.1
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from semrel.commit_parsing import BumpType, Change, Commit
from semrel.errors import E, SemrelError
from semrel.logging import get_logger
from semrel.versions import PriorRelease, Release, Version

logger = get_logger(__name__)


@dataclass(frozen=True)
class BranchContext:
    """Where the release is being cut from.

    Attributes:
        branch: The branch being released.
        default_branch: The repository's default (mainline) branch.
        maintained_version: Maintenance constraint for this run, if any.
            A value containing ``-`` requests a pre-release line.
        allow_initial_development_versions: When ``False``, any change on
            a ``0.x`` version jumps straight to ``1.0.0``.
    """

    branch: str
    default_branch: str
    maintained_version: str = ''
    allow_initial_development_versions: bool = True

    @property
    def is_default_line(self) -> bool:
        """Whether this run releases the mainline."""
        return self.branch == self.default_branch and not self.maintained_version

    @property
    def prerelease_line(self) -> bool:
        """Whether this run continues a maintained pre-release line."""
        return '-' in self.maintained_version


def check_prerelease_line(prior: PriorRelease, context: BranchContext) -> None:
    """Fail fast if a pre-release line has no pre-release to continue.

    Raises:
        SemrelError: ``SR-MAINTENANCE-INVALID``.
    """
    if context.prerelease_line and not prior.version.is_prerelease:
        raise SemrelError(
            code=E.MAINTENANCE_INVALID,
            message=(
                f'No pre-release possible for {context.maintained_version!r}: '
                f'previous release {prior.version} has no pre-release component'
            ),
            hint='Tag the first pre-release of this line by hand, or drop the pre-release part.',
        )


def calculate_change(commits: Iterable[Commit], prior: PriorRelease | None = None) -> BumpType:
    """Fold the change flags of ``commits`` into one bump.

    Commits are expected newest-first. When ``prior`` is a real release,
    the fold stops at its commit so already-released history never counts.
    """
    stop_sha = prior.sha if isinstance(prior, Release) else ''
    change = Change()
    for commit in commits:
        if stop_sha and commit.sha == stop_sha:
            break
        change = change | commit.change
    return change.bump


def _next_prerelease(prerelease: tuple[str, ...]) -> tuple[str, ...]:
    label = prerelease[0]
    if len(prerelease) > 1 and prerelease[1].isdigit():
        return (label, str(int(prerelease[1]) + 1))
    return (label, '1')


def apply_change(
    version: Version,
    bump: BumpType,
    *,
    prerelease_line: bool = False,
    allow_initial_development_versions: bool = True,
) -> Version | None:
    """Apply ``bump`` to ``version``.

    Args:
        version: The previous version.
        bump: The bump to apply.
        prerelease_line: Advance the pre-release counter instead of the
            numeric triple.
        allow_initial_development_versions: When ``False``, a ``0.x``
            version always takes a major bump.

    Returns:
        The new version, or ``None`` for :attr:`BumpType.NONE`.

    Raises:
        SemrelError: ``SR-MAINTENANCE-INVALID`` if ``prerelease_line`` is
            set but ``version`` is not a pre-release.
    """
    if bump == BumpType.NONE:
        return None

    if prerelease_line:
        if not version.is_prerelease:
            raise SemrelError(
                code=E.MAINTENANCE_INVALID,
                message=f'Cannot continue a pre-release line from {version}',
            )
        return version.with_prerelease(_next_prerelease(version.prerelease))

    if version.major == 0 and not allow_initial_development_versions:
        bump = BumpType.MAJOR

    if bump == BumpType.MAJOR:
        return version.bump_major()
    if bump == BumpType.MINOR:
        return version.bump_minor()
    return version.bump_patch()


def get_new_version(
    commits: Iterable[Commit],
    prior: PriorRelease,
    context: BranchContext,
) -> Version | None:
    """Compute the next version from commits alone.

    Returns:
        The new version, or ``None`` if no commit qualifies for a bump.
    """
    check_prerelease_line(prior, context)
    bump = calculate_change(commits, prior)
    logger.debug('change_calculated', bump=bump.value, previous=str(prior.version))
    return apply_change(
        prior.version,
        bump,
        prerelease_line=context.prerelease_line,
        allow_initial_development_versions=context.allow_initial_development_versions,
    )


def fallback_bump(context: BranchContext) -> BumpType:
    """Bump used when no commit qualifies: minor on the mainline, patch elsewhere."""
    return BumpType.MINOR if context.is_default_line else BumpType.PATCH


def resolve_version(
    commits: Iterable[Commit],
    prior: PriorRelease,
    context: BranchContext,
) -> Version:
    """Compute the next version, falling back to the branch policy.

    Tracked branches always advance, so this never returns ``None``.
    """
    commits = list(commits)
    new_version = get_new_version(commits, prior, context)
    if new_version is not None:
        return new_version

    bump = fallback_bump(context)
    logger.info(
        'no_qualifying_commits',
        fallback=bump.value,
        branch=context.branch,
        default_line=context.is_default_line,
    )
    fallback = apply_change(
        prior.version,
        bump,
        prerelease_line=context.prerelease_line,
        allow_initial_development_versions=context.allow_initial_development_versions,
    )
    if fallback is None:
        msg = f'fallback bump {bump.value} produced no version'
        raise RuntimeError(msg)
    return fallback


__all__ = [
    'BranchContext',
    'apply_change',
    'calculate_change',
    'check_prerelease_line',
    'fallback_bump',
    'get_new_version',
    'resolve_version',
]
