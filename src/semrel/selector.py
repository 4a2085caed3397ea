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


"""Previous-release selection among candidate tags.

Given every tag the repository backend returned, picks the single release
the next version is computed from.

Selection pipeline::

    (tag, sha) candidates, in provider order
         │
         ├── strip "<package>-release-" when present
         ├── --match regex?       → must match at the start, else drop
         ├── not a semver?        → drop (silently; logged at debug)
         ├── pre-release?         → drop unless --maintained-version is set
         ├── --maintained-version → must satisfy the constraint
         ├── hotfix branch?       → numeric prefix must match the line
         │
         ▼
    greatest version wins (first-seen on ties)
         │
         ▼
    Release(sha, version)   or   NoPriorRelease() if nothing survived

An empty pool is never an error: no tags at all means a first-ever
release, and a maintenance line without tags means the first release on
that line.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from semrel.errors import SemrelError
from semrel.logging import get_logger
from semrel.tags import hotfix_suffix, strip_release_prefix
from semrel.versions import NoPriorRelease, PriorRelease, Release, Version, VersionConstraint

logger = get_logger(__name__)


@dataclass(frozen=True)
class TagCandidate:
    """A raw tag as listed by the repository backend.

    Attributes:
        tag: Tag name without ``refs/tags/``.
        sha: SHA of the commit the tag points at.
    """

    tag: str
    sha: str


def hotfix_line(suffix: str) -> tuple[int, ...] | None:
    """Numeric prefix a hotfix branch suffix restricts releases to.

    ``'1.2'`` and ``'v1.2'`` give ``(1, 2)``; a full version such as
    ``'1.2.0'`` anchors the patch line of its ``MAJOR.MINOR`` and also
    gives ``(1, 2)``. Returns ``None`` when the suffix has no numeric
    prefix at all.
    """
    body = suffix[1:] if suffix.startswith('v') else suffix
    nums: list[int] = []
    for part in body.split('.'):
        if not part.isdigit():
            break
        nums.append(int(part))
    if not nums:
        return None
    return tuple(nums[:2])


def _on_line(version: Version, line: tuple[int, ...]) -> bool:
    return (version.major, version.minor, version.patch)[: len(line)] == line


def select_latest_release(
    candidates: Iterable[TagCandidate],
    *,
    package_scope: str = '',
    match: re.Pattern[str] | None = None,
    maintained_version: str = '',
    hotfix: str = '',
) -> PriorRelease:
    """Select the most relevant previous release.

    Args:
        candidates: Tags with the SHAs they point at, in provider order.
        package_scope: Package whose ``<package>-release-`` prefix is
            stripped before parsing.
        match: Optional regex the (stripped) tag must match at its start.
        maintained_version: Optional constraint (``1.x``, ``~1.2``,
            ``2.0.0-beta``...) restricting the pool before ranking.
            Without one, pre-release tags never count as a prior release.
        hotfix: Suffix of the current hotfix branch (``1.2``, ``v1.2.0``);
            restricts the pool to that ``MAJOR.MINOR`` line.

    Returns:
        The greatest surviving :class:`Release`, or :class:`NoPriorRelease`.

    Raises:
        SemrelError: ``SR-MAINTENANCE-INVALID`` if ``maintained_version``
            is not a valid constraint.
    """
    constraint = VersionConstraint.parse(maintained_version) if maintained_version else None
    line = hotfix_line(hotfix) if hotfix else None
    if hotfix and line is None:
        logger.warning('hotfix_suffix_not_numeric', hotfix=hotfix)

    best: Release | None = None
    seen = 0
    for candidate in candidates:
        seen += 1
        tag = strip_release_prefix(candidate.tag, package_scope)
        if match is not None and match.match(tag) is None:
            continue
        try:
            version = Version.parse(tag)
        except SemrelError:
            logger.debug('tag_not_semver', tag=candidate.tag)
            continue
        if constraint is None and version.is_prerelease:
            logger.debug('prerelease_skipped', tag=candidate.tag)
            continue
        if constraint is not None and not constraint.allows(version):
            continue
        if hotfix and (line is None or not _on_line(version, line)):
            continue
        if best is None or version > best.version:
            best = Release(sha=candidate.sha, version=version)

    if best is None and maintained_version:
        logger.warning(
            'maintenance_line_has_no_release',
            maintained_version=maintained_version,
            candidates=seen,
            hint='The first release on this line starts from 0.0.0; tag the line by hand to seed it.',
        )
        return NoPriorRelease()
    if best is None:
        logger.info(
            'no_prior_release',
            candidates=seen,
            hotfix=hotfix or None,
        )
        return NoPriorRelease()

    logger.debug('prior_release_selected', version=str(best.version), sha=best.sha, candidates=seen)
    return best


__all__ = [
    'TagCandidate',
    'hotfix_line',
    'hotfix_suffix',
    'select_latest_release',
]
