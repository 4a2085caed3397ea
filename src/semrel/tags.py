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


"""Release tag and hotfix branch naming.

Every release writes two kinds of references:

- A tag ``<package>-release-v<version>`` on the released commit.
- When releasing from the default branch, a branch
  ``<package>-branch-v<version>`` at the same commit. It anchors a future
  hotfix line: running on that branch later restricts the previous-release
  search to the ``MAJOR.MINOR`` it was cut from.

Usage::

    from semrel.tags import format_branch, format_tag, hotfix_suffix

    format_tag('pkgA', Version(1, 2, 0))           # 'pkgA-release-v1.2.0'
    format_branch('pkgA', Version(1, 2, 0))        # 'pkgA-branch-v1.2.0'
    hotfix_suffix('pkgA-branch-v1.2.0', 'pkgA')    # '1.2.0'
"""

from __future__ import annotations

from semrel.versions import Version

TAG_FORMAT = '{package}-release-v{version}'
BRANCH_FORMAT = '{package}-branch-v{version}'

# Repositories without a package scope: v1.2.0 and branch-v1.2.0.
UNSCOPED_TAG_FORMAT = 'v{version}'
UNSCOPED_BRANCH_FORMAT = 'branch-v{version}'


def release_prefix(package: str) -> str:
    """Return the tag prefix owned by ``package`` (empty for no package)."""
    return f'{package}-release-' if package else ''


def format_tag(package: str, version: Version) -> str:
    """Name of the release tag for ``version`` of ``package``."""
    if not package:
        return UNSCOPED_TAG_FORMAT.format(version=version)
    return TAG_FORMAT.format(package=package, version=version)


def format_branch(package: str, version: Version) -> str:
    """Name of the hotfix anchor branch for ``version`` of ``package``."""
    if not package:
        return UNSCOPED_BRANCH_FORMAT.format(version=version)
    return BRANCH_FORMAT.format(package=package, version=version)


def strip_release_prefix(tag: str, package: str) -> str:
    """Remove the package's release prefix from ``tag`` when present."""
    prefix = release_prefix(package)
    if prefix and tag.startswith(prefix):
        return tag[len(prefix) :]
    return tag


def hotfix_suffix(branch: str, package: str) -> str:
    """Return the version suffix of a hotfix anchor branch, or ``''``.

    ``pkgA-branch-v1.2.0`` yields ``'1.2.0'``. Branches that are not
    anchor branches of ``package`` yield ``''``.
    """
    if package:
        prefix = BRANCH_FORMAT.format(package=package, version='')
    else:
        prefix = UNSCOPED_BRANCH_FORMAT.format(version='')
    if branch.startswith(prefix) and len(branch) > len(prefix):
        return branch[len(prefix) :]
    return ''


__all__ = [
    'BRANCH_FORMAT',
    'TAG_FORMAT',
    'UNSCOPED_BRANCH_FORMAT',
    'UNSCOPED_TAG_FORMAT',
    'format_branch',
    'format_tag',
    'hotfix_suffix',
    'release_prefix',
    'strip_release_prefix',
]
