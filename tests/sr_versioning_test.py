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


"""Tests for semrel.versioning: change folding, bumps and fallback."""

from __future__ import annotations

import pytest
from semrel.commit_parsing import BumpType, Commit, classify
from semrel.errors import E, SemrelError
from semrel.versioning import (
    BranchContext,
    apply_change,
    calculate_change,
    check_prerelease_line,
    fallback_bump,
    get_new_version,
    resolve_version,
)
from semrel.versions import NoPriorRelease, Release, Version

MAIN = BranchContext(branch='main', default_branch='main')
HOTFIX = BranchContext(branch='pkgA-branch-v1.0.0', default_branch='main')


def _commits(*messages: str, scope: str = 'pkgA') -> list[Commit]:
    return [classify(m, sha=f'sha{i}', package_scope=scope) for i, m in enumerate(messages)]


class TestBranchContext:
    """Tests for BranchContext."""

    def test_default_line(self) -> None:
        """Test default line."""
        assert MAIN.is_default_line is True
        assert HOTFIX.is_default_line is False

    def test_maintained_version_is_not_default_line(self) -> None:
        """Test maintained version is not default line."""
        ctx = BranchContext(branch='main', default_branch='main', maintained_version='1.x')
        assert ctx.is_default_line is False
        assert ctx.prerelease_line is False

    def test_prerelease_line(self) -> None:
        """Test prerelease line."""
        assert BranchContext('next', 'main', maintained_version='2.0.0-beta').prerelease_line is True


class TestCalculateChange:
    """Tests for calculate_change."""

    def test_empty(self) -> None:
        """Test empty."""
        assert calculate_change([]) == BumpType.NONE

    def test_fold(self) -> None:
        """Test fold."""
        assert calculate_change(_commits('fix(pkgA): a', 'chore(pkgA): b')) == BumpType.PATCH
        assert calculate_change(_commits('fix(pkgA): a', 'feat(pkgA): b')) == BumpType.MINOR
        assert calculate_change(_commits('feat(pkgA): a', 'fix(pkgA)!: b')) == BumpType.MAJOR

    def test_order_independent(self) -> None:
        """Test order independent."""
        commits = _commits('feat(pkgA)!: a', 'fix(pkgA): b', 'feat(pkgA): c')
        assert calculate_change(commits) == calculate_change(list(reversed(commits)))

    def test_out_of_scope_ignored(self) -> None:
        """Test out of scope ignored."""
        assert calculate_change(_commits('feat(pkgB)!: a')) == BumpType.NONE

    def test_stops_at_prior_release_sha(self) -> None:
        """Test stops at prior release sha."""
        commits = _commits('fix(pkgA): new', 'feat(pkgA)!: already released')
        prior = Release(sha='sha1', version=Version(2))
        assert calculate_change(commits, prior) == BumpType.PATCH

    def test_no_prior_release_does_not_cut(self) -> None:
        """Test no prior release does not cut."""
        commits = [Commit(sha='', raw=('x',)), *_commits('feat(pkgA): a')]
        assert calculate_change(commits, NoPriorRelease()) == BumpType.MINOR


class TestApplyChange:
    """Tests for apply_change."""

    @pytest.mark.parametrize(
        ('version', 'bump', 'expected'),
        [
            ('1.0.0', BumpType.PATCH, '1.0.1'),
            ('1.0.1', BumpType.MINOR, '1.1.0'),
            ('1.1.5', BumpType.MAJOR, '2.0.0'),
            ('1.2.3-rc.1+b', BumpType.PATCH, '1.2.4'),
            ('0.0.0', BumpType.MINOR, '0.1.0'),
        ],
    )
    def test_standard(self, version: str, bump: BumpType, expected: str) -> None:
        """Test standard."""
        assert str(apply_change(Version.parse(version), bump)) == expected

    def test_none_is_none(self) -> None:
        """Test none is none."""
        assert apply_change(Version(1), BumpType.NONE) is None

    def test_initial_development_disallowed(self) -> None:
        """Test initial development disallowed."""
        result = apply_change(Version(0, 3, 1), BumpType.PATCH, allow_initial_development_versions=False)
        assert result == Version(1, 0, 0)

    def test_initial_development_flag_ignored_after_1_0(self) -> None:
        """Test initial development flag ignored after 1.0."""
        result = apply_change(Version(1, 3, 1), BumpType.PATCH, allow_initial_development_versions=False)
        assert result == Version(1, 3, 2)

    @pytest.mark.parametrize(
        ('version', 'expected'),
        [
            ('2.0.0-beta.3', '2.0.0-beta.4'),
            ('2.0.0-beta', '2.0.0-beta.1'),
            ('2.0.0-beta.x', '2.0.0-beta.1'),
            ('2.0.0-beta.9.extra', '2.0.0-beta.10'),
        ],
    )
    def test_prerelease_counter(self, version: str, expected: str) -> None:
        """Test prerelease counter."""
        for bump in (BumpType.PATCH, BumpType.MINOR, BumpType.MAJOR):
            assert str(apply_change(Version.parse(version), bump, prerelease_line=True)) == expected

    def test_prerelease_line_requires_prerelease(self) -> None:
        """Test prerelease line requires prerelease."""
        with pytest.raises(SemrelError) as exc_info:
            apply_change(Version(2), BumpType.MINOR, prerelease_line=True)
        assert exc_info.value.code == E.MAINTENANCE_INVALID


class TestFallbackBump:
    """Tests for fallback_bump."""

    def test_policy(self) -> None:
        """Test policy."""
        assert fallback_bump(MAIN) == BumpType.MINOR
        assert fallback_bump(HOTFIX) == BumpType.PATCH


class TestScenarios:
    """End-to-end resolution scenarios."""

    def test_fix_and_chore(self) -> None:
        """Test fix and chore."""
        commits = _commits('fix(pkgA): null check', 'chore(pkgA): update deps')
        prior = Release(sha='old', version=Version(1, 0, 0))
        assert get_new_version(commits, prior, MAIN) == Version(1, 0, 1)

    def test_feat_and_breaking(self) -> None:
        """Test feat and breaking."""
        commits = _commits(
            'feat(pkgA): add export',
            'feat(pkgA)!: remove legacy API\n\nBREAKING CHANGE: drop v1 format',
        )
        prior = Release(sha='old', version=Version(1, 0, 1))
        assert get_new_version(commits, prior, MAIN) == Version(2, 0, 0)

    def test_empty_on_default_branch(self) -> None:
        """Test empty on default branch."""
        prior = Release(sha='old', version=Version(1, 0, 1))
        assert get_new_version([], prior, MAIN) is None
        assert resolve_version([], prior, MAIN) == Version(1, 1, 0)

    def test_empty_on_hotfix_branch(self) -> None:
        """Test empty on hotfix branch."""
        prior = Release(sha='old', version=Version(1, 0, 1))
        assert resolve_version([], prior, HOTFIX) == Version(1, 0, 2)

    def test_feat_without_prior_release(self) -> None:
        """Test feat without prior release."""
        assert resolve_version(_commits('feat(pkgA): first'), NoPriorRelease(), MAIN) == Version(0, 1, 0)

    def test_feat_without_prior_release_stable_only(self) -> None:
        """Test feat without prior release stable only."""
        ctx = BranchContext('main', 'main', allow_initial_development_versions=False)
        assert resolve_version(_commits('feat(pkgA): first'), NoPriorRelease(), ctx) == Version(1, 0, 0)

    def test_prerelease_line_resolution(self) -> None:
        """Test prerelease line resolution."""
        ctx = BranchContext('next', 'main', maintained_version='2.0.0-beta')
        prior = Release(sha='old', version=Version.parse('2.0.0-beta.3'))
        assert resolve_version(_commits('fix(pkgA): a'), prior, ctx) == Version.parse('2.0.0-beta.4')
        assert resolve_version([], prior, ctx) == Version.parse('2.0.0-beta.4')

    def test_prerelease_line_without_prerelease_history(self) -> None:
        """Test prerelease line without prerelease history."""
        ctx = BranchContext('next', 'main', maintained_version='2.0.0-beta')
        with pytest.raises(SemrelError) as exc_info:
            check_prerelease_line(NoPriorRelease(), ctx)
        assert exc_info.value.code == E.MAINTENANCE_INVALID
        with pytest.raises(SemrelError):
            get_new_version(_commits('feat(pkgA): a'), NoPriorRelease(), ctx)
