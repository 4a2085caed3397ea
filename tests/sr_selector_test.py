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


"""Tests for semrel.selector and semrel.tags."""

from __future__ import annotations

import re

import pytest
import structlog
from semrel import selector
from semrel.commit_parsing import classify
from semrel.errors import E, SemrelError
from semrel.selector import TagCandidate, hotfix_line, hotfix_suffix, select_latest_release
from semrel.tags import format_branch, format_tag, release_prefix, strip_release_prefix
from semrel.versioning import BranchContext, resolve_version
from semrel.versions import NoPriorRelease, Release, Version


def _tags(*names: str) -> list[TagCandidate]:
    return [TagCandidate(tag=name, sha=f'sha-{name}') for name in names]


class TestTags:
    """Tests for tag and branch naming."""

    def test_format_tag(self) -> None:
        """Test format tag."""
        assert format_tag('pkgA', Version(1, 2, 0)) == 'pkgA-release-v1.2.0'
        assert format_tag('', Version(1, 2, 0)) == 'v1.2.0'

    def test_format_branch(self) -> None:
        """Test format branch."""
        assert format_branch('pkgA', Version(1, 2, 0)) == 'pkgA-branch-v1.2.0'
        assert format_branch('', Version(1, 2, 0)) == 'branch-v1.2.0'

    def test_strip_release_prefix(self) -> None:
        """Test strip release prefix."""
        assert release_prefix('') == ''
        assert strip_release_prefix('pkgA-release-v1.0.0', 'pkgA') == 'v1.0.0'
        assert strip_release_prefix('pkgB-release-v1.0.0', 'pkgA') == 'pkgB-release-v1.0.0'
        assert strip_release_prefix('pkgA-release-v1.0.0', '') == 'pkgA-release-v1.0.0'

    def test_hotfix_suffix(self) -> None:
        """Test hotfix suffix."""
        assert hotfix_suffix('pkgA-branch-v1.2.0', 'pkgA') == '1.2.0'
        assert hotfix_suffix('branch-v2.1', '') == '2.1'
        assert hotfix_suffix('main', 'pkgA') == ''
        assert hotfix_suffix('pkgB-branch-v1.2.0', 'pkgA') == ''
        assert hotfix_suffix('pkgA-branch-v', 'pkgA') == ''


class TestHotfixLine:
    """Tests for hotfix_line."""

    @pytest.mark.parametrize(
        ('suffix', 'line'),
        [('1.2', (1, 2)), ('v1.2', (1, 2)), ('1.2.0', (1, 2)), ('v1.2.3', (1, 2)), ('3', (3,)), ('next', None)],
    )
    def test_line(self, suffix: str, line: tuple[int, ...] | None) -> None:
        """Test line."""
        assert hotfix_line(suffix) == line


class TestSelectLatestRelease:
    """Tests for select_latest_release."""

    def test_greatest_wins(self) -> None:
        """Test greatest wins."""
        result = select_latest_release(_tags('v1.0.0', 'v1.2.0', 'v0.9.0'))
        assert result == Release(sha='sha-v1.2.0', version=Version(1, 2, 0))

    def test_empty_is_no_prior_release(self) -> None:
        """Test empty is no prior release."""
        assert select_latest_release([]) == NoPriorRelease()

    def test_unparsable_tags_dropped(self) -> None:
        """Test unparsable tags dropped."""
        result = select_latest_release(_tags('latest', 'nightly-2024', 'v0.3.0'))
        assert result.version == Version(0, 3, 0)

    def test_only_unparsable_is_no_prior_release(self) -> None:
        """Test only unparsable is no prior release."""
        assert isinstance(select_latest_release(_tags('latest', 'stable')), NoPriorRelease)

    def test_package_prefix_stripped(self) -> None:
        """Test package prefix stripped."""
        result = select_latest_release(
            _tags('pkgA-release-v1.1.0', 'pkgB-release-v3.0.0', 'pkgA-release-v1.0.0'),
            package_scope='pkgA',
        )
        assert result == Release(sha='sha-pkgA-release-v1.1.0', version=Version(1, 1, 0))

    def test_other_package_tags_unparsable(self) -> None:
        """Test other package tags unparsable."""
        result = select_latest_release(_tags('pkgB-release-v3.0.0'), package_scope='pkgA')
        assert isinstance(result, NoPriorRelease)

    def test_match_regex_anchored_at_start(self) -> None:
        """Test match regex anchored at start."""
        tags = _tags('v1.0.0', 'v2.0.0', 'v1.5.0')
        result = select_latest_release(tags, match=re.compile(r'v1\.'))
        assert result.version == Version(1, 5, 0)
        assert isinstance(select_latest_release(tags, match=re.compile(r'1\.')), NoPriorRelease)

    def test_match_applies_after_prefix_strip(self) -> None:
        """Test match applies after prefix strip."""
        tags = _tags('pkgA-release-v1.0.0', 'pkgA-release-v2.0.0')
        result = select_latest_release(tags, package_scope='pkgA', match=re.compile(r'v1'))
        assert result.version == Version(1, 0, 0)

    def test_maintained_version_restricts_pool(self) -> None:
        """Test maintained version restricts pool."""
        tags = _tags('v1.0.0', 'v1.4.2', 'v2.3.0', 'v1.5.0-rc.1')
        result = select_latest_release(tags, maintained_version='1.x')
        assert result.version == Version(1, 4, 2)

    def test_maintained_version_without_match_is_no_prior_release(self) -> None:
        """Test maintained version without match is no prior release."""
        result = select_latest_release(_tags('v1.0.0'), maintained_version='3.x')
        assert isinstance(result, NoPriorRelease)

    def test_prerelease_line(self) -> None:
        """Test prerelease line."""
        tags = _tags('v1.9.0', 'v2.0.0-beta.2', 'v2.0.0-beta.10', 'v2.0.0-alpha.7')
        result = select_latest_release(tags, maintained_version='2.0.0-beta')
        assert result.version == Version.parse('2.0.0-beta.10')

    def test_invalid_maintained_version(self) -> None:
        """Test invalid maintained version."""
        with pytest.raises(SemrelError) as exc_info:
            select_latest_release(_tags('v1.0.0'), maintained_version='one point x')
        assert exc_info.value.code == E.MAINTENANCE_INVALID

    def test_hotfix_line(self) -> None:
        """Test hotfix line."""
        tags = _tags('pkgA-release-v1.2.0', 'pkgA-release-v1.2.3', 'pkgA-release-v1.3.0', 'pkgA-release-v2.0.0')
        result = select_latest_release(tags, package_scope='pkgA', hotfix='1.2.0')
        assert result.version == Version(1, 2, 3)

    def test_hotfix_non_numeric_excludes_everything(self) -> None:
        """Test hotfix non numeric excludes everything."""
        result = select_latest_release(_tags('v1.0.0'), hotfix='next')
        assert isinstance(result, NoPriorRelease)

    def test_prereleases_skipped_without_maintained_version(self) -> None:
        """Test prereleases skipped without maintained version."""
        tags = _tags('pkgA-release-v1.0.0', 'pkgA-release-v1.1.0-rc.1')
        result = select_latest_release(tags, package_scope='pkgA')
        assert result == Release(sha='sha-pkgA-release-v1.0.0', version=Version(1, 0, 0))

    def test_prerelease_tag_does_not_skip_mainline_version(self) -> None:
        """Test prerelease tag does not skip mainline version."""
        tags = _tags('pkgA-release-v1.0.0', 'pkgA-release-v1.1.0-rc.1')
        prior = select_latest_release(tags, package_scope='pkgA')
        ctx = BranchContext('main', 'main')
        assert resolve_version([classify('fix(pkgA): a', sha='s1', package_scope='pkgA')], prior, ctx) == Version(1, 0, 1)
        assert resolve_version([classify('feat(pkgA): a', sha='s1', package_scope='pkgA')], prior, ctx) == Version(1, 1, 0)

    def test_only_prereleases_is_no_prior_release(self) -> None:
        """Test only prereleases is no prior release."""
        assert isinstance(select_latest_release(_tags('v1.0.0-rc.1')), NoPriorRelease)

    def test_empty_maintenance_line_warns(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test empty maintenance line warns."""
        with structlog.testing.capture_logs() as cap:
            monkeypatch.setattr(selector, 'logger', structlog.get_logger('semrel.selector'))
            result = select_latest_release(_tags('v2.0.0'), maintained_version='1.x')
        assert isinstance(result, NoPriorRelease)
        warnings = [e for e in cap if e['event'] == 'maintenance_line_has_no_release']
        assert warnings
        assert warnings[0]['log_level'] == 'warning'
        assert warnings[0]['maintained_version'] == '1.x'

    def test_ties_first_seen(self) -> None:
        """Test ties first seen."""
        tags = [TagCandidate('v1.0.0', 'first'), TagCandidate('1.0.0+build', 'second')]
        assert select_latest_release(tags).sha == 'first'

    def test_accepts_generator(self) -> None:
        """Test accepts generator."""
        result = select_latest_release(TagCandidate(f'v0.{n}.0', str(n)) for n in range(12))
        assert result.version == Version(0, 11, 0)
