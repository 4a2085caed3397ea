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


"""Tests for semrel.config."""

from __future__ import annotations

from pathlib import Path

import pytest
from semrel.config import CONFIG_FILENAME, VALID_KEYS, SemrelConfig, load_config
from semrel.errors import E, SemrelError


def _write(tmp_path: Path, text: str) -> Path:
    (tmp_path / CONFIG_FILENAME).write_text(text, encoding='utf-8')
    return tmp_path


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """Test missing file gives defaults."""
        cfg = load_config(tmp_path)
        assert cfg == SemrelConfig()
        assert cfg.provider == 'github'
        assert cfg.fallback is True
        assert cfg.allow_initial_development_versions is True
        assert cfg.http_retries == 0

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test empty file."""
        cfg = load_config(_write(tmp_path, '# nothing\n'))
        assert cfg.config_path == tmp_path / CONFIG_FILENAME
        assert cfg.package == ''

    def test_all_keys(self, tmp_path: Path) -> None:
        """Test all keys."""
        root = _write(
            tmp_path,
            '\n'.join([
                'provider = "gitlab"',
                'slug = "group/sub/project"',
                'ghe_host = ""',
                'gitlab_base_url = "https://gitlab.example.com"',
                'gitlab_project_id = 1234',
                'default_branch = "trunk"',
                'package = "pkgA"',
                'match = "v1\\\\."',
                'maintained_version = "1.x"',
                'prerelease = true',
                'changelog = "CHANGELOG.md"',
                'version_file = true',
                'ghr = true',
                'update = "package.json"',
                'allow_initial_development_versions = false',
                'fallback = false',
                'http_timeout = 10',
                'http_retries = 2',
            ]),
        )
        cfg = load_config(root)
        assert cfg.provider == 'gitlab'
        assert cfg.gitlab_project_id == '1234'
        assert cfg.match == 'v1\\.'
        assert cfg.prerelease is True
        assert cfg.allow_initial_development_versions is False
        assert cfg.fallback is False
        assert cfg.http_timeout == 10.0
        assert isinstance(cfg.http_timeout, float)
        assert cfg.http_retries == 2
        assert set(VALID_KEYS) <= set(SemrelConfig.__dataclass_fields__)

    def test_unknown_key_suggests(self, tmp_path: Path) -> None:
        """Test unknown key suggests."""
        with pytest.raises(SemrelError) as exc_info:
            load_config(_write(tmp_path, 'pakage = "pkgA"\n'))
        assert exc_info.value.code == E.CONFIG_INVALID_KEY
        assert "'package'" in exc_info.value.hint

    def test_unknown_key_without_suggestion(self, tmp_path: Path) -> None:
        """Test unknown key without suggestion."""
        with pytest.raises(SemrelError) as exc_info:
            load_config(_write(tmp_path, 'zzzzzz = 1\n'))
        assert exc_info.value.code == E.CONFIG_INVALID_KEY
        assert 'Valid keys' in exc_info.value.hint

    @pytest.mark.parametrize(
        'line',
        ['fallback = "yes"', 'package = 3', 'http_retries = true', 'http_timeout = "fast"', 'ghr = 1'],
    )
    def test_wrong_type(self, tmp_path: Path, line: str) -> None:
        """Test wrong type."""
        with pytest.raises(SemrelError) as exc_info:
            load_config(_write(tmp_path, line + '\n'))
        assert exc_info.value.code == E.CONFIG_INVALID_VALUE

    @pytest.mark.parametrize(
        'line',
        ['provider = "bitbucket"', 'match = "v1.("', 'http_timeout = 0', 'http_retries = -1'],
    )
    def test_bad_value(self, tmp_path: Path, line: str) -> None:
        """Test bad value."""
        with pytest.raises(SemrelError) as exc_info:
            load_config(_write(tmp_path, line + '\n'))
        assert exc_info.value.code == E.CONFIG_INVALID_VALUE

    def test_parse_error(self, tmp_path: Path) -> None:
        """Test parse error."""
        with pytest.raises(SemrelError) as exc_info:
            load_config(_write(tmp_path, 'package = \n'))
        assert exc_info.value.code == E.CONFIG_PARSE_ERROR
