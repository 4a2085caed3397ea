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


"""Tests for the semrel command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from semrel import __version__
from semrel.backends.provider import ProviderOptions
from semrel.cli import build_parser, main
from semrel.selector import TagCandidate
from tests._fakes import FakeRepository, commit

_TAGS = [TagCandidate('pkgA-release-v1.2.0', 'c0')]


def _install(monkeypatch: pytest.MonkeyPatch, repo: FakeRepository) -> list[ProviderOptions]:
    """Route provider construction to ``repo`` and record the options."""
    seen: list[ProviderOptions] = []

    def factory(options: ProviderOptions) -> FakeRepository:
        seen.append(options)
        return repo

    monkeypatch.setattr('semrel.cli.new_repository', factory)
    return seen


def _args(tmp_path: Path, *extra: str) -> list[str]:
    return ['--branch', 'main', '--sha', 'head', '--root', str(tmp_path), '--date', '', *extra]


class TestParser:
    """Tests for build_parser."""

    def test_prog(self) -> None:
        """Test prog."""
        assert build_parser().prog == 'semrel'

    def test_version_flag(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test version flag."""
        with pytest.raises(SystemExit) as exc_info:
            main(['--version'])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_tristate_flags_default_to_none(self) -> None:
        """Test tristate flags default to none."""
        args = build_parser().parse_args(['version'])
        assert args.fallback is None
        assert args.allow_initial_development_versions is None
        assert args.package is None

    def test_no_fallback(self) -> None:
        """Test no fallback."""
        args = build_parser().parse_args(['release', '--no-fallback', '--dry-run'])
        assert args.fallback is False
        assert args.dry_run is True


class TestMain:
    """Tests for main."""

    def test_no_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test no command."""
        assert main([]) == 2
        assert 'please provide a command' in capsys.readouterr().err

    def test_explain_known(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test explain known."""
        assert main(['explain', 'SR-SLUG-MALFORMED']) == 0
        assert 'owner/name' in capsys.readouterr().out

    def test_explain_unknown(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test explain unknown."""
        assert main(['explain', 'SR-NOPE']) == 1
        assert 'Unknown error code: SR-NOPE' in capsys.readouterr().out


class TestRelease:
    """Tests for the release and version subcommands."""

    def test_release(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        """Test release."""
        repo = FakeRepository(tags=_TAGS, commits=[commit('s1', 'feat(pkgA): widget'), commit('c0', 'x')])
        seen = _install(monkeypatch, repo)
        code = main([
            'release',
            *_args(tmp_path, '--package', 'pkgA', '--slug', 'acme/widgets', '--version-file'),
        ])
        assert code == 0
        assert capsys.readouterr().out == '1.3.0\n'
        assert repo.releases_created[0]['release_sha'] == 's1'
        assert (tmp_path / '.version').read_text(encoding='utf-8') == '1.3.0'
        assert seen[0].slug == 'acme/widgets'
        assert seen[0].provider == 'github'

    def test_dry_run_prints_changelog(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test dry run prints changelog."""
        repo = FakeRepository(tags=_TAGS, commits=[commit('s1', 'fix(pkgA): crash'), commit('c0', 'x')])
        _install(monkeypatch, repo)
        assert main(['release', '--dry-run', *_args(tmp_path, '--package', 'pkgA')]) == 0
        out = capsys.readouterr().out
        assert out.startswith('1.2.1\n\n## 1.2.1\n')
        assert 'crash' in out
        assert 'create_release' not in repo.calls

    def test_nothing_to_release(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test nothing to release."""
        repo = FakeRepository(tags=_TAGS, commits=[commit('s1', 'chore(pkgA): tidy'), commit('c0', 'x')])
        _install(monkeypatch, repo)
        assert main(['release', *_args(tmp_path, '--package', 'pkgA', '--no-fallback')]) == 0
        assert capsys.readouterr().out == 'No release.\n'

    def test_config_file_and_flag_override(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test config file and flag override."""
        (tmp_path / 'semrel.toml').write_text(
            'package = "pkgA"\nfallback = false\nslug = "acme/widgets"\nprovider = "gitlab"\n',
            encoding='utf-8',
        )
        repo = FakeRepository(tags=_TAGS, commits=[commit('s1', 'chore(pkgA): tidy'), commit('c0', 'x')])
        seen = _install(monkeypatch, repo)

        assert main(['version', *_args(tmp_path)]) == 0
        assert capsys.readouterr().out == ''

        assert main(['version', *_args(tmp_path, '--fallback')]) == 0
        assert capsys.readouterr().out == '1.3.0\n'
        assert seen[0].provider == 'gitlab'
        assert 'create_release' not in repo.calls

    def test_error_exit_code(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test error exit code."""
        _install(monkeypatch, FakeRepository(default_branch=''))
        assert main(['release', *_args(tmp_path)]) == 1
        assert 'error[SR-BRANCH-NO-DEFAULT]' in capsys.readouterr().err

    def test_bad_config_exit_code(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test bad config exit code."""
        (tmp_path / 'semrel.toml').write_text('pakage = "pkgA"\n', encoding='utf-8')
        _install(monkeypatch, FakeRepository())
        assert main(['version', *_args(tmp_path)]) == 1
        err = capsys.readouterr().err
        assert 'SR-CONFIG-INVALID-KEY' in err
        assert "'package'" in err

    def test_json_log_carries_run_context(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test json log carries run context."""
        repo = FakeRepository(tags=_TAGS, commits=[commit('s1', 'fix(pkgA): crash'), commit('c0', 'x')])
        _install(monkeypatch, repo)
        assert main(['--json-log', 'version', *_args(tmp_path, '--package', 'pkgA')]) == 0
        captured = capsys.readouterr()
        assert captured.out == '1.2.1\n'
        records = [json.loads(line) for line in captured.err.splitlines() if line.startswith('{')]
        new_version = next(r for r in records if r['event'] == 'new_version')
        assert new_version['version'] == '1.2.1'
        assert new_version['provider'] == 'Fake'
        assert new_version['repo'] == 'acme/widgets'
        assert new_version['package'] == 'pkgA'
        assert new_version['branch'] == 'main'
