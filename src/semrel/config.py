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


"""Configuration reader for semrel.

Reads ``semrel.toml`` from the repository root and returns a validated
:class:`SemrelConfig` dataclass. The file uses flat top-level keys, so it
works the same for any ecosystem (npm, Python, Go...). Every key is
optional; command-line flags override whatever the file sets.

Validation Pipeline::

    semrel.toml
    ┌──────────────────┐
    │ pakage = "pkgA"  │  ← typo!
    └────────┬─────────┘
             │
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 1. Unknown key   │────→│ SR-CONFIG-INVALID-KEY:       │
    │    detection     │     │ hint: "Did you mean          │
    └────────┬─────────┘     │       'package'?"            │
             │               └──────────────────────────────┘
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 2. Type check    │────→│ SR-CONFIG-INVALID-VALUE:     │
    │    each value    │     │ 'fallback' must be bool      │
    └────────┬─────────┘     └──────────────────────────────┘
             │
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 3. Value check   │────→│ SR-CONFIG-INVALID-VALUE:     │
    │    (enums, etc.) │     │ provider must be "github"    │
    └────────┬─────────┘     │ or "gitlab"                  │
             │               └──────────────────────────────┘
             ▼
    ┌──────────────────┐
    │ SemrelConfig()   │  ← frozen dataclass, ready to use
    └──────────────────┘

Supported keys in ``semrel.toml``::

    provider                            = "github"      # or "gitlab"
    slug                                = "owner/repo"
    ghe_host                            = "github.example.com"
    gitlab_base_url                     = "https://gitlab.example.com"
    gitlab_project_id                   = "1234"
    default_branch                      = "main"        # skip the API lookup
    package                             = "pkgA"        # tag / scope prefix
    match                               = "1\\."        # tag filter regex
    maintained_version                  = "1.x"
    prerelease                          = false
    changelog                           = "CHANGELOG.md"
    version_file                        = false         # write .version
    ghr                                 = false         # write .ghr
    update                              = "package.json"
    allow_initial_development_versions  = true
    fallback                            = true          # bump without commits
    http_timeout                        = 30.0
    http_retries                        = 0
"""

from __future__ import annotations

import difflib
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomlkit
import tomlkit.exceptions

from semrel.errors import E, SemrelError
from semrel.logging import get_logger
from semrel.net import DEFAULT_TIMEOUT, MAX_RETRIES

logger = get_logger(__name__)

# The config file name at the repository root.
CONFIG_FILENAME = 'semrel.toml'

ALLOWED_PROVIDERS: frozenset[str] = frozenset({'github', 'gitlab'})

_TYPE_MAP: dict[str, type | tuple[type, ...]] = {
    'provider': str,
    'slug': str,
    'ghe_host': str,
    'gitlab_base_url': str,
    'gitlab_project_id': (str, int),
    'default_branch': str,
    'package': str,
    'match': str,
    'maintained_version': str,
    'prerelease': bool,
    'changelog': str,
    'version_file': bool,
    'ghr': bool,
    'update': str,
    'allow_initial_development_versions': bool,
    'fallback': bool,
    'http_timeout': (int, float),
    'http_retries': int,
}

# All recognized top-level keys in semrel.toml.
VALID_KEYS: frozenset[str] = frozenset(_TYPE_MAP)


@dataclass(frozen=True)
class SemrelConfig:
    """Validated contents of ``semrel.toml``.

    Attributes:
        provider: Repository provider, ``"github"`` or ``"gitlab"``.
        slug: Repository identifier in ``owner/name`` form.
        ghe_host: GitHub Enterprise host name, if any.
        gitlab_base_url: Base URL of a self-hosted GitLab.
        gitlab_project_id: Numeric GitLab project ID; the slug is used
            when empty.
        default_branch: Default branch override; looked up from the
            provider when empty.
        package: Package scope for commits, tags and branches.
        match: Regex previous-release tags must match.
        maintained_version: Maintenance line constraint.
        prerelease: Mark the provider release as a pre-release.
        changelog: Path the rendered changelog is written to.
        version_file: Write the new version to ``.version``.
        ghr: Write ``ghr`` arguments to ``.ghr``.
        update: Manifest file whose version field is rewritten.
        allow_initial_development_versions: Keep ``0.x`` versions on
            ``0.x`` instead of jumping to ``1.0.0``.
        fallback: Release with a branch-policy bump when no commit
            qualifies.
        http_timeout: Provider request timeout in seconds.
        http_retries: Extra attempts for transient provider errors.
        config_path: Where the config was read from, if anywhere.
    """

    provider: str = 'github'
    slug: str = ''
    ghe_host: str = ''
    gitlab_base_url: str = ''
    gitlab_project_id: str = ''
    default_branch: str = ''
    package: str = ''
    match: str = ''
    maintained_version: str = ''
    prerelease: bool = False
    changelog: str = ''
    version_file: bool = False
    ghr: bool = False
    update: str = ''
    allow_initial_development_versions: bool = True
    fallback: bool = True
    http_timeout: float = DEFAULT_TIMEOUT
    http_retries: int = MAX_RETRIES
    config_path: Path | None = None


def _suggest_key(unknown: str) -> str | None:
    """Return the closest valid key for a typo, or None."""
    matches = difflib.get_close_matches(unknown, VALID_KEYS, n=1, cutoff=0.6)
    return matches[0] if matches else None


def _validate_value_type(key: str, value: Any) -> None:  # noqa: ANN401 - dynamic config values
    """Raise if a config value has the wrong type."""
    expected = _TYPE_MAP[key]
    # bool is an int subclass; numeric keys must not accept true/false.
    wrong = not isinstance(value, expected) or (expected is not bool and isinstance(value, bool))
    if wrong:
        type_name = expected.__name__ if isinstance(expected, type) else ' or '.join(t.__name__ for t in expected)
        raise SemrelError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'{key}' must be {type_name}, got {type(value).__name__}",
            hint=f'Check the value of {key} in {CONFIG_FILENAME}.',
        )


def _validate_provider(value: str) -> None:
    """Raise if provider is not a recognized value."""
    if value not in ALLOWED_PROVIDERS:
        raise SemrelError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"provider must be one of {sorted(ALLOWED_PROVIDERS)}, got '{value}'",
            hint="Use 'github' or 'gitlab'.",
        )


def _validate_match(value: str) -> None:
    """Raise if match is not a valid regular expression."""
    try:
        re.compile(value)
    except re.error as exc:
        raise SemrelError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'match is not a valid regular expression: {exc}',
            hint='Escape literal dots, e.g. "1\\\\.2".',
        ) from exc


def _validate_http(raw: dict[str, Any]) -> None:  # noqa: ANN401 - dynamic config
    """Raise if the HTTP knobs are out of range."""
    if raw.get('http_timeout', DEFAULT_TIMEOUT) <= 0:
        raise SemrelError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"http_timeout must be positive, got {raw['http_timeout']}",
        )
    if raw.get('http_retries', MAX_RETRIES) < 0:
        raise SemrelError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"http_retries must not be negative, got {raw['http_retries']}",
        )


def load_config(root: Path) -> SemrelConfig:
    """Load and validate configuration from ``semrel.toml``.

    Args:
        root: Directory containing ``semrel.toml``.

    Returns:
        A validated :class:`SemrelConfig`. Defaults when the file is absent.

    Raises:
        SemrelError: If the file cannot be parsed or contains invalid config.
    """
    config_path = root / CONFIG_FILENAME

    if not config_path.is_file():
        logger.debug('no_semrel_config', path=str(config_path))
        return SemrelConfig()

    try:
        text = config_path.read_text(encoding='utf-8')
    except OSError as exc:
        raise SemrelError(
            code=E.CONFIG_PARSE_ERROR,
            message=f'Failed to read {config_path}: {exc}',
        ) from exc

    try:
        doc = tomlkit.parse(text)
    except tomlkit.exceptions.TOMLKitError as exc:
        raise SemrelError(
            code=E.CONFIG_PARSE_ERROR,
            message=f'Failed to parse {config_path}: {exc}',
        ) from exc

    raw: dict[str, Any] = doc.unwrap()  # noqa: ANN401

    if not raw:
        logger.debug('empty_semrel_config', path=str(config_path))
        return SemrelConfig(config_path=config_path)

    for key in raw:
        if key not in VALID_KEYS:
            suggestion = _suggest_key(key)
            hint = f"Did you mean '{suggestion}'?" if suggestion else f'Valid keys: {", ".join(sorted(VALID_KEYS))}.'
            raise SemrelError(
                code=E.CONFIG_INVALID_KEY,
                message=f"Unknown key '{key}' in {CONFIG_FILENAME}",
                hint=hint,
            )

    for key, value in raw.items():
        _validate_value_type(key, value)

    if 'provider' in raw:
        _validate_provider(raw['provider'])
    if raw.get('match'):
        _validate_match(raw['match'])
    _validate_http(raw)

    kwargs: dict[str, Any] = dict(raw)  # noqa: ANN401
    if 'gitlab_project_id' in kwargs:
        kwargs['gitlab_project_id'] = str(kwargs['gitlab_project_id'])
    if 'http_timeout' in kwargs:
        kwargs['http_timeout'] = float(kwargs['http_timeout'])

    logger.debug('semrel_config_loaded', path=str(config_path), keys=sorted(raw))
    return SemrelConfig(**kwargs, config_path=config_path)


__all__ = [
    'ALLOWED_PROVIDERS',
    'CONFIG_FILENAME',
    'VALID_KEYS',
    'SemrelConfig',
    'load_config',
]
