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


"""Post-release file updates.

After a release is created, the new version can be written back into the
working tree:

- ``--update package.json``: the top-level ``"version"`` field (via
  :mod:`json`, two-space indent as npm writes it).
- ``--update pyproject.toml``: ``[project].version`` (via tomlkit, so
  comments and formatting survive).
- ``--version-file``: a ``.version`` file holding just the version.
- ``--ghr``: a ``.ghr`` file with the arguments for the ``ghr`` upload
  tool, ``-u <owner> -r <repo> v<version>``.

Usage::

    from semrel.update import apply_update

    old = apply_update(Path('package.json'), '1.2.0')
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import tomlkit
import tomlkit.exceptions

from semrel.errors import E, SemrelError
from semrel.logging import get_logger

logger = get_logger(__name__)

VERSION_FILENAME = '.version'
GHR_FILENAME = '.ghr'


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding='utf-8')
    except OSError as exc:
        raise SemrelError(
            code=E.UPDATE_FAILED,
            message=f'Cannot read {path}: {exc}',
            hint=f'Check that {path} exists and is readable.',
        ) from exc


def _write(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding='utf-8')
    except OSError as exc:
        raise SemrelError(
            code=E.UPDATE_FAILED,
            message=f'Cannot write {path}: {exc}',
            hint=f'Check file permissions for {path}.',
        ) from exc


def update_package_json(path: Path, new_version: str) -> str:
    """Set the ``version`` field of an npm ``package.json``.

    Returns:
        The old version ('' if the field was absent).

    Raises:
        SemrelError: ``SR-UPDATE-FAILED`` if the file cannot be read,
            parsed or written.
    """
    try:
        data = json.loads(_read(path))
    except json.JSONDecodeError as exc:
        raise SemrelError(
            code=E.UPDATE_FAILED,
            message=f'Cannot parse {path}: {exc}',
            hint=f'Check that {path} contains valid JSON.',
        ) from exc
    if not isinstance(data, dict):
        raise SemrelError(
            code=E.UPDATE_FAILED,
            message=f'{path} does not contain a JSON object',
        )

    old_version = str(data.get('version', ''))
    data['version'] = new_version
    _write(path, json.dumps(data, indent=2, ensure_ascii=False) + '\n')
    return old_version


def update_pyproject(path: Path, new_version: str) -> str:
    """Set ``[project].version`` in a ``pyproject.toml``.

    Returns:
        The old version.

    Raises:
        SemrelError: ``SR-UPDATE-FAILED`` if the file cannot be read,
            parsed or written, or has no ``[project].version`` key.
    """
    try:
        doc = tomlkit.parse(_read(path))
    except tomlkit.exceptions.TOMLKitError as exc:
        raise SemrelError(
            code=E.UPDATE_FAILED,
            message=f'Cannot parse {path}: {exc}',
            hint=f'Check that {path} contains valid TOML.',
        ) from exc

    project = doc.get('project')
    if not isinstance(project, dict) or 'version' not in project:
        raise SemrelError(
            code=E.UPDATE_FAILED,
            message=f'No [project].version key in {path}',
            hint='Add a version field to [project] in pyproject.toml.',
        )

    old_version = str(project['version'])
    project['version'] = new_version
    _write(path, tomlkit.dumps(doc))
    return old_version


_UPDATERS: dict[str, Callable[[Path, str], str]] = {
    'package.json': update_package_json,
    'pyproject.toml': update_pyproject,
}


def apply_update(path: Path, new_version: str) -> str:
    """Write ``new_version`` into the manifest at ``path``.

    The manifest kind is chosen by file name.

    Returns:
        The old version.

    Raises:
        SemrelError: ``SR-UPDATE-FAILED`` for unsupported manifests or
            any read/parse/write failure.
    """
    updater = _UPDATERS.get(path.name)
    if updater is None:
        raise SemrelError(
            code=E.UPDATE_FAILED,
            message=f'Do not know how to update {path.name}',
            hint=f'Supported manifests: {", ".join(sorted(_UPDATERS))}.',
        )
    old_version = updater(path, new_version)
    logger.info('manifest_version_updated', path=str(path), old=old_version, new=new_version)
    return old_version


def write_version_file(directory: Path, new_version: str) -> Path:
    """Write ``new_version`` to ``.version`` in ``directory``."""
    path = directory / VERSION_FILENAME
    _write(path, new_version)
    logger.info('version_file_written', path=str(path))
    return path


def write_ghr_file(directory: Path, owner: str, repo: str, new_version: str) -> Path:
    """Write ``ghr`` upload arguments to ``.ghr`` in ``directory``."""
    path = directory / GHR_FILENAME
    _write(path, f'-u {owner} -r {repo} v{new_version}')
    logger.info('ghr_file_written', path=str(path))
    return path


__all__ = [
    'GHR_FILENAME',
    'VERSION_FILENAME',
    'apply_update',
    'update_package_json',
    'update_pyproject',
    'write_ghr_file',
    'write_version_file',
]
