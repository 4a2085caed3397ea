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


"""GitLab repository provider.

Implements :class:`~semrel.backends.provider.Repository` against the
GitLab REST API v4 via ``httpx``. Self-hosted instances are reached via
``gitlab_base_url``; the project is addressed by its numeric ID when one
is configured and by the URL-encoded ``group/project`` path otherwise.

Authentication:

    1. ``token`` constructor parameter.
    2. ``GITLAB_TOKEN`` env var.
    3. ``GL_TOKEN`` env var.

Endpoints used::

    GET  /projects/{id}                                 info()
    GET  /projects/{id}/repository/commits?ref_name=... list_commits()
    GET  /projects/{id}/repository/tags                 list_release_candidates()
    POST /projects/{id}/repository/tags                 release tag
    POST /projects/{id}/releases                        release object
    POST /projects/{id}/repository/branches             hotfix branch

GitLab paginates with the ``X-Next-Page`` header, which is empty on the
last page.

.. seealso::

    `GitLab REST API <https://docs.gitlab.com/ee/api/rest/>`_
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from urllib.parse import quote

import httpx

from semrel.backends.provider._base import (
    PER_PAGE,
    RepositoryInfo,
    check_response,
    json_list,
    json_object,
    parse_slug,
    resolve_token,
    send,
)
from semrel.commit_parsing import Commit, classify
from semrel.logging import get_logger
from semrel.net import DEFAULT_POOL_SIZE, DEFAULT_TIMEOUT, MAX_RETRIES, http_client
from semrel.selector import TagCandidate
from semrel.tags import format_branch, format_tag
from semrel.versions import Version

log = get_logger('semrel.backends.provider.gitlab')

_DEFAULT_BASE_URL = 'https://gitlab.com'

_TOKEN_ENV_VARS = ('GITLAB_TOKEN', 'GL_TOKEN')


def _next_page(response: httpx.Response) -> int | None:
    value = response.headers.get('X-Next-Page', '').strip()
    return int(value) if value.isdigit() else None


class GitLabRepository:
    """Repository provider backed by the GitLab REST API.

    Args:
        slug: Project path, ``"group/project"`` (subgroups allowed).
        token: GitLab API token. Falls back to ``GITLAB_TOKEN`` or
            ``GL_TOKEN`` env vars.
        base_url: GitLab instance URL.
        project_id: Numeric project ID; the slug is used when empty.
        timeout: HTTP request timeout in seconds.
        retries: Extra attempts for transient errors (0 = none).
    """

    def __init__(
        self,
        slug: str,
        *,
        token: str = '',
        base_url: str = '',
        project_id: str = '',
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = MAX_RETRIES,
    ) -> None:
        """Initialize with the project path and API token."""
        self._owner, self._repo = parse_slug(slug)
        self._base_url = (base_url or _DEFAULT_BASE_URL).rstrip('/')
        self._project = project_id or quote(slug.strip(), safe='')
        self._project_url = f'{self._base_url}/api/v4/projects/{self._project}'
        self._timeout = timeout
        self._retries = retries

        resolved_token = resolve_token(token, _TOKEN_ENV_VARS, 'GitLab')
        self._headers = {'PRIVATE-TOKEN': resolved_token}

    def __repr__(self) -> str:
        """Return a safe repr that never exposes the API token."""
        return f'GitLabRepository(owner={self._owner!r}, repo={self._repo!r}, project={self._project!r})'

    @property
    def provider(self) -> str:
        """Human-readable provider name."""
        return 'GitLab'

    @property
    def owner(self) -> str:
        """Project namespace."""
        return self._owner

    @property
    def repo(self) -> str:
        """Project name."""
        return self._repo

    def _client(self) -> AbstractAsyncContextManager[httpx.AsyncClient]:
        return http_client(pool_size=DEFAULT_POOL_SIZE, timeout=self._timeout, headers=self._headers)

    async def info(self) -> RepositoryInfo:
        """Fetch the default branch and visibility."""
        async with self._client() as client:
            response = await send(client, 'GET', self._project_url, action='get project', retries=self._retries)
        check_response(response, 'get project')
        data = json_object(response, 'get project')
        return RepositoryInfo(
            default_branch=data.get('default_branch') or '',
            private=data.get('visibility', 'private') != 'public',
        )

    async def list_commits(self, sha: str, package_scope: str = '', *, since_sha: str = '') -> list[Commit]:
        """List commits reachable from ``sha``, newest first.

        Pages are drained until ``since_sha`` (excluded) or the end of
        history.
        """
        url = f'{self._project_url}/repository/commits'
        commits: list[Commit] = []
        page: int | None = 1
        pages = 0
        async with self._client() as client:
            while page is not None:
                response = await send(
                    client,
                    'GET',
                    url,
                    action='list commits',
                    retries=self._retries,
                    params={'ref_name': sha, 'per_page': PER_PAGE, 'page': page},
                )
                check_response(response, 'list commits')
                pages += 1
                items = json_list(response, 'list commits')
                for item in items:
                    if since_sha and item['id'] == since_sha:
                        log.debug('commits_listed', count=len(commits), pages=pages, reached=since_sha)
                        return commits
                    commits.append(classify(item.get('message', ''), sha=item['id'], package_scope=package_scope))
                page = _next_page(response) if items else None

        log.debug('commits_listed', count=len(commits), pages=pages)
        return commits

    async def list_release_candidates(self, package_scope: str = '') -> list[TagCandidate]:
        """List every tag with the commit it points at.

        A 404 (no tags, or an empty repository) yields an empty list.
        """
        url = f'{self._project_url}/repository/tags'
        candidates: list[TagCandidate] = []
        page: int | None = 1
        async with self._client() as client:
            while page is not None:
                response = await send(
                    client,
                    'GET',
                    url,
                    action='list tags',
                    retries=self._retries,
                    params={'per_page': PER_PAGE, 'page': page},
                )
                if response.status_code == 404:
                    log.debug('no_tags', project=self._project)
                    return []
                check_response(response, 'list tags')
                items = json_list(response, 'list tags')
                for item in items:
                    commit = item.get('commit') or {}
                    candidates.append(TagCandidate(tag=item.get('name', ''), sha=commit.get('id', '')))
                page = _next_page(response) if items else None

        log.debug('tags_listed', count=len(candidates))
        return candidates

    async def create_release(
        self,
        changelog: str,
        new_version: Version,
        *,
        prerelease: bool = False,
        branch: str,
        branch_head_sha: str,
        release_sha: str,
        package_scope: str = '',
        default_branch: str,
    ) -> None:
        """Create the tag, the release and, from the default branch, the hotfix branch.

        GitLab releases have no pre-release flag; the version string
        carries it.

        Raises:
            SemrelError: ``SR-PROVIDER-FAILURE`` on the first failing call.
        """
        tag = format_tag(package_scope, new_version)
        if prerelease and not new_version.is_prerelease:
            log.warning('gitlab_prerelease_flag_ignored', tag=tag)

        async with self._client() as client:
            response = await send(
                client,
                'POST',
                f'{self._project_url}/repository/tags',
                action=f'create tag {tag}',
                retries=self._retries,
                json={'tag_name': tag, 'ref': release_sha},
            )
            check_response(response, f'create tag {tag}')
            log.info('tag_created', tag=tag, sha=release_sha)

            response = await send(
                client,
                'POST',
                f'{self._project_url}/releases',
                action=f'create release {tag}',
                retries=self._retries,
                json={'tag_name': tag, 'name': tag, 'description': changelog},
            )
            check_response(response, f'create release {tag}')
            log.info('release_created', tag=tag)

            if branch == default_branch:
                anchor = format_branch(package_scope, new_version)
                response = await send(
                    client,
                    'POST',
                    f'{self._project_url}/repository/branches',
                    action=f'create branch {anchor}',
                    retries=self._retries,
                    json={'branch': anchor, 'ref': release_sha},
                )
                check_response(response, f'create branch {anchor}')
                log.info('hotfix_branch_created', branch=anchor, sha=release_sha, head=branch_head_sha)


__all__ = [
    'GitLabRepository',
]
