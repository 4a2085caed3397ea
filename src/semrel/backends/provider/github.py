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


"""GitHub repository provider.

Implements :class:`~semrel.backends.provider.Repository` against the
GitHub REST API v3 via ``httpx``. GitHub Enterprise Server is reached
through ``https://<ghe_host>/api/v3``.

Authentication:

    Resolves a token in order of precedence:

    1. ``token`` constructor parameter.
    2. ``GITHUB_TOKEN`` env var (set automatically by GitHub Actions).
    3. ``GH_TOKEN`` env var (used by the ``gh`` CLI).

    If none are set, construction fails with ``SR-PROVIDER-AUTH`` rather
    than on the first API call.

Endpoints used::

    GET  /repos/{owner}/{repo}                       info()
    GET  /repos/{owner}/{repo}/commits?sha=...       list_commits()
    GET  /repos/{owner}/{repo}/git/refs/tags         list_release_candidates()
    POST /repos/{owner}/{repo}/git/refs              tag + hotfix branch
    POST /repos/{owner}/{repo}/releases              release object

Usage::

    from semrel.backends.provider.github import GitHubRepository

    repo = GitHubRepository('acme/widgets', token='...')
    info = await repo.info()

.. seealso::

    `GitHub REST API <https://docs.github.com/en/rest>`_
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager

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
from semrel.errors import E, SemrelError
from semrel.logging import get_logger
from semrel.net import DEFAULT_POOL_SIZE, DEFAULT_TIMEOUT, MAX_RETRIES, http_client
from semrel.selector import TagCandidate
from semrel.tags import format_branch, format_tag
from semrel.versions import Version

log = get_logger('semrel.backends.provider.github')

# GitHub REST API base URL.
_DEFAULT_BASE_URL = 'https://api.github.com'

# API version header for stable API behavior.
_API_VERSION = '2022-11-28'

_TOKEN_ENV_VARS = ('GITHUB_TOKEN', 'GH_TOKEN')


class GitHubRepository:
    """Repository provider backed by the GitHub REST API.

    Args:
        slug: Repository identifier, ``"owner/name"``.
        token: GitHub API token. Falls back to ``GITHUB_TOKEN`` or
            ``GH_TOKEN`` env vars.
        ghe_host: GitHub Enterprise Server host name, if any.
        timeout: HTTP request timeout in seconds.
        retries: Extra attempts for transient errors (0 = none).
    """

    def __init__(
        self,
        slug: str,
        *,
        token: str = '',
        ghe_host: str = '',
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = MAX_RETRIES,
    ) -> None:
        """Initialize with the repository slug and API token."""
        owner, repo = parse_slug(slug)
        if '/' in owner:
            raise SemrelError(
                code=E.SLUG_MALFORMED,
                message=f'GitHub slug {slug!r} must be exactly owner/name',
            )
        self._owner = owner
        self._repo = repo
        self._base_url = f'https://{ghe_host}/api/v3' if ghe_host else _DEFAULT_BASE_URL
        self._repo_url = f'{self._base_url}/repos/{owner}/{repo}'
        self._timeout = timeout
        self._retries = retries

        resolved_token = resolve_token(token, _TOKEN_ENV_VARS, 'GitHub')
        self._headers = {
            'Authorization': f'Bearer {resolved_token}',
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': _API_VERSION,
        }

    def __repr__(self) -> str:
        """Return a safe repr that never exposes the API token."""
        return f'GitHubRepository(owner={self._owner!r}, repo={self._repo!r})'

    @property
    def provider(self) -> str:
        """Human-readable provider name."""
        return 'GitHub'

    @property
    def owner(self) -> str:
        """Repository owner."""
        return self._owner

    @property
    def repo(self) -> str:
        """Repository name."""
        return self._repo

    def _client(self) -> AbstractAsyncContextManager[httpx.AsyncClient]:
        return http_client(pool_size=DEFAULT_POOL_SIZE, timeout=self._timeout, headers=self._headers)

    async def info(self) -> RepositoryInfo:
        """Fetch the default branch and visibility."""
        async with self._client() as client:
            response = await send(client, 'GET', self._repo_url, action='get repository', retries=self._retries)
        check_response(response, 'get repository')
        data = json_object(response, 'get repository')
        return RepositoryInfo(
            default_branch=data.get('default_branch') or '',
            private=bool(data.get('private', False)),
        )

    async def list_commits(self, sha: str, package_scope: str = '', *, since_sha: str = '') -> list[Commit]:
        """List commits reachable from ``sha``, newest first.

        Pages are drained until ``since_sha`` (excluded) or the end of
        history.
        """
        url = f'{self._repo_url}/commits'
        commits: list[Commit] = []
        page = 1
        async with self._client() as client:
            while True:
                response = await send(
                    client,
                    'GET',
                    url,
                    action='list commits',
                    retries=self._retries,
                    params={'sha': sha, 'per_page': PER_PAGE, 'page': page},
                )
                check_response(response, 'list commits')
                items = json_list(response, 'list commits')
                for item in items:
                    if since_sha and item['sha'] == since_sha:
                        log.debug('commits_listed', count=len(commits), pages=page, reached=since_sha)
                        return commits
                    message = (item.get('commit') or {}).get('message', '')
                    commits.append(classify(message, sha=item['sha'], package_scope=package_scope))
                if not items or 'next' not in response.links:
                    break
                page += 1

        log.debug('commits_listed', count=len(commits), pages=page)
        return commits

    async def list_release_candidates(self, package_scope: str = '') -> list[TagCandidate]:
        """List every lightweight tag that points at a commit.

        A 404 (no tags, or an empty repository) yields an empty list.
        ``package_scope`` is unused: prefixes are handled by the selector.
        """
        url = f'{self._repo_url}/git/refs/tags'
        candidates: list[TagCandidate] = []
        page = 1
        async with self._client() as client:
            while True:
                response = await send(
                    client,
                    'GET',
                    url,
                    action='list tags',
                    retries=self._retries,
                    params={'per_page': PER_PAGE, 'page': page},
                )
                if response.status_code == 404:
                    log.debug('no_tags', repo=self._repo)
                    return []
                check_response(response, 'list tags')
                items = json_list(response, 'list tags')
                for item in items:
                    target = item.get('object') or {}
                    if target.get('type') != 'commit':
                        continue
                    tag = item.get('ref', '').removeprefix('refs/tags/')
                    candidates.append(TagCandidate(tag=tag, sha=target.get('sha', '')))
                if not items or 'next' not in response.links:
                    break
                page += 1

        log.debug('tags_listed', count=len(candidates), pages=page)
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
        """Create the tag ref, the release and, from the default branch, the hotfix branch.

        Raises:
            SemrelError: ``SR-PROVIDER-FAILURE`` on the first failing call.
        """
        tag = format_tag(package_scope, new_version)
        is_prerelease = prerelease or new_version.is_prerelease
        refs_url = f'{self._repo_url}/git/refs'

        async with self._client() as client:
            response = await send(
                client,
                'POST',
                refs_url,
                action=f'create tag {tag}',
                retries=self._retries,
                json={'ref': f'refs/tags/{tag}', 'sha': release_sha},
            )
            check_response(response, f'create tag {tag}')
            log.info('tag_created', tag=tag, sha=release_sha)

            response = await send(
                client,
                'POST',
                f'{self._repo_url}/releases',
                action=f'create release {tag}',
                retries=self._retries,
                json={
                    'tag_name': tag,
                    'name': tag,
                    'target_commitish': release_sha,
                    'body': changelog,
                    'prerelease': is_prerelease,
                },
            )
            check_response(response, f'create release {tag}')
            log.info('release_created', tag=tag, prerelease=is_prerelease)

            if branch == default_branch:
                anchor = format_branch(package_scope, new_version)
                response = await send(
                    client,
                    'POST',
                    refs_url,
                    action=f'create branch {anchor}',
                    retries=self._retries,
                    json={'ref': f'refs/heads/{anchor}', 'sha': release_sha},
                )
                check_response(response, f'create branch {anchor}')
                log.info('hotfix_branch_created', branch=anchor, sha=release_sha, head=branch_head_sha)


__all__ = [
    'GitHubRepository',
]
