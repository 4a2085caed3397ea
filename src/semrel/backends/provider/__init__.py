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


"""Repository provider protocol for semrel.

The :class:`Repository` protocol is the narrow boundary between the
resolution engine and the host the repository lives on. Implementations:

- :class:`~semrel.backends.provider.github.GitHubRepository`: GitHub REST API
  (github.com or GitHub Enterprise Server).
- :class:`~semrel.backends.provider.gitlab.GitLabRepository`: GitLab REST API
  (gitlab.com or self-hosted).

Providers share no state and hold only their HTTP configuration (base URL,
headers) set at construction. Commit classification, release selection and
version resolution live once in the core; providers only fetch and create.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from semrel.backends.provider._base import (
    ProviderOptions as ProviderOptions,
    RepositoryInfo as RepositoryInfo,
    parse_slug as parse_slug,
)
from semrel.backends.provider.github import GitHubRepository as GitHubRepository
from semrel.backends.provider.gitlab import GitLabRepository as GitLabRepository
from semrel.commit_parsing import Commit
from semrel.errors import E, SemrelError
from semrel.logging import get_logger
from semrel.selector import TagCandidate
from semrel.versions import Version

__all__ = [
    'GitHubRepository',
    'GitLabRepository',
    'ProviderOptions',
    'Repository',
    'RepositoryInfo',
    'new_repository',
    'parse_slug',
]

log = get_logger('semrel.backends.provider')


@runtime_checkable
class Repository(Protocol):
    """Protocol for repository hosts (GitHub, GitLab).

    All network methods are async and issue their requests strictly one
    after another. Lists are built completely before they are returned,
    so a cancelled or failed call never leaks a partial result.
    """

    @property
    def provider(self) -> str:
        """Human-readable provider name, e.g. ``"GitHub"``."""
        ...

    @property
    def owner(self) -> str:
        """Repository owner or namespace."""
        ...

    @property
    def repo(self) -> str:
        """Repository name."""
        ...

    async def info(self) -> RepositoryInfo:
        """Return the default branch and whether the repository is private."""
        ...

    async def list_commits(self, sha: str, package_scope: str = '', *, since_sha: str = '') -> list[Commit]:
        """List classified commits reachable from ``sha``, newest first.

        Args:
            sha: Commit (or branch) to walk back from.
            package_scope: Scope filter handed to the classifier.
            since_sha: Stop before this commit (the previous release).
        """
        ...

    async def list_release_candidates(self, package_scope: str = '') -> list[TagCandidate]:
        """List every tag with the commit it points at.

        Args:
            package_scope: Package whose releases are of interest.
        """
        ...

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
        """Create the release tag, the release object and, when releasing
        the default branch, the hotfix anchor branch.

        Args:
            changelog: Release notes (markdown).
            new_version: The version being released.
            prerelease: Mark the release as a pre-release.
            branch: Branch being released.
            branch_head_sha: Head commit of ``branch``.
            release_sha: Commit the tag (and branch) point at.
            package_scope: Package the tag and branch names are built from.
            default_branch: The repository's default branch.
        """
        ...


def new_repository(options: ProviderOptions) -> Repository:
    """Construct the provider ``options`` select.

    Raises:
        SemrelError: ``SR-CONFIG-INVALID-VALUE`` for an unknown provider,
            ``SR-SLUG-MALFORMED`` or ``SR-PROVIDER-AUTH`` from the
            provider itself.
    """
    if options.provider == 'github':
        repository: Repository = GitHubRepository(
            options.slug,
            token=options.token,
            ghe_host=options.ghe_host,
            timeout=options.timeout,
            retries=options.retries,
        )
    elif options.provider == 'gitlab':
        repository = GitLabRepository(
            options.slug,
            token=options.token,
            base_url=options.gitlab_base_url,
            project_id=options.gitlab_project_id,
            timeout=options.timeout,
            retries=options.retries,
        )
    else:
        raise SemrelError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"Unknown provider '{options.provider}'",
            hint="Use 'github' or 'gitlab'.",
        )
    log.info('releasing_on', provider=repository.provider, owner=repository.owner, repo=repository.repo)
    return repository
