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


"""Shared plumbing for the repository providers.

Both providers speak JSON over HTTPS through :mod:`semrel.net` and map
every transport or HTTP failure to ``SR-PROVIDER-FAILURE``. Nothing here
knows about a specific host.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import httpx

from semrel.errors import E, SemrelError
from semrel.logging import get_logger
from semrel.net import DEFAULT_TIMEOUT, MAX_RETRIES, request_with_retry

log = get_logger('semrel.backends.provider')

# Page size for list endpoints; both hosts cap it at 100.
PER_PAGE = 100

# Longest slice of an error body kept in a message.
_ERROR_BODY_LIMIT = 300


@dataclass(frozen=True)
class RepositoryInfo:
    """What the provider reports about the repository.

    Attributes:
        default_branch: Name of the default (mainline) branch.
        private: Whether the repository is private.
    """

    default_branch: str
    private: bool = False


@dataclass(frozen=True)
class ProviderOptions:
    """Everything needed to construct a repository provider.

    Attributes:
        provider: ``"github"`` or ``"gitlab"``.
        slug: Repository identifier in ``owner/name`` form.
        token: API token; read from the environment when empty.
        ghe_host: GitHub Enterprise host name.
        gitlab_base_url: Base URL of a self-hosted GitLab.
        gitlab_project_id: Explicit GitLab project ID.
        timeout: Request timeout in seconds.
        retries: Extra attempts for transient errors.
    """

    provider: str = 'github'
    slug: str = ''
    token: str = ''
    ghe_host: str = ''
    gitlab_base_url: str = ''
    gitlab_project_id: str = ''
    timeout: float = DEFAULT_TIMEOUT
    retries: int = MAX_RETRIES


def parse_slug(slug: str) -> tuple[str, str]:
    """Split ``owner/name`` into its parts.

    The owner may itself contain slashes (GitLab subgroups); the name is
    everything after the last one.

    Raises:
        SemrelError: ``SR-SLUG-MALFORMED`` if either part is missing.
    """
    owner, sep, name = slug.strip().rpartition('/')
    if not sep or not name or not owner or '' in owner.split('/'):
        raise SemrelError(
            code=E.SLUG_MALFORMED,
            message=f'Repository slug {slug!r} is not in owner/name form',
            hint='Pass --slug owner/name or set slug in semrel.toml.',
        )
    return owner, name


def resolve_token(token: str, env_vars: tuple[str, ...], provider: str) -> str:
    """Return ``token`` or the first non-empty environment variable.

    Raises:
        SemrelError: ``SR-PROVIDER-AUTH`` if no token is available.
    """
    resolved = token or next((os.environ[var] for var in env_vars if os.environ.get(var)), '')
    if not resolved:
        raise SemrelError(
            code=E.PROVIDER_AUTH,
            message=f'{provider} API token required',
            hint=f'Pass --token or set {" or ".join(env_vars)}.',
        )
    return resolved


def check_response(response: httpx.Response, action: str) -> None:
    """Raise ``SR-PROVIDER-FAILURE`` unless ``response`` succeeded."""
    if response.is_success:
        return
    body = response.text[:_ERROR_BODY_LIMIT]
    hint = 'Check that the token is valid and has write access to the repository.'
    if response.status_code not in (401, 403):
        hint = 'Re-run with --verbose to see the failing request.'
    raise SemrelError(
        code=E.PROVIDER_FAILURE,
        message=f'{action} failed: HTTP {response.status_code} {body}'.rstrip(),
        hint=hint,
    )


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    action: str,
    retries: int = MAX_RETRIES,
    **kwargs: Any,  # noqa: ANN401 - forwarded to httpx
) -> httpx.Response:
    """Issue one request, mapping transport errors to ``SR-PROVIDER-FAILURE``.

    HTTP error statuses are returned as is; callers decide which ones
    are expected (a 404 on an empty tag list, for instance).
    """
    log.debug('provider_request', method=method, url=url, action=action)
    try:
        return await request_with_retry(client, method, url, max_retries=retries, **kwargs)
    except httpx.HTTPError as exc:
        raise SemrelError(
            code=E.PROVIDER_FAILURE,
            message=f'{action} failed: {exc}',
        ) from exc


def _decode(response: httpx.Response, action: str) -> Any:  # noqa: ANN401 - any JSON value
    try:
        return response.json()
    except ValueError as exc:
        raise SemrelError(
            code=E.PROVIDER_FAILURE,
            message=f'{action} returned invalid JSON: {exc}',
        ) from exc


def json_object(response: httpx.Response, action: str) -> dict[str, Any]:
    """Decode a JSON object body, raising ``SR-PROVIDER-FAILURE`` otherwise."""
    data = _decode(response, action)
    if not isinstance(data, dict):
        raise SemrelError(
            code=E.PROVIDER_FAILURE,
            message=f'{action} returned {type(data).__name__}, expected an object',
        )
    return data


def json_list(response: httpx.Response, action: str) -> list[dict[str, Any]]:
    """Decode a JSON array body, raising ``SR-PROVIDER-FAILURE`` otherwise."""
    data = _decode(response, action)
    if not isinstance(data, list):
        raise SemrelError(
            code=E.PROVIDER_FAILURE,
            message=f'{action} returned {type(data).__name__}, expected a list',
        )
    return data


__all__ = [
    'PER_PAGE',
    'ProviderOptions',
    'RepositoryInfo',
    'check_response',
    'json_list',
    'json_object',
    'parse_slug',
    'resolve_token',
    'send',
]
