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


"""Release orchestration: plan, then publish.

Runs the resolution engine end to end against a
:class:`~semrel.backends.provider.Repository`. Planning performs every
lookup and check; publishing performs every side effect. Nothing is
written, tagged or released until planning has fully succeeded.

Release flow::

    repository.info()                       default branch, visibility
         │
         ▼
    branch checks                           SR-BRANCH-*, SR-MAINTENANCE-INVALID
         │
         ▼
    repository.list_release_candidates()    all pages
         │
         ▼
    select_latest_release(...)              prior release (or none)
         │
         ▼
    repository.list_commits(sha, since=prior.sha)
         │
         ▼
    get_new_version / resolve_version       None → nothing to release
         │
         ▼
    release SHA (--commit-hash anchor)      SR-COMMIT-NOT-FOUND
         │
         ▼
    render_changelog(...)                   ReleasePlan
         │
         ▼  (skipped on --dry-run)
    changelog file → tag → release → hotfix branch → .version → .ghr → manifest

Every stage awaits the previous one; nothing runs concurrently.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from semrel.backends.provider import Repository
from semrel.changelog import render_changelog, write_changelog
from semrel.commit_parsing import Commit
from semrel.errors import E, SemrelError
from semrel.logging import get_logger
from semrel.selector import select_latest_release
from semrel.tags import format_tag, hotfix_suffix
from semrel.update import apply_update, write_ghr_file, write_version_file
from semrel.versioning import BranchContext, check_prerelease_line, get_new_version, resolve_version
from semrel.versions import PriorRelease, Version

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReleaseOptions:
    """Caller inputs for one release run.

    Attributes:
        branch: Branch being released.
        sha: Head commit of ``branch``; history is walked from here.
        default_branch: Default branch override; asked from the
            provider when empty.
        package: Package scope for commits, tags and branches.
        match: Regex previous-release tags must match at their start.
        maintained_version: Maintenance line constraint.
        commit_hash: Commit the release must point at. When set it has
            to be among the fetched commits.
        prerelease: Mark the provider release as a pre-release.
        changelog: Path the changelog is written to, if any.
        version_file: Write ``.version`` into ``workdir``.
        ghr: Write ``.ghr`` into ``workdir``.
        update: Manifest whose version is rewritten, if any.
        allow_initial_development_versions: Keep ``0.x`` on ``0.x``.
        fallback: Release with a branch-policy bump when no commit
            qualifies.
        date: Date shown in the changelog heading.
        workdir: Directory ``.version`` and ``.ghr`` are written to.
    """

    branch: str
    sha: str
    default_branch: str = ''
    package: str = ''
    match: str = ''
    maintained_version: str = ''
    commit_hash: str = ''
    prerelease: bool = False
    changelog: str = ''
    version_file: bool = False
    ghr: bool = False
    update: str = ''
    allow_initial_development_versions: bool = True
    fallback: bool = True
    date: str = ''
    workdir: Path = field(default_factory=Path)


@dataclass(frozen=True)
class ReleasePlan:
    """Everything computed before any side effect.

    Attributes:
        branch: Branch being released.
        default_branch: The repository's default branch.
        prior: The previous release, or :class:`NoPriorRelease`.
        commits: Classified commits since ``prior``, newest first.
        new_version: The next version, or ``None`` if nothing qualifies.
        release_sha: Commit the release points at ('' when not releasing).
        tag: Name of the release tag ('' when not releasing).
        changelog: Rendered release notes ('' when not releasing).
    """

    branch: str
    default_branch: str
    prior: PriorRelease
    commits: tuple[Commit, ...] = ()
    new_version: Version | None = None
    release_sha: str = ''
    tag: str = ''
    changelog: str = ''

    @property
    def should_release(self) -> bool:
        """Whether publishing this plan creates a release."""
        return self.new_version is not None


def _compile_match(pattern: str) -> re.Pattern[str] | None:
    pattern = pattern.strip()
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise SemrelError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'--match is not a valid regular expression: {exc}',
        ) from exc


def find_release_sha(commits: list[Commit], head_sha: str, commit_hash: str = '') -> str:
    """Pick the commit the release points at.

    Without an anchor this is the newest fetched commit, or ``head_sha``
    when nothing was fetched.

    Raises:
        SemrelError: ``SR-COMMIT-NOT-FOUND`` if ``commit_hash`` is not
            among ``commits``.
    """
    if not commit_hash:
        return commits[0].sha if commits else head_sha
    for commit in commits:
        if commit.sha == commit_hash:
            return commit.sha
    raise SemrelError(
        code=E.COMMIT_NOT_FOUND,
        message=f'Commit not found: {commit_hash}',
        hint=f'{len(commits)} commit(s) were fetched since the previous release.',
    )


async def plan_release(repository: Repository, options: ReleaseOptions) -> ReleasePlan:
    """Compute the next release without side effects.

    Raises:
        SemrelError: On any branch, maintenance, selection, anchor or
            provider failure.
    """
    if not options.branch:
        raise SemrelError(code=E.BRANCH_NO_CURRENT, message='Current branch not found')

    info = await repository.info()
    default_branch = options.default_branch or info.default_branch
    if not default_branch:
        raise SemrelError(code=E.BRANCH_NO_DEFAULT, message='Default branch not found')
    logger.info('found_default_branch', branch=default_branch)
    if info.private:
        logger.info('repo_is_private', owner=repository.owner, repo=repository.repo)
    logger.info('found_current_branch', branch=options.branch, sha=options.sha)

    if options.maintained_version:
        if options.branch == default_branch:
            raise SemrelError(
                code=E.MAINTENANCE_INVALID,
                message='Maintained version not allowed on the default branch',
                hint=f'Release {options.maintained_version!r} from a maintenance branch.',
            )
        logger.info('found_maintained_version', maintained_version=options.maintained_version)

    match = _compile_match(options.match)
    hotfix = hotfix_suffix(options.branch, options.package) if options.branch != default_branch else ''

    candidates = await repository.list_release_candidates(options.package)
    prior = select_latest_release(
        candidates,
        package_scope=options.package,
        match=match,
        maintained_version=options.maintained_version,
        hotfix=hotfix,
    )
    logger.info('found_version', version=str(prior.version), sha=prior.sha or None)

    context = BranchContext(
        branch=options.branch,
        default_branch=default_branch,
        maintained_version=options.maintained_version,
        allow_initial_development_versions=options.allow_initial_development_versions,
    )
    check_prerelease_line(prior, context)

    commits = await repository.list_commits(options.sha, options.package, since_sha=prior.sha)
    logger.info('found_commits', count=len(commits))

    if options.fallback:
        new_version: Version | None = resolve_version(commits, prior, context)
    else:
        new_version = get_new_version(commits, prior, context)

    if new_version is None:
        logger.info('no_release', reason='no qualifying commits', previous=str(prior.version))
        return ReleasePlan(
            branch=options.branch,
            default_branch=default_branch,
            prior=prior,
            commits=tuple(commits),
        )

    release_sha = find_release_sha(commits, options.sha, options.commit_hash)
    changelog = render_changelog(commits, prior, new_version, date=options.date)
    logger.info('new_version', version=str(new_version), previous=str(prior.version), sha=release_sha)
    return ReleasePlan(
        branch=options.branch,
        default_branch=default_branch,
        prior=prior,
        commits=tuple(commits),
        new_version=new_version,
        release_sha=release_sha,
        tag=format_tag(options.package, new_version),
        changelog=changelog,
    )


async def publish_release(repository: Repository, plan: ReleasePlan, options: ReleaseOptions) -> None:
    """Perform the side effects of ``plan``, in order.

    The changelog file is written first, then the provider creates the
    tag, release and (from the default branch) hotfix branch, then the
    local ``.version``, ``.ghr`` and manifest files are written.
    """
    if plan.new_version is None:
        logger.info('nothing_to_publish')
        return
    version = str(plan.new_version)

    if options.changelog:
        write_changelog(options.changelog, plan.changelog)

    logger.info('creating_release', tag=plan.tag, sha=plan.release_sha)
    await repository.create_release(
        plan.changelog,
        plan.new_version,
        prerelease=options.prerelease,
        branch=options.branch,
        branch_head_sha=options.sha,
        release_sha=plan.release_sha,
        package_scope=options.package,
        default_branch=plan.default_branch,
    )

    if options.version_file:
        write_version_file(options.workdir, version)
    if options.ghr:
        write_ghr_file(options.workdir, repository.owner, repository.repo, version)
    if options.update:
        apply_update(Path(options.update), version)

    logger.info('done', version=version, tag=plan.tag)


async def run_release(repository: Repository, options: ReleaseOptions, *, dry_run: bool = False) -> ReleasePlan:
    """Plan and, unless ``dry_run``, publish a release.

    Returns:
        The computed :class:`ReleasePlan`.
    """
    plan = await plan_release(repository, options)
    if not plan.should_release:
        return plan
    if dry_run:
        logger.info('dry_run', version=str(plan.new_version), tag=plan.tag)
        return plan
    await publish_release(repository, plan, options)
    return plan


__all__ = [
    'ReleaseOptions',
    'ReleasePlan',
    'find_release_sha',
    'plan_release',
    'publish_release',
    'run_release',
]
