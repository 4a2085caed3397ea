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


"""Command-line interface for semrel.

Subcommands::

    semrel release [--dry-run]   plan and publish the next release
    semrel version               print the next version (no side effects)
    semrel explain CODE          describe an SR-* error code

Settings come from ``semrel.toml`` (see :mod:`semrel.config`); flags
override the file. Logs go to stderr, results to stdout, so
``semrel version`` composes with shell pipelines.

Exit codes::

    0    success (including "nothing to release" and --dry-run)
    1    SemrelError
    2    usage error
    130  interrupted
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

from rich_argparse import RichHelpFormatter

from semrel import __version__
from semrel.backends.provider import ProviderOptions, Repository, new_repository
from semrel.config import ALLOWED_PROVIDERS, SemrelConfig, load_config
from semrel.errors import SemrelError, explain, render_error
from semrel.logging import bind_run_context, configure_logging, get_logger
from semrel.release import ReleaseOptions, plan_release, run_release

logger = get_logger(__name__)


def _pick(flag: object, configured: object) -> object:
    """Flag value when given on the command line, else the configured one."""
    return configured if flag is None else flag


def _provider_options(args: argparse.Namespace, config: SemrelConfig) -> ProviderOptions:
    return ProviderOptions(
        provider=str(_pick(args.provider, config.provider)),
        slug=str(_pick(args.slug, config.slug)),
        token=args.token or '',
        ghe_host=str(_pick(args.ghe_host, config.ghe_host)),
        gitlab_base_url=str(_pick(args.gitlab_base_url, config.gitlab_base_url)),
        gitlab_project_id=str(_pick(args.gitlab_project_id, config.gitlab_project_id)),
        timeout=config.http_timeout,
        retries=config.http_retries,
    )


def _release_options(args: argparse.Namespace, config: SemrelConfig) -> ReleaseOptions:
    branch = args.branch or ''
    date = args.date if args.date is not None else datetime.now(timezone.utc).date().isoformat()
    return ReleaseOptions(
        branch=branch,
        sha=args.sha or branch,
        default_branch=str(_pick(args.default_branch, config.default_branch)),
        package=str(_pick(args.package, config.package)),
        match=str(_pick(args.match, config.match)),
        maintained_version=str(_pick(args.maintained_version, config.maintained_version)),
        commit_hash=args.commit_hash or '',
        prerelease=bool(_pick(args.prerelease, config.prerelease)),
        changelog=str(_pick(args.changelog, config.changelog)),
        version_file=bool(_pick(args.version_file, config.version_file)),
        ghr=bool(_pick(args.ghr, config.ghr)),
        update=str(_pick(args.update, config.update)),
        allow_initial_development_versions=bool(
            _pick(args.allow_initial_development_versions, config.allow_initial_development_versions),
        ),
        fallback=bool(_pick(args.fallback, config.fallback)),
        date=date,
        workdir=args.root,
    )


def _open(args: argparse.Namespace) -> tuple[Repository, ReleaseOptions]:
    """Build the provider and options, and tag later log events with them."""
    config = load_config(args.root)
    repository = new_repository(_provider_options(args, config))
    options = _release_options(args, config)
    bind_run_context(
        provider=repository.provider,
        repo=f'{repository.owner}/{repository.repo}',
        package=options.package,
        branch=options.branch,
    )
    return repository, options


async def _cmd_release(args: argparse.Namespace) -> int:
    """Handle the ``release`` subcommand."""
    repository, options = _open(args)

    plan = await run_release(repository, options, dry_run=args.dry_run)
    if not plan.should_release:
        print('No release.')  # noqa: T201 - CLI output
        return 0

    print(plan.new_version)  # noqa: T201 - CLI output
    if args.dry_run:
        print()  # noqa: T201 - CLI output
        print(plan.changelog, end='')  # noqa: T201 - CLI output
        logger.info('dry_run_complete', hint='No release was created.')
    return 0


async def _cmd_version(args: argparse.Namespace) -> int:
    """Handle the ``version`` subcommand."""
    repository, options = _open(args)
    plan = await plan_release(repository, options)
    if plan.new_version is not None:
        print(plan.new_version)  # noqa: T201 - CLI output
    return 0


def _cmd_explain(args: argparse.Namespace) -> int:
    """Handle the ``explain`` subcommand."""
    result = explain(args.code)
    if result is None:
        print(f'Unknown error code: {args.code}')  # noqa: T201 - CLI output
        return 1
    print(result)  # noqa: T201 - CLI output
    return 0


def _add_resolution_args(parser: argparse.ArgumentParser) -> None:
    """Flags shared by ``release`` and ``version``."""
    repo_group = parser.add_argument_group('repository')
    repo_group.add_argument('--provider', choices=sorted(ALLOWED_PROVIDERS), help='Repository host (default: github).')
    repo_group.add_argument('--slug', help='Repository as owner/name.')
    repo_group.add_argument(
        '--token',
        help='API token (default: GITHUB_TOKEN / GH_TOKEN or GITLAB_TOKEN / GL_TOKEN).',
    )
    repo_group.add_argument('--ghe-host', dest='ghe_host', help='GitHub Enterprise host name.')
    repo_group.add_argument('--gitlab-base-url', dest='gitlab_base_url', help='Self-hosted GitLab URL.')
    repo_group.add_argument('--gitlab-project-id', dest='gitlab_project_id', help='GitLab project ID.')

    branch_group = parser.add_argument_group('branch')
    branch_group.add_argument('--branch', help='Branch being released.')
    branch_group.add_argument('--sha', help='Head commit of the branch (default: the branch name).')
    branch_group.add_argument(
        '--default-branch',
        dest='default_branch',
        help='Default branch (default: asked from the provider).',
    )
    branch_group.add_argument(
        '--commit-hash',
        dest='commit_hash',
        help='Commit the release must point at; fails if it is not in the fetched history.',
    )

    resolve_group = parser.add_argument_group('resolution')
    resolve_group.add_argument('--package', help='Package scope for commits, tags and branches.')
    resolve_group.add_argument('--match', help='Only consider tags matching this regex.')
    resolve_group.add_argument(
        '--maintained-version',
        dest='maintained_version',
        help='Maintenance line, e.g. 1.x, ~1.2 or 2.0.0-beta.',
    )
    resolve_group.add_argument(
        '--allow-initial-development-versions',
        dest='allow_initial_development_versions',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Keep 0.x versions on 0.x (default: on).',
    )
    resolve_group.add_argument(
        '--fallback',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Release a minor (default branch) or patch (other branches) when no commit qualifies (default: on).',
    )
    resolve_group.add_argument(
        '--date',
        default=None,
        help='Date for the changelog heading (default: today, UTC; empty to omit).',
    )

    output_group = parser.add_argument_group('outputs')
    output_group.add_argument(
        '--prerelease',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Mark the release as a pre-release.',
    )
    output_group.add_argument('--changelog', metavar='PATH', help='Write the changelog to PATH.')
    output_group.add_argument(
        '--version-file',
        dest='version_file',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Write the new version to .version.',
    )
    output_group.add_argument(
        '--ghr',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Write ghr upload arguments to .ghr.',
    )
    output_group.add_argument('--update', metavar='PATH', help='Write the new version into package.json or pyproject.toml.')

    parser.add_argument(
        '--root',
        type=Path,
        default=Path(),
        help='Directory holding semrel.toml; .version and .ghr are written here (default: .).',
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured :class:`argparse.ArgumentParser`.
    """
    RichHelpFormatter.styles['argparse.groups'] = 'bold yellow'
    parser = argparse.ArgumentParser(
        prog='semrel',
        description='Compute the next semantic version and release from conventional commits.',
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging.')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', dest='json_log', action='store_true', help='Log JSON lines instead of text.')

    subparsers = parser.add_subparsers(dest='command')

    release_parser = subparsers.add_parser(
        'release',
        help='Create the next release: tag, release notes and hotfix branch.',
        formatter_class=RichHelpFormatter,
    )
    release_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Compute and print the release without creating anything.',
    )
    _add_resolution_args(release_parser)

    version_parser = subparsers.add_parser(
        'version',
        help='Print the next version without creating anything.',
        formatter_class=RichHelpFormatter,
    )
    _add_resolution_args(version_parser)

    explain_parser = subparsers.add_parser(
        'explain',
        help='Explain an error code (e.g. SR-SLUG-MALFORMED).',
        formatter_class=RichHelpFormatter,
    )
    explain_parser.add_argument('code', help='Error code to explain.')

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Arguments (default: ``sys.argv[1:]``).

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        command = args.command
        if command == 'release':
            return asyncio.run(_cmd_release(args))
        if command == 'version':
            return asyncio.run(_cmd_version(args))
        if command == 'explain':
            return _cmd_explain(args)

        parser.print_help()  # noqa: T201 - CLI output
        print(  # noqa: T201 - CLI output
            f'\n{parser.prog}: error: please provide a command',
            file=sys.stderr,
        )
        return 2

    except SemrelError as exc:
        render_error(exc)
        return 1
    except KeyboardInterrupt:
        logger.info('interrupted')
        return 130


def _main() -> None:
    """Wrapper for pyproject.toml [project.scripts] entry point."""
    sys.exit(main())


__all__ = [
    'build_parser',
    'main',
]
