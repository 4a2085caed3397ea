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


"""Markdown changelog generation from classified commits.

Renders the commits since the previous release as a markdown section
grouped by commit type (Breaking Changes, Features, Bug Fixes, etc.).
Rendering is pure: the same commits and versions always produce
byte-identical text, so rewriting a changelog file is idempotent.

Changelog generation flow::

    provider.list_commits(...)  (already classified)
         │
         ▼
    drop unclassified commits
         │
         ▼
    breaking commits → "Breaking Changes" (with their body)
    everything else  → one section per type, canonical order
         │
         ▼
    render_changelog(...) → markdown string

Usage::

    from semrel.changelog import render_changelog

    md = render_changelog(commits, prior, Version(0, 5, 0), date='2026-10-18')
    print(md)
    # ## 0.5.0 (2026-10-18)
    #
    # Changes since 0.4.0.
    #
    # ### Features
    #
    # - **streaming**: add real-time event streaming (def4567)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from semrel.commit_parsing import Commit
from semrel.logging import get_logger
from semrel.versions import PriorRelease, Release, Version

logger = get_logger(__name__)

# Maps commit type to section heading (display order matters).
_SECTION_ORDER: list[tuple[str, str]] = [
    ('breaking', 'Breaking Changes'),
    ('feat', 'Features'),
    ('fix', 'Bug Fixes'),
    ('perf', 'Performance'),
    ('refactor', 'Refactoring'),
    ('docs', 'Documentation'),
    ('test', 'Tests'),
    ('ci', 'CI/CD'),
    ('build', 'Build'),
    ('chore', 'Chores'),
    ('style', 'Style'),
    ('revert', 'Reverts'),
]

_SHORT_SHA_LENGTH = 7


@dataclass(frozen=True)
class ChangelogEntry:
    """A single changelog entry from one commit.

    Attributes:
        type: Commit type (e.g. ``"feat"``, ``"fix"``).
        subject: Commit subject line, after the ``type(scope):`` prefix.
        sha: Short commit SHA.
        scope: Optional scope.
        breaking: Whether the commit carries a breaking-change marker.
        body: Message lines after the subject, shown for breaking entries.
    """

    type: str
    subject: str
    sha: str = ''
    scope: str = ''
    breaking: bool = False
    body: tuple[str, ...] = ()


@dataclass
class ChangelogSection:
    """A group of changelog entries under one heading.

    Attributes:
        heading: Section heading (e.g. ``"Features"``).
        entries: Entries in this section, in commit order.
    """

    heading: str
    entries: list[ChangelogEntry] = field(default_factory=list)


def _commit_to_entry(commit: Commit) -> ChangelogEntry:
    return ChangelogEntry(
        type=commit.type,
        subject=commit.subject,
        sha=commit.sha[:_SHORT_SHA_LENGTH],
        scope=commit.scope,
        breaking=commit.change.major,
        body=_trim_blank(commit.body),
    )


def _trim_blank(lines: tuple[str, ...]) -> tuple[str, ...]:
    stripped = [line.rstrip() for line in lines]
    while stripped and not stripped[0]:
        stripped.pop(0)
    while stripped and not stripped[-1]:
        stripped.pop()
    return tuple(stripped)


def group_entries(commits: Iterable[Commit]) -> list[ChangelogSection]:
    """Group classified commits into ordered sections.

    Unclassified commits are dropped. Sections follow ``_SECTION_ORDER``;
    types outside it follow in alphabetical order. Empty sections are
    omitted and commit order is preserved within a section.
    """
    buckets: dict[str, list[ChangelogEntry]] = {}
    for commit in commits:
        if not commit.classified:
            continue
        entry = _commit_to_entry(commit)
        key = 'breaking' if entry.breaking else entry.type
        buckets.setdefault(key, []).append(entry)

    sections: list[ChangelogSection] = []
    for type_key, heading in _SECTION_ORDER:
        bucket = buckets.pop(type_key, [])
        if bucket:
            sections.append(ChangelogSection(heading=heading, entries=bucket))

    # Catch any types not in the predefined order.
    for type_key, bucket in sorted(buckets.items()):
        sections.append(ChangelogSection(heading=type_key.capitalize(), entries=bucket))

    return sections


def _render_entry(entry: ChangelogEntry) -> list[str]:
    """Render one entry as a markdown bullet.

    Format: ``- **scope**: subject (sha)``, followed by the indented body
    for breaking entries.
    """
    parts: list[str] = ['- ']
    if entry.scope:
        parts.append(f'**{entry.scope}**: ')
    parts.append(entry.subject)
    if entry.sha:
        parts.append(f' ({entry.sha})')

    lines = [''.join(parts)]
    if entry.breaking and entry.body:
        lines.append('')
        lines.extend(f'  {line}' if line else '' for line in entry.body)
    return lines


def render_changelog(
    commits: Iterable[Commit],
    prior: PriorRelease,
    new_version: Version,
    *,
    date: str = '',
) -> str:
    """Render the changelog for ``new_version`` as markdown.

    Args:
        commits: Classified commits since the previous release,
            newest-first.
        prior: The previous release (or :class:`NoPriorRelease`).
        new_version: The version being released.
        date: Optional date string for the heading.

    Returns:
        A markdown string ending in a single newline.
    """
    sections = group_entries(commits)

    heading = f'## {new_version}'
    if date:
        heading += f' ({date})'
    lines: list[str] = [heading, '']

    if isinstance(prior, Release):
        lines.append(f'Changes since {prior.version}.')
    else:
        lines.append('Initial release.')
    lines.append('')

    for section in sections:
        lines.append(f'### {section.heading}')
        lines.append('')
        for entry in section.entries:
            lines.extend(_render_entry(entry))
        lines.append('')

    logger.debug(
        'changelog_rendered',
        version=str(new_version),
        sections=len(sections),
        entries=sum(len(s.entries) for s in sections),
    )
    return '\n'.join(lines).rstrip() + '\n'


def write_changelog(path: Path | str, text: str) -> None:
    """Write rendered changelog text to ``path`` verbatim."""
    Path(path).write_text(text, encoding='utf-8')
    logger.info('changelog_written', path=str(path))


__all__ = [
    'ChangelogEntry',
    'ChangelogSection',
    'group_entries',
    'render_changelog',
    'write_changelog',
]
