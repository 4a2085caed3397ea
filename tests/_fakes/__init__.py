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


"""Shared test fakes for semrel.

Provides a reusable fake implementation of the
:class:`~semrel.backends.provider.Repository` protocol so that individual
test modules don't need to duplicate boilerplate classes.

Usage::

    from tests._fakes import FakeRepository, commit

    repo = FakeRepository(
        tags=[TagCandidate('pkgA-release-v1.0.0', 'sha0')],
        commits=[commit('sha1', 'feat(pkgA): add export')],
    )
"""

from tests._fakes._provider import FakeRepository as FakeRepository, commit as commit

__all__ = [
    'FakeRepository',
    'commit',
]
