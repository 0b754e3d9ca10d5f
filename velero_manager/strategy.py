# /*
# Copyright 2026 The Grove Authors.
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
# */

"""Installation strategy selection."""

from __future__ import annotations

from velero_manager.models import HealthSnapshot, Strategy


def resolve_strategy(snapshot: HealthSnapshot, force: bool) -> Strategy:
    """Map a health snapshot and the force flag to a strategy.

    Args:
        snapshot: Current health of the installation.
        force: Whether the caller asked for a clean reinstall.

    Returns:
        FORCE_REINSTALL when forced, SKIP_INSTALL when healthy, FRESH_INSTALL otherwise.
    """
    if force:
        return Strategy.FORCE_REINSTALL
    if snapshot.is_healthy:
        return Strategy.SKIP_INSTALL
    return Strategy.FRESH_INSTALL
