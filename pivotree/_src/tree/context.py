# SPDX-FileCopyrightText: Copyright (c) 2025 The Newton Developers
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Defines the Context containers holding the time-varying state of a tree."""

from __future__ import annotations

from typing import Any

import numpy as np

from ..core import scalars
from ..core.scalars import ScalarKind

###
# Module interface
###

__all__ = ["Context", "TreeContext"]


###
# Containers
###


class Context:
    """
    Opaque container of time-varying simulation state.

    Joints only ever pass contexts through to their mobilizers. Operations
    reading or writing joint state require the concrete :class:`TreeContext`
    created by the owning tree, see :meth:`MultibodyTree.create_default_context`.
    """

    def __init__(self, scalar_kind: ScalarKind = ScalarKind.FLOAT64, time: float = 0.0):
        self.scalar_kind: ScalarKind = ScalarKind.from_any(scalar_kind)
        """Scalar kind of the values held in the context."""

        self.time: float = time
        """Simulation time [s]."""


class TreeContext(Context):
    """
    Represents the generalized state of a :class:`MultibodyTree`.

    We adopt the following notational conventions for the state attributes:
    - Generalized positions are denoted by ``q``, shape ``(num_positions,)``
    - Generalized velocities are denoted by ``v``, shape ``(num_velocities,)``

    Entries are laid out by mobilizer, at the offsets assigned when the tree
    was finalized. Arrays use the storage of the tree's scalar kind.
    """

    def __init__(
        self,
        tree_uid: str,
        num_positions: int,
        num_velocities: int,
        scalar_kind: ScalarKind = ScalarKind.FLOAT64,
        time: float = 0.0,
        device: str = "cpu",
    ):
        super().__init__(scalar_kind=scalar_kind, time=time)

        self.tree_uid: str = tree_uid
        """UID of the tree that created this context."""

        self.q: Any = scalars.zeros(self.scalar_kind, num_positions, device=device)
        """Array of generalized positions."""

        self.v: Any = scalars.zeros(self.scalar_kind, num_velocities, device=device)
        """Array of generalized velocities."""

    @property
    def num_positions(self) -> int:
        """The number of generalized positions represented in the context."""
        return scalars.size(self.scalar_kind, self.q)

    @property
    def num_velocities(self) -> int:
        """The number of generalized velocities represented in the context."""
        return scalars.size(self.scalar_kind, self.v)

    def get_position(self, index: int) -> Any:
        return scalars.get_value(self.scalar_kind, self.q, index)

    def set_position(self, index: int, value: Any) -> None:
        self.q = scalars.set_value(self.scalar_kind, self.q, index, value)

    def get_velocity(self, index: int) -> Any:
        return scalars.get_value(self.scalar_kind, self.v, index)

    def set_velocity(self, index: int, value: Any) -> None:
        self.v = scalars.set_value(self.scalar_kind, self.v, index, value)

    def get_positions(self) -> np.ndarray:
        """Returns a host copy of the generalized positions."""
        return scalars.to_numpy(self.scalar_kind, self.q)

    def get_velocities(self) -> np.ndarray:
        """Returns a host copy of the generalized velocities."""
        return scalars.to_numpy(self.scalar_kind, self.v)
