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

"""
PIVOTREE: Generalized forces applied to a multibody tree.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from ..core import scalars
from ..core.scalars import ScalarKind

if TYPE_CHECKING:
    from .tree import MultibodyTree

###
# Module interface
###

__all__ = ["MultibodyForces"]


###
# Containers
###


class MultibodyForces:
    """
    Aggregate of the generalized forces applied to a :class:`MultibodyTree`.

    The aggregate owns a contiguous array of generalized forces [N or N·m,
    depending on the joint type] with shape ``(num_velocities,)`` of the
    tree's scalar kind. Joints never own a slice of it, they only know the
    offset of their degrees of freedom and accumulate into it additively, so
    that several force producers can contribute within one simulation step.
    """

    def __init__(self, tree: MultibodyTree):
        """
        Allocates a zero force aggregate sized for ``tree``.

        Args:
            tree (MultibodyTree): A finalized tree.
        """
        if not tree.is_finalized:
            raise RuntimeError("MultibodyForces: The tree must be finalized before allocating forces for it.")
        self._scalar_kind: ScalarKind = tree.scalar_kind
        self._generalized_forces: Any = scalars.zeros(tree.scalar_kind, tree.num_velocities, device=tree.config.device)

    @classmethod
    def from_size(
        cls, num_velocities: int, scalar_kind: ScalarKind = ScalarKind.FLOAT64, device: str = "cpu"
    ) -> MultibodyForces:
        """Allocates a zero force aggregate of ``num_velocities`` entries, independently of any tree."""
        forces = cls.__new__(cls)
        forces._scalar_kind = ScalarKind.from_any(scalar_kind)
        forces._generalized_forces = scalars.zeros(forces._scalar_kind, num_velocities, device=device)
        return forces

    @property
    def scalar_kind(self) -> ScalarKind:
        """Scalar kind of the generalized forces."""
        return self._scalar_kind

    @property
    def num_velocities(self) -> int:
        """Number of generalized forces held by the aggregate."""
        return scalars.size(self._scalar_kind, self._generalized_forces)

    @property
    def generalized_forces(self) -> Any:
        """The underlying array of generalized forces."""
        return self._generalized_forces

    def get_generalized_forces(self) -> np.ndarray:
        """Returns a host copy of the generalized forces."""
        return scalars.to_numpy(self._scalar_kind, self._generalized_forces)

    def get_generalized_force(self, index: int) -> Any:
        return scalars.get_value(self._scalar_kind, self._generalized_forces, index)

    def add_in_generalized_force(self, index: int, value: Any) -> None:
        """Adds ``value`` into the generalized force at ``index``."""
        self._generalized_forces = scalars.add_value(self._scalar_kind, self._generalized_forces, index, value)

    def check_has_right_size_for_model(self, tree: MultibodyTree) -> bool:
        """
        Checks whether the aggregate can be applied to ``tree``.

        Returns:
            bool: ``True`` if the aggregate has one entry per generalized velocity
            of ``tree`` and uses the same scalar kind, ``False`` otherwise.
        """
        return self._scalar_kind == tree.scalar_kind and self.num_velocities == tree.num_velocities

    def set_zero(self) -> None:
        """Resets all generalized forces to zero."""
        if self._scalar_kind == ScalarKind.FLOAT64:
            self._generalized_forces.zero_()
        else:
            self._generalized_forces = scalars.zeros(self._scalar_kind, self.num_velocities)

    def add_in_forces(self, other: MultibodyForces) -> None:
        """
        Adds the generalized forces of ``other`` into this aggregate.

        Raises:
            ValueError: If ``other`` does not have the same size and scalar kind.
        """
        if other.scalar_kind != self._scalar_kind or other.num_velocities != self.num_velocities:
            raise ValueError(
                f"Incompatible force aggregates: ({self.num_velocities}, {self._scalar_kind}) "
                f"and ({other.num_velocities}, {other.scalar_kind})."
            )
        for i in range(self.num_velocities):
            self.add_in_generalized_force(i, other.get_generalized_force(i))
