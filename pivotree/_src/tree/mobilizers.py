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
PIVOTREE: Mobilizers, the kinematic implementation of joints.

A mobilizer maps generalized coordinates and velocities to the relative
motion of an outboard frame ``M`` w.r.t. an inboard frame ``F``. Mobilizers
hold no state themselves: coordinates and velocities live in a
:class:`TreeContext`, at the offsets the tree assigns on finalization.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from ..core import scalars
from ..core.errors import InternalConsistencyError
from ..core.types import override
from ..utils import logger as msg
from .context import TreeContext
from .forces import MultibodyForces
from .frames import Frame

###
# Module interface
###

__all__ = ["Mobilizer", "RevoluteMobilizer"]


###
# Interfaces
###


class Mobilizer(ABC):
    """
    Base class of all mobilizers.

    Subclasses report their number of generalized positions and velocities
    and implement the per-kind state accessors.
    """

    def __init__(self, inboard_frame: Frame, outboard_frame: Frame):
        self._inboard_frame: Frame = inboard_frame
        self._outboard_frame: Frame = outboard_frame
        self._position_start: int = -1
        self._velocity_start: int = -1

    @property
    def inboard_frame(self) -> Frame:
        """The frame ``F`` on the parent side of the mobilizer."""
        return self._inboard_frame

    @property
    def outboard_frame(self) -> Frame:
        """The frame ``M`` on the child side of the mobilizer."""
        return self._outboard_frame

    @property
    @abstractmethod
    def num_positions(self) -> int:
        """Number of generalized positions of the mobilizer."""

    @property
    @abstractmethod
    def num_velocities(self) -> int:
        """Number of generalized velocities of the mobilizer."""

    @property
    def position_start(self) -> int:
        """Offset of the mobilizer's positions in the tree's array of generalized positions."""
        self._check_has_offsets()
        return self._position_start

    @property
    def velocity_start(self) -> int:
        """Offset of the mobilizer's velocities in the tree's array of generalized velocities."""
        self._check_has_offsets()
        return self._velocity_start

    @property
    def has_offsets(self) -> bool:
        return self._position_start >= 0 and self._velocity_start >= 0

    def set_offsets(self, position_start: int, velocity_start: int) -> None:
        """
        Assigns the offsets of the mobilizer in the tree's global arrays.

        Called once by the owning tree on finalization.
        """
        if self.has_offsets:
            msg.critical("Mobilizer offsets can only be assigned once.")
            raise InternalConsistencyError(
                f"Mobilizer offsets already assigned: ({self._position_start}, {self._velocity_start})."
            )
        if position_start < 0 or velocity_start < 0:
            raise ValueError(f"Invalid mobilizer offsets: ({position_start}, {velocity_start}). Must be non-negative.")
        self._position_start = position_start
        self._velocity_start = velocity_start

    def get_generalized_forces_slice(self) -> slice:
        """Returns the slice of the tree's generalized-force array owned by this mobilizer."""
        return slice(self.velocity_start, self.velocity_start + self.num_velocities)

    def add_in_generalized_force(self, forces: MultibodyForces, mobilizer_dof: int, tau: Any) -> None:
        """Adds ``tau`` into the generalized force of the mobilizer's local DoF ``mobilizer_dof``."""
        tau_mob = self.get_generalized_forces_slice()
        index = tau_mob.start + mobilizer_dof
        if mobilizer_dof < 0 or index >= tau_mob.stop:
            raise InternalConsistencyError(f"Mobilizer DoF {mobilizer_dof} is out of range [0, {self.num_velocities}).")
        forces.add_in_generalized_force(index, tau)

    @abstractmethod
    def set_default_state(self, context: TreeContext) -> None:
        """Writes the mobilizer's default positions and velocities into ``context``."""

    @abstractmethod
    def calc_rotation_matrix(self, context: TreeContext) -> Any:
        """Computes the rotation ``R_FM`` of the outboard frame w.r.t. the inboard frame."""

    def _check_has_offsets(self) -> None:
        if not self.has_offsets:
            msg.critical("Mobilizer used before its tree was finalized.")
            raise InternalConsistencyError("Mobilizer offsets have not been assigned by a tree finalization.")


###
# Implementations
###


class RevoluteMobilizer(Mobilizer):
    """
    A 1-DoF mobilizer rotating frame ``M`` about a unit axis ``a`` fixed in frame ``F``.

    Since the axis has the same measures in both frames, ``a_F = a_M``. The
    angle is positive according to the right-hand rule about the axis.
    """

    def __init__(self, inboard_frame: Frame, outboard_frame: Frame, axis: np.ndarray, default_angle: float = 0.0):
        super().__init__(inboard_frame, outboard_frame)
        self._axis: np.ndarray = np.array(axis, dtype=np.float64)
        self._axis.flags.writeable = False
        self._default_angle: float = float(default_angle)

    @property
    @override
    def num_positions(self) -> int:
        return 1

    @property
    @override
    def num_velocities(self) -> int:
        return 1

    @property
    def revolute_axis(self) -> np.ndarray:
        """The unit axis of rotation, measured in both ``F`` and ``M``."""
        return self._axis

    @property
    def default_angle(self) -> float:
        return self._default_angle

    def get_angle(self, context: TreeContext) -> Any:
        """Gets the rotation angle [rad] stored in ``context``."""
        return context.get_position(self.position_start)

    def set_angle(self, context: TreeContext, angle: Any) -> RevoluteMobilizer:
        """Stores the rotation angle [rad] in ``context``."""
        context.set_position(self.position_start, angle)
        return self

    def get_angular_rate(self, context: TreeContext) -> Any:
        """Gets the rate of change of the angle [rad/s] stored in ``context``."""
        return context.get_velocity(self.velocity_start)

    def set_angular_rate(self, context: TreeContext, theta_dot: Any) -> RevoluteMobilizer:
        """Stores the rate of change of the angle [rad/s] in ``context``."""
        context.set_velocity(self.velocity_start, theta_dot)
        return self

    @override
    def set_default_state(self, context: TreeContext) -> None:
        self.set_angle(context, self._default_angle)
        self.set_angular_rate(context, 0.0)

    @override
    def calc_rotation_matrix(self, context: TreeContext) -> Any:
        return scalars.rotation_about_axis(context.scalar_kind, self._axis, self.get_angle(context))
