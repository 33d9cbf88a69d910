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

"""Provides the revolute joint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from ..core.config import AXIS_EPSILON_DEFAULT
from ..core.errors import InternalConsistencyError, JointConstructionError
from ..core.types import FloatArrayLike, override
from ..utils import logger as msg
from .context import Context, TreeContext
from .forces import MultibodyForces
from .frames import Frame
from .joints import Blueprint, Joint
from .mobilizers import RevoluteMobilizer

if TYPE_CHECKING:
    from .tree import MultibodyTree

###
# Module interface
###

__all__ = ["RevoluteJoint"]


###
# Joints
###


class RevoluteJoint(Joint):
    """
    A joint allowing two bodies to rotate relative to one another about a common axis.

    Given a frame ``F`` attached to the parent body ``P`` and a frame ``M``
    attached to the child body ``B``, the joint lets ``F`` and ``M`` rotate
    w.r.t. each other about an axis ``a``. The sign of the rotation angle is
    such that ``B`` rotates about ``a`` according to the right-hand rule. The
    axis is constant and has the same measures in both frames, ``a_F = a_M``.

    The joint only describes the relation. Its state lives in a
    :class:`TreeContext` and is accessed through the :class:`RevoluteMobilizer`
    created for it when its tree is finalized.
    """

    def __init__(
        self,
        name: str,
        frame_on_parent: Frame,
        frame_on_child: Frame,
        axis: FloatArrayLike,
        default_angle: float = 0.0,
        epsilon: float = AXIS_EPSILON_DEFAULT,
    ):
        """
        Args:
            name (str): Name of the joint, unique within its tree.
            frame_on_parent (Frame): The frame ``F`` attached to the parent body.
            frame_on_child (Frame): The frame ``M`` attached to the child body.
            axis (FloatArrayLike): A 3D vector along the axis of rotation. Only the direction
                is used; the vector is stored normalized.
            default_angle (float): The angle [rad] written into newly created contexts.
            epsilon (float): Threshold below which every component of ``axis`` is considered zero.

        Raises:
            JointConstructionError: If ``axis`` is not a finite 3D vector or is the zero vector.
        """
        super().__init__(name, frame_on_parent, frame_on_child)
        axis = np.asarray(axis, dtype=np.float64)
        if axis.shape != (3,) or not np.all(np.isfinite(axis)):
            raise JointConstructionError(f"Invalid axis: {axis}. Must be a finite 3D vector.")
        if np.all(np.abs(axis) <= epsilon):
            raise JointConstructionError(f"Invalid axis: {axis}. Must not be the zero vector.")
        # Scale by the largest component first so that the norm cannot overflow
        axis = axis / np.max(np.abs(axis))
        self._axis: np.ndarray = axis / np.linalg.norm(axis)
        self._axis.flags.writeable = False
        self._default_angle: float = self._check_angle(default_angle)

    ###
    # Model data
    ###

    def get_revolute_axis(self) -> np.ndarray:
        """Returns the axis of rotation as a unit vector, measured in either ``F`` or ``M``."""
        return self._axis

    @property
    def revolute_axis(self) -> np.ndarray:
        """The axis of rotation as a unit vector."""
        return self._axis

    def get_default_angle(self) -> float:
        """Returns the angle [rad] written into newly created contexts."""
        return self._default_angle

    def set_default_angle(self, angle: float) -> RevoluteJoint:
        """
        Sets the angle [rad] written into newly created contexts.

        Raises:
            RuntimeError: If the joint's tree has already been finalized.
        """
        if self.has_implementation:
            raise RuntimeError(f"Joint `{self.name}`: the default angle cannot be changed after finalization.")
        self._default_angle = self._check_angle(angle)
        return self

    ###
    # Context-dependent values
    ###

    def get_angle(self, context: Context) -> Any:
        """
        Gets the rotation angle [rad] of the joint from ``context``.

        Raises:
            ContextTypeError: If ``context`` is not a context of the joint's tree.
        """
        return self._get_mobilizer().get_angle(self._check_context(context))

    def set_angle(self, context: Context, angle: Any) -> RevoluteJoint:
        """
        Stores the rotation angle [rad] of the joint in ``context``.

        Returns:
            RevoluteJoint: This joint, to allow chaining.

        Raises:
            ContextTypeError: If ``context`` is not a context of the joint's tree.
        """
        self._get_mobilizer().set_angle(self._check_context(context), angle)
        return self

    def get_angular_rate(self, context: Context) -> Any:
        """Gets the rate of change [rad/s] of the joint's angle from ``context``."""
        return self._get_mobilizer().get_angular_rate(self._check_context(context))

    def set_angular_rate(self, context: Context, theta_dot: Any) -> RevoluteJoint:
        """Stores the rate of change [rad/s] of the joint's angle in ``context``."""
        self._get_mobilizer().set_angular_rate(self._check_context(context), theta_dot)
        return self

    def calc_rotation_matrix(self, context: Context) -> Any:
        """Computes the rotation ``R_FM`` of frame ``M`` w.r.t. frame ``F`` at the angle stored in ``context``."""
        return self._get_mobilizer().calc_rotation_matrix(self._check_context(context))

    ###
    # Forces
    ###

    def add_in_torque(self, context: Context, torque: Any, forces: MultibodyForces) -> None:
        """
        Adds into ``forces`` a torque [N·m] about the joint's axis.

        The torque is positive according to the right-hand rule about the axis,
        i.e. a positive torque causes a positive angular acceleration. The torque
        is accumulated, never overwritten, so several contributors can add into
        the same aggregate.

        Raises:
            ForcesSizeError: If ``forces`` is ``None`` or not sized for the joint's tree.
                ``forces`` is left unmodified.
            ContextTypeError: If ``context`` is not a context of the joint's tree.
        """
        self._check_forces(forces)
        self.add_in_one_force(context, 0, torque, forces)

    ###
    # Joint hooks
    ###

    @override
    def _do_get_num_dofs(self) -> int:
        return 1

    @override
    def _make_implementation_blueprint(self) -> Blueprint:
        return Blueprint(
            mobilizers=[
                RevoluteMobilizer(self.frame_on_parent, self.frame_on_child, self._axis, self._default_angle),
            ]
        )

    @override
    def _do_add_in_one_force(self, context: TreeContext, joint_dof: int, joint_tau: Any, forces: MultibodyForces):
        # All the generalized force goes into the single mobilizer
        if joint_dof != 0:
            msg.critical(f"Joint `{self.name}` received a force for DoF {joint_dof}.")
            raise InternalConsistencyError(f"Revolute joint `{self.name}` has a single DoF, got DoF {joint_dof}.")
        self._get_mobilizer().add_in_generalized_force(forces, joint_dof, joint_tau)

    @override
    def _do_clone_to_scalar(
        self, tree_clone: MultibodyTree, frame_on_parent: Frame, frame_on_child: Frame
    ) -> RevoluteJoint:
        clone = RevoluteJoint(
            self.name,
            frame_on_parent,
            frame_on_child,
            self._axis,
            default_angle=self._default_angle,
            epsilon=tree_clone.config.axis_epsilon,
        )
        # Normalizing a unit vector again may change its last bit
        clone._axis = self._axis.copy()
        clone._axis.flags.writeable = False
        return clone

    ###
    # Internals
    ###

    def _get_mobilizer(self) -> RevoluteMobilizer:
        implementation = self.get_implementation()
        if implementation.num_mobilizers != 1:
            msg.critical(f"Joint `{self.name}` is implemented by {implementation.num_mobilizers} mobilizers.")
            raise InternalConsistencyError(
                f"Revolute joint `{self.name}` must be implemented by exactly one mobilizer, "
                f"found {implementation.num_mobilizers}."
            )
        handle = implementation.handles[0]
        if not issubclass(handle.mobilizer_type, RevoluteMobilizer):
            msg.critical(f"Joint `{self.name}` is implemented by a `{handle.mobilizer_type.__name__}`.")
            raise InternalConsistencyError(
                f"Revolute joint `{self.name}` must be implemented by a `RevoluteMobilizer`, "
                f"found a `{handle.mobilizer_type.__name__}`."
            )
        return self.parent_tree.get_mobilizer(handle)

    @staticmethod
    def _check_angle(angle: float) -> float:
        angle = float(angle)
        if not np.isfinite(angle):
            raise ValueError(f"Invalid angle: {angle}. Must be finite.")
        return angle
