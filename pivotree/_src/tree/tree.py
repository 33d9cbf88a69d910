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
PIVOTREE: Multibody Tree
"""

from __future__ import annotations

import copy
import uuid

from ..core.config import TreeConfig
from ..core.errors import ContextTypeError, InternalConsistencyError
from ..core.scalars import ScalarKind
from ..core.types import FloatArrayLike
from ..utils import logger as msg
from .arena import MobilizerArena, MobilizerHandle, MobilizerT
from .context import TreeContext
from .frames import Frame
from .joints import Blueprint, Joint, JointImplementation
from .mobilizers import Mobilizer
from .revolute_joint import RevoluteJoint

###
# Module interface
###

__all__ = ["MultibodyTree"]


###
# Containers
###


class MultibodyTree:
    """
    A tree of frames connected by joints.

    The tree owns its frames, its joints and, once finalized, the mobilizers
    implementing those joints. Typical usage is:

    1. add frames with :meth:`add_frame` and joints with :meth:`add_joint`,
    2. call :meth:`finalize` exactly once,
    3. create contexts with :meth:`create_default_context` and force
       aggregates with :class:`MultibodyForces`.

    A tree is instantiated for a single :class:`ScalarKind`. Use
    :meth:`clone_to_scalar` to obtain an independent copy operating on
    another kind.
    """

    WORLD_FRAME_NAME = "world"
    """Name of the world frame every tree creates on construction."""

    def __init__(
        self,
        scalar_kind: ScalarKind = ScalarKind.FLOAT64,
        config: TreeConfig | None = None,
        name: str = "tree",
    ):
        """
        Initializes a new tree holding only the world frame.

        Args:
            scalar_kind (ScalarKind): The arithmetic kind of the tree's state and forces.
            config (TreeConfig | None): The tree's configuration. Defaults to `TreeConfig()`.
            name (str): Name of the tree.
        """
        if not isinstance(scalar_kind, ScalarKind):
            raise TypeError(f"Invalid scalar kind: {scalar_kind}. Must be `ScalarKind`.")
        if config is None:
            config = TreeConfig()
        if not isinstance(config, TreeConfig):
            raise TypeError(f"Invalid config type: {type(config)}. Must be `TreeConfig`.")

        # Meta-data
        self._name: str = name
        self._uid: str = str(uuid.uuid4())
        self._scalar_kind: ScalarKind = scalar_kind
        self._config: TreeConfig = config

        # Declare model entities
        self._frames: list[Frame] = []
        self._joints: list[Joint] = []
        self._mobilizers: MobilizerArena = MobilizerArena()

        # Declare and initialize counters
        self._num_positions: int = 0
        self._num_velocities: int = 0
        self._finalized: bool = False

        self.add_frame(self.WORLD_FRAME_NAME)

    ###
    # Properties
    ###

    @property
    def name(self) -> str:
        return self._name

    @property
    def uid(self) -> str:
        """The unique identifier of the tree."""
        return self._uid

    @property
    def scalar_kind(self) -> ScalarKind:
        """The arithmetic kind of the tree's state and forces."""
        return self._scalar_kind

    @property
    def config(self) -> TreeConfig:
        return self._config

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    @property
    def num_frames(self) -> int:
        return len(self._frames)

    @property
    def num_joints(self) -> int:
        return len(self._joints)

    @property
    def num_mobilizers(self) -> int:
        return len(self._mobilizers)

    @property
    def num_positions(self) -> int:
        """Total number of generalized positions, valid after finalization."""
        return self._num_positions

    @property
    def num_velocities(self) -> int:
        """Total number of generalized velocities (i.e. DoFs), valid after finalization."""
        return self._num_velocities

    @property
    def world_frame(self) -> Frame:
        return self._frames[0]

    @property
    def frames(self) -> list[Frame]:
        return list(self._frames)

    @property
    def joints(self) -> list[Joint]:
        return list(self._joints)

    ###
    # Model building
    ###

    def add_frame(self, name: str) -> Frame:
        """
        Adds a new frame to the tree.

        Args:
            name (str): Name of the frame, unique within the tree.

        Returns:
            Frame: The new frame.
        """
        self._check_not_finalized()
        if any(f.name == name for f in self._frames):
            raise ValueError(f"Invalid frame name: `{name}`. A frame with this name already exists.")
        frame = Frame(name, len(self._frames), self._uid)
        self._frames.append(frame)
        return frame

    def add_joint(self, joint: Joint) -> Joint:
        """
        Adds a joint connecting two frames of this tree.

        Args:
            joint (Joint): The joint to add. It must not belong to another tree.

        Returns:
            Joint: The added joint.
        """
        self._check_not_finalized()
        if not isinstance(joint, Joint):
            raise TypeError(f"Invalid joint type: {type(joint)}. Must be `Joint`.")
        for frame in (joint.frame_on_parent, joint.frame_on_child):
            if frame.tree_uid != self._uid:
                raise ValueError(f"Joint `{joint.name}`: frame `{frame.name}` does not belong to this tree.")
        if any(j.name == joint.name for j in self._joints):
            raise ValueError(f"Invalid joint name: `{joint.name}`. A joint with this name already exists.")
        joint._set_parent_tree(self, len(self._joints))
        self._joints.append(joint)
        return joint

    def add_revolute_joint(
        self,
        name: str,
        frame_on_parent: Frame,
        frame_on_child: Frame,
        axis: FloatArrayLike,
        default_angle: float = 0.0,
    ) -> RevoluteJoint:
        """Creates a :class:`RevoluteJoint` and adds it to the tree. See :meth:`RevoluteJoint.__init__`."""
        joint = RevoluteJoint(
            name,
            frame_on_parent,
            frame_on_child,
            axis,
            default_angle=default_angle,
            epsilon=self._config.axis_epsilon,
        )
        self.add_joint(joint)
        return joint

    ###
    # Lookup
    ###

    def get_frame(self, index: int) -> Frame:
        if index < 0 or index >= len(self._frames):
            raise IndexError(f"Invalid frame index: {index}. Must be in range [0, {len(self._frames)}).")
        return self._frames[index]

    def get_frame_by_name(self, name: str) -> Frame:
        for frame in self._frames:
            if frame.name == name:
                return frame
        raise KeyError(f"No frame named `{name}`.")

    def get_joint(self, index: int) -> Joint:
        if index < 0 or index >= len(self._joints):
            raise IndexError(f"Invalid joint index: {index}. Must be in range [0, {len(self._joints)}).")
        return self._joints[index]

    def get_joint_by_name(self, name: str) -> Joint:
        for joint in self._joints:
            if joint.name == name:
                return joint
        raise KeyError(f"No joint named `{name}`.")

    def get_mobilizer(self, handle: MobilizerHandle[MobilizerT]) -> MobilizerT:
        """Resolves a mobilizer handle issued by this tree."""
        return self._mobilizers.get(handle)

    ###
    # Model Compilation
    ###

    def finalize(self) -> MultibodyTree:
        """
        Creates the mobilizers implementing every joint and assigns the state layout.

        Each joint is asked for its blueprint exactly once. Mobilizers are laid
        out in order of joint addition, so that the positions and velocities of
        joint ``j`` follow those of joint ``j - 1``.

        Returns:
            MultibodyTree: This tree.

        Raises:
            ValueError: If a frame would be moved by more than one mobilizer.
            InternalConsistencyError: If the tree was already finalized.
        """
        if self._finalized:
            msg.critical(f"Tree `{self._name}` finalized twice.")
            raise InternalConsistencyError(f"Tree `{self._name}` has already been finalized.")

        # Collect and check all blueprints before modifying any joint
        blueprints: list[Blueprint] = [joint._create_blueprint() for joint in self._joints]
        mobilized: dict[int, str] = {}
        for joint, blueprint in zip(self._joints, blueprints, strict=True):
            for mobilizer in blueprint.mobilizers:
                outboard = mobilizer.outboard_frame
                if outboard.is_world:
                    raise ValueError(f"Joint `{joint.name}`: the world frame cannot be the child of a joint.")
                if outboard.index in mobilized:
                    raise ValueError(
                        f"Joint `{joint.name}`: frame `{outboard.name}` is already the child of joint "
                        f"`{mobilized[outboard.index]}`."
                    )
                mobilized[outboard.index] = joint.name

        # Move the mobilizers into the arena and bind the joints to them
        position_start = 0
        velocity_start = 0
        for joint, blueprint in zip(self._joints, blueprints, strict=True):
            handles = []
            for mobilizer in blueprint.mobilizers:
                mobilizer.set_offsets(position_start, velocity_start)
                position_start += mobilizer.num_positions
                velocity_start += mobilizer.num_velocities
                handles.append(self._mobilizers.add(mobilizer))
            blueprint.mobilizers.clear()
            joint._set_implementation(JointImplementation(handles=tuple(handles)))
            self._check_implementation(joint)

        self._num_positions = position_start
        self._num_velocities = velocity_start
        self._finalized = True

        msg.debug(
            "Finalized tree `%s` (%s): %d frames, %d joints, %d mobilizers, nq=%d, nv=%d",
            self._name,
            self._scalar_kind,
            self.num_frames,
            self.num_joints,
            self.num_mobilizers,
            self._num_positions,
            self._num_velocities,
        )
        return self

    def create_default_context(self) -> TreeContext:
        """
        Creates a context holding the default state of every mobilizer.

        Raises:
            RuntimeError: If the tree has not been finalized.
        """
        if not self._finalized:
            raise RuntimeError(f"Tree `{self._name}` must be finalized before creating a context.")
        context = TreeContext(
            tree_uid=self._uid,
            num_positions=self._num_positions,
            num_velocities=self._num_velocities,
            scalar_kind=self._scalar_kind,
            time=self._config.default_time,
            device=self._config.device,
        )
        self.set_default_state(context)
        return context

    def set_default_state(self, context: TreeContext) -> None:
        """Writes the default state of every mobilizer into ``context``."""
        if not isinstance(context, TreeContext) or context.tree_uid != self._uid:
            raise ContextTypeError(f"Tree `{self._name}`: the context was not created by this tree.")
        for mobilizer in self._mobilizers:
            mobilizer.set_default_state(context)

    ###
    # Scalar conversion
    ###

    def clone_to_scalar(self, scalar_kind: ScalarKind) -> MultibodyTree:
        """
        Creates an independent copy of this tree operating on ``scalar_kind``.

        Frames are cloned in order, preserving their names and indices, then each
        joint clones itself into the new tree. If this tree is finalized, so is
        the clone. The clone shares no mutable state with this tree.

        Args:
            scalar_kind (ScalarKind): The arithmetic kind of the clone.

        Returns:
            MultibodyTree: The new tree.
        """
        if not isinstance(scalar_kind, ScalarKind):
            raise TypeError(f"Invalid scalar kind: {scalar_kind}. Must be `ScalarKind`.")
        tree_clone = MultibodyTree(scalar_kind=scalar_kind, config=copy.deepcopy(self._config), name=self._name)
        for frame in self._frames[1:]:
            tree_clone.add_frame(frame.name)
        for joint in self._joints:
            tree_clone.add_joint(joint.clone_to_scalar(tree_clone))
        if self._finalized:
            tree_clone.finalize()
        msg.debug("Cloned tree `%s` from %s to %s", self._name, self._scalar_kind, scalar_kind)
        return tree_clone

    ###
    # Internals
    ###

    def _check_not_finalized(self) -> None:
        if self._finalized:
            raise RuntimeError(f"Tree `{self._name}` has been finalized and can no longer be modified.")

    def _check_implementation(self, joint: Joint) -> None:
        implementation = joint.get_implementation()
        for handle in implementation.handles:
            mobilizer = self._mobilizers.get(handle)
            if not isinstance(mobilizer, Mobilizer):
                msg.critical(f"Joint `{joint.name}` is bound to an invalid object.")
                raise InternalConsistencyError(f"Joint `{joint.name}` is bound to a `{type(mobilizer).__name__}`.")
        num_velocities = sum(self._mobilizers.get(h).num_velocities for h in implementation.handles)
        if num_velocities != joint.num_dofs:
            msg.critical(f"Joint `{joint.name}` DoF count does not match its mobilizers.")
            raise InternalConsistencyError(
                f"Joint `{joint.name}` declares {joint.num_dofs} DoFs but its mobilizers provide {num_velocities}."
            )
