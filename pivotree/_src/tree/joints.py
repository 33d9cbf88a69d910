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
PIVOTREE: Generic joint interface.

A :class:`Joint` is a declarative description of the kinematic relation
between a frame on a parent body and a frame on a child body. When its tree
is finalized, each joint is asked exactly once for a :class:`Blueprint`
holding the mobilizers that implement it. The tree takes ownership of those
mobilizers and returns a :class:`JointImplementation` of typed handles, which
is the only way a joint reaches its mobilizers afterwards.

Public methods validate their arguments and then call the ``_do_*`` hooks
implemented by concrete joints.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..core.errors import ContextTypeError, ForcesSizeError, InternalConsistencyError, JointConstructionError
from ..core.scalars import ScalarKind
from ..core.types import Descriptor
from ..utils import logger as msg
from .arena import MobilizerHandle
from .context import Context, TreeContext
from .forces import MultibodyForces
from .frames import Frame
from .mobilizers import Mobilizer

if TYPE_CHECKING:
    from .tree import MultibodyTree

###
# Module interface
###

__all__ = ["Blueprint", "Joint", "JointImplementation"]


###
# Containers
###


@dataclass
class Blueprint:
    """
    The mobilizers produced by a joint on tree finalization.

    The tree moves every mobilizer out of the blueprint into its arena.
    """

    mobilizers: list[Mobilizer] = field(default_factory=list)
    """The mobilizers implementing the joint, in order of their DoFs."""


@dataclass(frozen=True)
class JointImplementation:
    """Handles to the tree-owned mobilizers implementing a joint."""

    handles: tuple[MobilizerHandle, ...] = ()
    """One handle per mobilizer, in order of the joint's DoFs."""

    @property
    def num_mobilizers(self) -> int:
        return len(self.handles)


###
# Interfaces
###


class Joint(Descriptor, ABC):
    """
    Base class of all joints connecting a frame ``F`` on a parent body to a frame ``M`` on a child body.
    """

    def __init__(self, name: str, frame_on_parent: Frame, frame_on_child: Frame):
        """
        Args:
            name (str): Name of the joint, unique within its tree.
            frame_on_parent (Frame): The frame ``F`` attached to the parent body.
            frame_on_child (Frame): The frame ``M`` attached to the child body.
        """
        super().__init__(name)
        if not isinstance(frame_on_parent, Frame):
            raise TypeError(f"Invalid parent frame type: {type(frame_on_parent)}. Must be `Frame`.")
        if not isinstance(frame_on_child, Frame):
            raise TypeError(f"Invalid child frame type: {type(frame_on_child)}. Must be `Frame`.")
        if frame_on_parent.tree_uid != frame_on_child.tree_uid:
            raise JointConstructionError(f"Joint `{name}`: parent and child frames belong to different trees.")
        if frame_on_parent.index == frame_on_child.index:
            raise JointConstructionError(f"Joint `{name}`: parent and child frames must be distinct.")
        self._frame_on_parent: Frame = frame_on_parent
        self._frame_on_child: Frame = frame_on_child

        # Set by the tree when the joint is added
        self._tree: MultibodyTree | None = None
        self._index: int = -1

        # Set by the tree on finalization
        self._implementation: JointImplementation | None = None

    ###
    # Properties
    ###

    @property
    def frame_on_parent(self) -> Frame:
        """The frame ``F`` attached to the parent body."""
        return self._frame_on_parent

    @property
    def frame_on_child(self) -> Frame:
        """The frame ``M`` attached to the child body."""
        return self._frame_on_child

    @property
    def index(self) -> int:
        """Index of the joint within its tree, ``-1`` until added to a tree."""
        return self._index

    @property
    def parent_tree(self) -> MultibodyTree:
        """The tree owning this joint."""
        if self._tree is None:
            raise RuntimeError(f"Joint `{self.name}` has not been added to a tree.")
        return self._tree

    @property
    def num_dofs(self) -> int:
        """Number of degrees of freedom of the joint."""
        return self._do_get_num_dofs()

    def degrees_of_freedom(self) -> int:
        """Returns the number of degrees of freedom of the joint."""
        return self.num_dofs

    @property
    def has_implementation(self) -> bool:
        return self._implementation is not None

    def get_implementation(self) -> JointImplementation:
        if self._implementation is None:
            msg.critical(f"Joint `{self.name}` has no implementation.")
            raise InternalConsistencyError(f"Joint `{self.name}` has no mobilizers; its tree has not been finalized.")
        return self._implementation

    def get_mobilizers(self) -> list[Mobilizer]:
        """Returns the tree-owned mobilizers implementing the joint."""
        return [self.parent_tree.get_mobilizer(h) for h in self.get_implementation().handles]

    @property
    def position_start(self) -> int:
        """Offset of the joint's positions in the tree's array of generalized positions."""
        return self.get_mobilizers()[0].position_start

    @property
    def velocity_start(self) -> int:
        """Offset of the joint's velocities in the tree's array of generalized velocities."""
        return self.get_mobilizers()[0].velocity_start

    @property
    def num_positions(self) -> int:
        return sum(m.num_positions for m in self.get_mobilizers())

    @property
    def num_velocities(self) -> int:
        return sum(m.num_velocities for m in self.get_mobilizers())

    ###
    # Forces
    ###

    def add_in_one_force(self, context: Context, joint_dof: int, joint_tau: Any, forces: MultibodyForces) -> None:
        """
        Adds the generalized force ``joint_tau`` on DoF ``joint_dof`` of this joint into ``forces``.

        Args:
            context (Context): The context of the tree this joint belongs to.
            joint_dof (int): Index of the DoF within this joint, in ``[0, num_dofs)``.
            joint_tau: The generalized force to add.
            forces (MultibodyForces): The aggregate to accumulate into.

        Raises:
            ForcesSizeError: If ``forces`` is ``None`` or not sized for this joint's tree.
            ContextTypeError: If ``context`` is not a context of this joint's tree.
            ValueError: If ``joint_dof`` is out of range.
        """
        self._check_forces(forces)
        self._check_context(context)
        if joint_dof < 0 or joint_dof >= self.num_dofs:
            raise ValueError(f"Invalid joint DoF: {joint_dof}. Must be in range [0, {self.num_dofs}).")
        self._do_add_in_one_force(context, joint_dof, joint_tau, forces)

    ###
    # Scalar conversion
    ###

    def clone_to_scalar(self, tree_clone: MultibodyTree) -> Joint:
        """
        Creates a copy of this joint bound to ``tree_clone``.

        The clone connects the frames of ``tree_clone`` with the same indices as
        this joint's frames, and operates on the scalar kind of ``tree_clone``.

        Args:
            tree_clone (MultibodyTree): A tree already holding clones of this joint's frames.

        Returns:
            Joint: The new joint, not yet added to ``tree_clone``.
        """
        if not isinstance(getattr(tree_clone, "scalar_kind", None), ScalarKind):
            raise TypeError(f"Invalid tree clone type: {type(tree_clone)}. Must be `MultibodyTree`.")
        frame_on_parent = self._resolve_cloned_frame(tree_clone, self._frame_on_parent)
        frame_on_child = self._resolve_cloned_frame(tree_clone, self._frame_on_child)
        return self._do_clone_to_scalar(tree_clone, frame_on_parent, frame_on_child)

    ###
    # Internals
    ###

    def _set_parent_tree(self, tree: MultibodyTree, index: int) -> None:
        if self._tree is not None:
            raise ValueError(f"Joint `{self.name}` already belongs to a tree.")
        self._tree = tree
        self._index = index

    def _create_blueprint(self) -> Blueprint:
        """Produces the joint's blueprint. Must be called once, by the owning tree's finalization."""
        if self._implementation is not None:
            msg.critical(f"Repeated blueprint request for joint `{self.name}`.")
            raise InternalConsistencyError(f"Joint `{self.name}` already has an implementation.")
        blueprint = self._make_implementation_blueprint()
        if not isinstance(blueprint, Blueprint) or len(blueprint.mobilizers) == 0:
            msg.critical(f"Joint `{self.name}` produced an invalid blueprint.")
            raise InternalConsistencyError(f"Joint `{self.name}` must produce a blueprint with at least one mobilizer.")
        return blueprint

    def _set_implementation(self, implementation: JointImplementation) -> None:
        if self._implementation is not None:
            msg.critical(f"Repeated implementation assignment for joint `{self.name}`.")
            raise InternalConsistencyError(f"Joint `{self.name}` already has an implementation.")
        self._implementation = implementation

    def _check_context(self, context: Context) -> TreeContext:
        tree = self.parent_tree
        if not isinstance(context, TreeContext):
            raise ContextTypeError(f"Invalid context type: {type(context)}. Must be `TreeContext`.")
        if context.tree_uid != tree.uid:
            raise ContextTypeError(f"Joint `{self.name}`: the context was not created by the joint's tree.")
        if context.scalar_kind != tree.scalar_kind:
            raise ContextTypeError(
                f"Invalid context scalar kind: {context.scalar_kind}. Must be {tree.scalar_kind}."
            )
        return context

    def _check_forces(self, forces: MultibodyForces | None) -> MultibodyForces:
        if forces is None:
            raise ForcesSizeError(f"Joint `{self.name}`: forces must not be None.")
        if not isinstance(forces, MultibodyForces):
            raise TypeError(f"Invalid forces type: {type(forces)}. Must be `MultibodyForces`.")
        if not forces.check_has_right_size_for_model(self.parent_tree):
            raise ForcesSizeError(
                f"Joint `{self.name}`: forces of size {forces.num_velocities} ({forces.scalar_kind}) "
                f"do not match the tree's {self.parent_tree.num_velocities} DoFs ({self.parent_tree.scalar_kind})."
            )
        return forces

    @staticmethod
    def _resolve_cloned_frame(tree_clone: MultibodyTree, frame: Frame) -> Frame:
        if frame.index >= tree_clone.num_frames:
            msg.critical(f"Frame `{frame.name}` is missing from the tree clone.")
            raise InternalConsistencyError(f"Tree clone has no frame with index {frame.index}.")
        frame_clone = tree_clone.get_frame(frame.index)
        if frame_clone.name != frame.name:
            msg.critical(f"Frame `{frame.name}` does not match its clone `{frame_clone.name}`.")
            raise InternalConsistencyError(
                f"Frame {frame.index} of the tree clone is `{frame_clone.name}`, expected `{frame.name}`."
            )
        return frame_clone

    ###
    # Hooks
    ###

    @abstractmethod
    def _do_get_num_dofs(self) -> int:
        """Returns the number of degrees of freedom of the joint."""

    @abstractmethod
    def _make_implementation_blueprint(self) -> Blueprint:
        """Creates the mobilizers implementing the joint."""

    @abstractmethod
    def _do_add_in_one_force(self, context: TreeContext, joint_dof: int, joint_tau: Any, forces: MultibodyForces):
        """Adds a generalized force on one DoF. Arguments were already validated."""

    @abstractmethod
    def _do_clone_to_scalar(self, tree_clone: MultibodyTree, frame_on_parent: Frame, frame_on_child: Frame) -> Joint:
        """Creates a joint of the same kind connecting the given frames of ``tree_clone``."""
