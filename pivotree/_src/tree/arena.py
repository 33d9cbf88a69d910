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
PIVOTREE: Tree-owned storage of mobilizers.

Mobilizers are owned by an arena belonging to their tree. Joints address
them through :class:`MobilizerHandle` objects carrying the slot index, the
slot generation and the expected mobilizer type, so that a lookup either
yields an object of the expected type or fails loudly.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

from ..core.errors import InternalConsistencyError
from ..utils import logger as msg
from .mobilizers import Mobilizer

###
# Module interface
###

__all__ = ["MobilizerArena", "MobilizerHandle"]


MobilizerT = TypeVar("MobilizerT", bound=Mobilizer)


###
# Types
###


@dataclass(frozen=True)
class MobilizerHandle(Generic[MobilizerT]):
    """A stable reference to a mobilizer stored in a :class:`MobilizerArena`."""

    arena_uid: str
    """UID of the arena that issued the handle."""

    index: int
    """Index of the slot holding the mobilizer."""

    generation: int
    """Generation of the slot at the time the handle was issued."""

    mobilizer_type: type[MobilizerT]
    """Concrete type of the referenced mobilizer."""


###
# Containers
###


class MobilizerArena:
    """
    Generational arena owning the mobilizers of a tree.
    """

    def __init__(self):
        self._uid: str = str(uuid.uuid4())
        self._slots: list[Mobilizer | None] = []
        self._generations: list[int] = []

    @property
    def uid(self) -> str:
        return self._uid

    def __len__(self) -> int:
        return sum(1 for m in self._slots if m is not None)

    def __iter__(self) -> Iterator[Mobilizer]:
        return (m for m in self._slots if m is not None)

    def add(self, mobilizer: MobilizerT) -> MobilizerHandle[MobilizerT]:
        """Takes ownership of ``mobilizer`` and returns a handle to it."""
        if not isinstance(mobilizer, Mobilizer):
            raise TypeError(f"Invalid mobilizer type: {type(mobilizer)}. Must be `Mobilizer`.")
        if any(m is mobilizer for m in self._slots):
            msg.critical("Mobilizer is already owned by this arena.")
            raise InternalConsistencyError("A mobilizer cannot be added to an arena twice.")
        self._slots.append(mobilizer)
        self._generations.append(0)
        index = len(self._slots) - 1
        return MobilizerHandle(
            arena_uid=self._uid, index=index, generation=self._generations[index], mobilizer_type=type(mobilizer)
        )

    def get(self, handle: MobilizerHandle[MobilizerT]) -> MobilizerT:
        """
        Resolves ``handle`` to the mobilizer it references.

        Raises:
            InternalConsistencyError: If the handle was issued by another arena, is
                stale, or references a mobilizer of an unexpected type.
        """
        if handle.arena_uid != self._uid:
            msg.critical("Mobilizer handle resolved against a foreign arena.")
            raise InternalConsistencyError(f"Mobilizer handle {handle} was not issued by this arena.")
        if handle.index < 0 or handle.index >= len(self._slots):
            msg.critical("Mobilizer handle index out of range.")
            raise InternalConsistencyError(f"Mobilizer handle index {handle.index} is out of range.")
        mobilizer = self._slots[handle.index]
        if mobilizer is None or self._generations[handle.index] != handle.generation:
            msg.critical("Stale mobilizer handle.")
            raise InternalConsistencyError(f"Mobilizer handle {handle} is stale.")
        if not isinstance(mobilizer, handle.mobilizer_type):
            msg.critical("Mobilizer handle references an unexpected mobilizer type.")
            raise InternalConsistencyError(
                f"Expected a `{handle.mobilizer_type.__name__}` but found a `{type(mobilizer).__name__}`."
            )
        return mobilizer

    def clear(self) -> None:
        """Releases all mobilizers, invalidating every handle issued so far."""
        for i in range(len(self._slots)):
            self._slots[i] = None
            self._generations[i] += 1
