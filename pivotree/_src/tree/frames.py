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

"""Provides the reference frame type connected by joints."""

from __future__ import annotations

from ..core.types import Descriptor

###
# Module interface
###

__all__ = ["Frame"]


###
# Containers
###


class Frame(Descriptor):
    """
    A named reference frame owned by a :class:`MultibodyTree`.

    Frames are created through :meth:`MultibodyTree.add_frame` and are
    identified within their tree by a stable index. The frame with index
    ``0`` is the world frame every tree creates on construction.
    """

    def __init__(self, name: str, index: int, tree_uid: str):
        super().__init__(name)
        self._index: int = index
        self._tree_uid: str = tree_uid

    @property
    def index(self) -> int:
        """Index of the frame within its tree."""
        return self._index

    @property
    def tree_uid(self) -> str:
        """UID of the tree owning the frame."""
        return self._tree_uid

    @property
    def is_world(self) -> bool:
        """Whether this is the world frame of its tree."""
        return self._index == 0

    def __repr__(self):
        return f"Frame(name={self.name}, index={self._index})"
