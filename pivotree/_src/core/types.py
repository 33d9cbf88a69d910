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

"""The core data types used throughout pivotree."""

from __future__ import annotations

import sys
import uuid

import numpy as np

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

###
# Module interface
###

__all__ = [
    "Descriptor",
    "FloatArrayLike",
    "override",
]


###
# Aliases
###

FloatArrayLike = np.ndarray | list[float] | tuple[float, ...]
"""Any sequence of floats that numpy converts to a 1D ``float64`` array."""


###
# Descriptor
###


class Descriptor:
    """
    Base class of named model entities.

    Every entity carries a user-facing ``name`` and a random version-4 UUID
    string ``uid``. Names are unique only within the owning container,
    whereas UIDs tell apart entities of equal name living in different trees.
    """

    def __init__(self, name: str, uid: str | None = None):
        if not isinstance(name, str) or not name:
            raise ValueError(f"Invalid descriptor name: {name!r}. Must be a non-empty string.")
        if uid is not None and not isinstance(uid, str):
            raise TypeError(f"Invalid UID type: {type(uid)}. Must be `str`.")
        self._name: str = name
        self._uid: str = str(uuid.uuid4()) if uid is None else self._parse_uid(uid)

    @staticmethod
    def _parse_uid(uid: str) -> str:
        try:
            return str(uuid.UUID(uid, version=4))
        except ValueError as err:
            raise ValueError(f"Invalid UID string: {uid!r}.") from err

    @property
    def name(self) -> str:
        return self._name

    @property
    def uid(self) -> str:
        return self._uid

    def __repr__(self):
        return f"{type(self).__name__}(name={self._name!r}, uid={self._uid})"
