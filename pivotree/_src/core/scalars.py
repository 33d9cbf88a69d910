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
PIVOTREE: Scalar kinds and their array backends.

A multibody tree is instantiated for exactly one scalar kind out of a closed
set. Every place that stores or combines joint values dispatches on that kind:

- :attr:`ScalarKind.FLOAT64` stores values in Warp ``float64`` arrays on a CPU
  device, which are modified in place through their aliased numpy views.
- :attr:`ScalarKind.AUTODIFF` stores values in JAX ``float64`` arrays. These
  are immutable, so every write returns a new array that the owning container
  re-stores. Values may be JAX forward-mode tracers, which lets whole joint
  operations be differentiated with :func:`jax.jvp` or :func:`jax.jacfwd`.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

import jax
import jax.numpy as jnp
import numpy as np
import warp as wp

from .types import override

jax.config.update("jax_enable_x64", True)

###
# Module interface
###

__all__ = [
    "ScalarKind",
    "add_value",
    "get_value",
    "rotation_about_axis",
    "set_value",
    "size",
    "to_numpy",
    "zeros",
]


###
# Enumerations
###


class ScalarKind(IntEnum):
    """
    An enumeration of the arithmetic kinds a multibody tree can be instantiated for.
    """

    FLOAT64 = 0
    """Plain 64-bit real numbers."""

    AUTODIFF = 1
    """Forward-mode differentiable 64-bit real numbers."""

    @override
    def __str__(self):
        """Returns a string representation of the scalar kind."""
        return f"ScalarKind.{self.name} ({self.value})"

    @override
    def __repr__(self):
        """Returns a string representation of the scalar kind."""
        return self.__str__()

    @property
    def is_differentiable(self) -> bool:
        """Whether values of this kind carry derivatives."""
        return self == ScalarKind.AUTODIFF

    @classmethod
    def from_any(cls, value: ScalarKind | str | int) -> ScalarKind:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError as err:
                raise ValueError(f"Invalid scalar kind string: {value}") from err
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        raise TypeError(f"Cannot convert {type(value)} to ScalarKind")


###
# Array operations
###


def zeros(kind: ScalarKind, n: int, device: str = "cpu") -> Any:
    """Allocates a zero-initialized array of ``n`` values of the given scalar kind."""
    if n < 0:
        raise ValueError(f"Invalid array size: {n}. Must be non-negative.")
    if kind == ScalarKind.FLOAT64:
        return wp.zeros(n, dtype=wp.float64, device=device)
    elif kind == ScalarKind.AUTODIFF:
        return jnp.zeros(n, dtype=jnp.float64)
    else:
        raise ValueError(f"Unknown scalar kind: {kind}")


def size(kind: ScalarKind, array: Any) -> int:
    """Returns the number of values held in ``array``."""
    if kind == ScalarKind.FLOAT64 or kind == ScalarKind.AUTODIFF:
        return int(array.shape[0])
    raise ValueError(f"Unknown scalar kind: {kind}")


def get_value(kind: ScalarKind, array: Any, index: int) -> Any:
    """Returns the value stored at ``index``."""
    if kind == ScalarKind.FLOAT64:
        return float(array.numpy()[index])
    elif kind == ScalarKind.AUTODIFF:
        return array[index]
    else:
        raise ValueError(f"Unknown scalar kind: {kind}")


def set_value(kind: ScalarKind, array: Any, index: int, value: Any) -> Any:
    """
    Stores ``value`` at ``index``.

    Returns:
        The array holding the updated values. For ``FLOAT64`` this is ``array``
        itself, for ``AUTODIFF`` it is a new array that replaces ``array``.
    """
    if kind == ScalarKind.FLOAT64:
        array.numpy()[index] = float(value)
        return array
    elif kind == ScalarKind.AUTODIFF:
        return array.at[index].set(jnp.asarray(value, dtype=jnp.float64))
    else:
        raise ValueError(f"Unknown scalar kind: {kind}")


def add_value(kind: ScalarKind, array: Any, index: int, value: Any) -> Any:
    """
    Adds ``value`` into the value stored at ``index``.

    Returns:
        The array holding the updated values, see :func:`set_value`.
    """
    if kind == ScalarKind.FLOAT64:
        array.numpy()[index] += float(value)
        return array
    elif kind == ScalarKind.AUTODIFF:
        return array.at[index].add(jnp.asarray(value, dtype=jnp.float64))
    else:
        raise ValueError(f"Unknown scalar kind: {kind}")


def to_numpy(kind: ScalarKind, array: Any) -> np.ndarray:
    """Returns a host copy of ``array`` as a ``float64`` numpy array."""
    if kind == ScalarKind.FLOAT64:
        return np.array(array.numpy(), dtype=np.float64)
    elif kind == ScalarKind.AUTODIFF:
        return np.array(array, dtype=np.float64)
    else:
        raise ValueError(f"Unknown scalar kind: {kind}")


###
# Kinematics
###


def rotation_about_axis(kind: ScalarKind, axis: np.ndarray, angle: Any) -> Any:
    """
    Computes the 3x3 rotation matrix of a rotation by ``angle`` about the unit vector ``axis``.

    Args:
        kind (ScalarKind): The scalar kind of ``angle``.
        axis (np.ndarray): A unit 3D vector.
        angle: The rotation angle in radians, positive according to the right-hand rule.

    Returns:
        A ``(3, 3)`` numpy array for ``FLOAT64``, a JAX array for ``AUTODIFF``.
    """
    if kind == ScalarKind.FLOAT64:
        q = wp.quat_from_axis_angle(wp.vec3(float(axis[0]), float(axis[1]), float(axis[2])), float(angle))
        R = wp.quat_to_matrix(q)
        return np.array([[float(R[i][j]) for j in range(3)] for i in range(3)], dtype=np.float64)
    elif kind == ScalarKind.AUTODIFF:
        a = jnp.asarray(axis, dtype=jnp.float64)
        K = jnp.array(
            [
                [0.0, -a[2], a[1]],
                [a[2], 0.0, -a[0]],
                [-a[1], a[0], 0.0],
            ]
        )
        return jnp.eye(3, dtype=jnp.float64) + jnp.sin(angle) * K + (1.0 - jnp.cos(angle)) * (K @ K)
    else:
        raise ValueError(f"Unknown scalar kind: {kind}")
