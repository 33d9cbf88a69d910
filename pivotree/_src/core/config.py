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
Provides types for holding configurations of multibody trees.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import warp as wp

###
# Module interface
###

__all__ = [
    "AXIS_EPSILON_DEFAULT",
    "TreeConfig",
]


###
# Constants
###

AXIS_EPSILON_DEFAULT = float(np.finfo(np.float64).eps)
"""Machine epsilon of 64-bit floats, below which a joint axis component is considered zero."""


###
# Types
###


@dataclass
class TreeConfig:
    """
    A data container to hold host-side multibody tree configurations.
    """

    device: str = "cpu"
    """
    Warp device on which the arrays of the `FLOAT64` scalar kind are allocated.\n
    Must be a CPU device, since joint values are read and written through host views.\n
    Defaults to `"cpu"`.
    """

    axis_epsilon: float = field(default=AXIS_EPSILON_DEFAULT)
    """
    Threshold below which every component of a joint axis is considered zero.\n
    Must be positive.\n
    Defaults to the machine epsilon of 64-bit floats.
    """

    default_time: float = 0.0
    """
    Time stamp assigned to newly created contexts.\n
    Must be finite.\n
    Defaults to `0.0`.
    """

    def __post_init__(self) -> None:
        """
        Performs validation checks on the configuration values after initialization.
        """
        self.check_values()

    def check_values(self) -> None:
        """
        Validates configuration values.
        """
        if not wp.get_device(self.device).is_cpu:
            raise ValueError(f"Invalid device: {self.device}. Must be a CPU device.")
        if not np.isfinite(self.axis_epsilon) or self.axis_epsilon <= 0.0:
            raise ValueError(f"Invalid axis_epsilon: {self.axis_epsilon}. Must be positive.")
        if not np.isfinite(self.default_time):
            raise ValueError(f"Invalid default_time: {self.default_time}. Must be finite.")
