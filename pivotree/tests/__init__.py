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

"""Shared setup of the pivotree unit tests."""

from dataclasses import dataclass

import numpy as np
import warp as wp

__all__ = ["setup_tests", "test_context"]

###
# Global test context
###


@dataclass
class TestContext:
    setup_done: bool = False
    """Whether `setup_tests` has already run."""

    verbose: bool = False
    """Whether tests should log at DEBUG level."""

    device: str = "cpu"
    """Warp device of the `FLOAT64` arrays created by the tests."""


test_context = TestContext()


###
# Functions
###


def setup_tests(verbose: bool = False, device: str = "cpu"):
    """
    Configures numpy and Warp for the test run and records the settings in ``test_context``.

    Raises:
        ValueError: If ``device`` is not a CPU device.
    """
    np.set_printoptions(linewidth=200, precision=10, suppress=True)

    wp.config.quiet = True
    wp.init()
    warp_device = wp.get_device(device)
    if not warp_device.is_cpu:
        raise ValueError(f"Invalid test device: {device}. Joint values are stored on CPU devices only.")

    test_context.verbose = verbose
    test_context.device = str(warp_device)
    test_context.setup_done = True
