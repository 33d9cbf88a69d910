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

# ==================================================================================
# core
# ==================================================================================
from ._src.core import (
    ContextTypeError,
    ForcesSizeError,
    InternalConsistencyError,
    JointConstructionError,
    PivotreeError,
    ScalarKind,
    TreeConfig,
)
from ._version import __version__

__all__ = [
    "ContextTypeError",
    "ForcesSizeError",
    "InternalConsistencyError",
    "JointConstructionError",
    "PivotreeError",
    "ScalarKind",
    "TreeConfig",
    "__version__",
]

# ==================================================================================
# tree
# ==================================================================================
from ._src.tree import (  # noqa: E402
    Blueprint,
    Context,
    Frame,
    Joint,
    JointImplementation,
    Mobilizer,
    MobilizerArena,
    MobilizerHandle,
    MultibodyForces,
    MultibodyTree,
    RevoluteJoint,
    RevoluteMobilizer,
    TreeContext,
)

__all__ += [
    "Blueprint",
    "Context",
    "Frame",
    "Joint",
    "JointImplementation",
    "Mobilizer",
    "MobilizerArena",
    "MobilizerHandle",
    "MultibodyForces",
    "MultibodyTree",
    "RevoluteJoint",
    "RevoluteMobilizer",
    "TreeContext",
]

# ==================================================================================
# submodule APIs
# ==================================================================================
from ._src.utils import logger  # noqa: E402

__all__ += [
    "logger",
]
