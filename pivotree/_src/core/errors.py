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
PIVOTREE: Error types raised by the multibody tree and its joints.
"""

###
# Module interface
###

__all__ = [
    "ContextTypeError",
    "ForcesSizeError",
    "InternalConsistencyError",
    "JointConstructionError",
    "PivotreeError",
]


###
# Exceptions
###


class PivotreeError(Exception):
    """Base class of all errors raised by pivotree."""


class JointConstructionError(PivotreeError, ValueError):
    """Raised when a joint is constructed from invalid arguments, e.g. a zero axis."""


class ForcesSizeError(PivotreeError, ValueError):
    """Raised when a force aggregate is missing or not sized for the tree it is applied to."""


class ContextTypeError(PivotreeError, TypeError):
    """Raised when a context is not the state container kind expected by the tree."""


class InternalConsistencyError(PivotreeError, RuntimeError):
    """
    Raised when the tree's internal bookkeeping is broken.

    This signals a defect in the framework itself, e.g. a joint without a
    mobilizer after finalization, a stale mobilizer handle or a repeated
    blueprint request. It is not meant to be caught and recovered from.
    """
