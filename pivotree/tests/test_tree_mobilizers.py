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

"""Unit tests for the `pivotree.tree.mobilizers` and `pivotree.tree.arena` modules"""

import unittest

import numpy as np

from pivotree._src.core.errors import InternalConsistencyError
from pivotree._src.core.scalars import ScalarKind
from pivotree._src.tree.arena import MobilizerArena, MobilizerHandle
from pivotree._src.tree.context import TreeContext
from pivotree._src.tree.forces import MultibodyForces
from pivotree._src.tree.mobilizers import Mobilizer, RevoluteMobilizer
from pivotree._src.tree.tree import MultibodyTree
from pivotree._src.utils import logger as msg
from pivotree.tests import setup_tests, test_context

###
# Utilities
###


class LockedMobilizer(Mobilizer):
    """A mobilizer without degrees of freedom."""

    @property
    def num_positions(self) -> int:
        return 0

    @property
    def num_velocities(self) -> int:
        return 0

    def set_default_state(self, context: TreeContext) -> None:
        pass

    def calc_rotation_matrix(self, context: TreeContext):
        return np.eye(3)


###
# Tests
###


class TestMobilizers(unittest.TestCase):
    def setUp(self):
        self.verbose = test_context.verbose  # Set to True to enable verbose output
        if self.verbose:
            msg.set_log_level(msg.LogLevel.DEBUG)
        else:
            msg.set_log_level(msg.LogLevel.CRITICAL)
        self.tree = MultibodyTree()
        self.child = self.tree.add_frame("child")
        self.axis = np.array([0.0, 1.0, 0.0])

    def tearDown(self):
        if self.verbose:
            msg.reset_log_level()

    def test_revolute_mobilizer_layout(self):
        mobilizer = RevoluteMobilizer(self.tree.world_frame, self.child, self.axis, default_angle=0.3)
        self.assertIs(mobilizer.inboard_frame, self.tree.world_frame)
        self.assertIs(mobilizer.outboard_frame, self.child)
        self.assertEqual((mobilizer.num_positions, mobilizer.num_velocities), (1, 1))
        self.assertEqual(mobilizer.default_angle, 0.3)
        np.testing.assert_array_equal(mobilizer.revolute_axis, self.axis)
        self.assertFalse(mobilizer.has_offsets)
        with self.assertRaises(InternalConsistencyError):
            _ = mobilizer.position_start
        with self.assertRaises(InternalConsistencyError):
            _ = mobilizer.velocity_start

    def test_offsets_are_assigned_once(self):
        mobilizer = RevoluteMobilizer(self.tree.world_frame, self.child, self.axis)
        with self.assertRaises(ValueError):
            mobilizer.set_offsets(-1, 0)
        mobilizer.set_offsets(2, 3)
        self.assertTrue(mobilizer.has_offsets)
        self.assertEqual((mobilizer.position_start, mobilizer.velocity_start), (2, 3))
        self.assertEqual(mobilizer.get_generalized_forces_slice(), slice(3, 4))
        with self.assertRaises(InternalConsistencyError):
            mobilizer.set_offsets(0, 0)
        self.assertEqual((mobilizer.position_start, mobilizer.velocity_start), (2, 3))

    def test_state_access(self):
        for kind in ScalarKind:
            mobilizer = RevoluteMobilizer(self.tree.world_frame, self.child, self.axis, default_angle=-0.5)
            mobilizer.set_offsets(1, 1)
            context = TreeContext("tree", num_positions=2, num_velocities=2, scalar_kind=kind)
            mobilizer.set_default_state(context)
            np.testing.assert_array_equal(context.get_positions(), [0.0, -0.5])
            np.testing.assert_array_equal(context.get_velocities(), [0.0, 0.0])
            self.assertIs(mobilizer.set_angle(context, 1.25), mobilizer)
            self.assertIs(mobilizer.set_angular_rate(context, 4.0), mobilizer)
            self.assertEqual(float(mobilizer.get_angle(context)), 1.25)
            self.assertEqual(float(mobilizer.get_angular_rate(context)), 4.0)
            np.testing.assert_array_equal(context.get_positions(), [0.0, 1.25])
            np.testing.assert_array_equal(context.get_velocities(), [0.0, 4.0])

    def test_generalized_force(self):
        mobilizer = RevoluteMobilizer(self.tree.world_frame, self.child, self.axis)
        mobilizer.set_offsets(0, 1)
        forces = MultibodyForces.from_size(3)
        mobilizer.add_in_generalized_force(forces, 0, 1.5)
        mobilizer.add_in_generalized_force(forces, 0, 0.5)
        np.testing.assert_array_equal(forces.get_generalized_forces(), [0.0, 2.0, 0.0])
        with self.assertRaises(InternalConsistencyError):
            mobilizer.add_in_generalized_force(forces, 1, 1.0)
        with self.assertRaises(InternalConsistencyError):
            mobilizer.add_in_generalized_force(forces, -1, 1.0)
        np.testing.assert_array_equal(forces.get_generalized_forces(), [0.0, 2.0, 0.0])

    def test_rotation_matrix(self):
        mobilizer = RevoluteMobilizer(self.tree.world_frame, self.child, self.axis)
        mobilizer.set_offsets(0, 0)
        context = TreeContext("tree", num_positions=1, num_velocities=1)
        mobilizer.set_angle(context, 0.5 * np.pi)
        R = mobilizer.calc_rotation_matrix(context)
        np.testing.assert_allclose(R @ np.array([0.0, 0.0, 1.0]), [1.0, 0.0, 0.0], atol=1e-6)
        np.testing.assert_allclose(R @ self.axis, self.axis, atol=1e-6)


class TestMobilizerArena(unittest.TestCase):
    def setUp(self):
        self.verbose = test_context.verbose  # Set to True to enable verbose output
        if self.verbose:
            msg.set_log_level(msg.LogLevel.DEBUG)
        else:
            msg.set_log_level(msg.LogLevel.CRITICAL)
        self.tree = MultibodyTree()
        self.child = self.tree.add_frame("child")
        self.arena = MobilizerArena()

    def tearDown(self):
        if self.verbose:
            msg.reset_log_level()

    def make_mobilizer(self) -> RevoluteMobilizer:
        return RevoluteMobilizer(self.tree.world_frame, self.child, np.array([1.0, 0.0, 0.0]))

    def test_add_and_get(self):
        first = self.make_mobilizer()
        second = LockedMobilizer(self.tree.world_frame, self.child)
        h1 = self.arena.add(first)
        h2 = self.arena.add(second)
        self.assertEqual(len(self.arena), 2)
        self.assertEqual(list(self.arena), [first, second])
        self.assertIsInstance(h1, MobilizerHandle)
        self.assertEqual((h1.index, h1.generation, h1.arena_uid), (0, 0, self.arena.uid))
        self.assertIs(h1.mobilizer_type, RevoluteMobilizer)
        self.assertIs(self.arena.get(h1), first)
        self.assertIs(self.arena.get(h2), second)

    def test_rejects_invalid_additions(self):
        with self.assertRaises(TypeError):
            self.arena.add("mobilizer")
        mobilizer = self.make_mobilizer()
        self.arena.add(mobilizer)
        with self.assertRaises(InternalConsistencyError):
            self.arena.add(mobilizer)
        self.assertEqual(len(self.arena), 1)

    def test_stale_handle(self):
        handle = self.arena.add(self.make_mobilizer())
        self.arena.clear()
        self.assertEqual(len(self.arena), 0)
        with self.assertRaises(InternalConsistencyError):
            self.arena.get(handle)

    def test_foreign_handle(self):
        handle = MobilizerArena().add(self.make_mobilizer())
        self.arena.add(self.make_mobilizer())
        with self.assertRaises(InternalConsistencyError):
            self.arena.get(handle)

    def test_out_of_range_handle(self):
        handle = MobilizerHandle(self.arena.uid, 3, 0, RevoluteMobilizer)
        with self.assertRaises(InternalConsistencyError):
            self.arena.get(handle)

    def test_wrong_type_handle(self):
        handle = self.arena.add(LockedMobilizer(self.tree.world_frame, self.child))
        forged = MobilizerHandle(handle.arena_uid, handle.index, handle.generation, RevoluteMobilizer)
        with self.assertRaises(InternalConsistencyError):
            self.arena.get(forged)


###
# Test execution
###

if __name__ == "__main__":
    # Test setup
    setup_tests()

    # Run all tests
    unittest.main(verbosity=2)
