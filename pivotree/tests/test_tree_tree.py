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

"""Unit tests for the `pivotree.tree.tree` module"""

import unittest

import numpy as np

from pivotree._src.core.config import TreeConfig
from pivotree._src.core.errors import ContextTypeError, InternalConsistencyError
from pivotree._src.core.scalars import ScalarKind
from pivotree._src.tree.joints import Blueprint
from pivotree._src.tree.revolute_joint import RevoluteJoint
from pivotree._src.tree.tree import MultibodyTree
from pivotree._src.utils import logger as msg
from pivotree.tests import setup_tests, test_context

###
# Utilities
###


def make_pendulum(name: str = "pendulum") -> MultibodyTree:
    tree = MultibodyTree(name=name)
    rod = tree.add_frame("rod")
    tree.add_revolute_joint("pivot", tree.world_frame, rod, axis=(0.0, 1.0, 0.0))
    return tree


###
# Tests
###


class TestMultibodyTreeBuilding(unittest.TestCase):
    def setUp(self):
        self.verbose = test_context.verbose  # Set to True to enable verbose output
        if self.verbose:
            msg.set_log_level(msg.LogLevel.DEBUG)
        else:
            msg.set_log_level(msg.LogLevel.WARNING)

    def tearDown(self):
        if self.verbose:
            msg.reset_log_level()

    def test_new_tree(self):
        tree = MultibodyTree()
        self.assertEqual(tree.scalar_kind, ScalarKind.FLOAT64)
        self.assertIsInstance(tree.config, TreeConfig)
        self.assertEqual(tree.num_frames, 1)
        self.assertEqual(tree.world_frame.name, MultibodyTree.WORLD_FRAME_NAME)
        self.assertTrue(tree.world_frame.is_world)
        self.assertEqual(tree.num_joints, 0)
        self.assertFalse(tree.is_finalized)

    def test_invalid_arguments(self):
        with self.assertRaises(TypeError):
            MultibodyTree(scalar_kind="float64")
        with self.assertRaises(TypeError):
            MultibodyTree(config={"device": "cpu"})

    def test_frames(self):
        tree = MultibodyTree()
        a = tree.add_frame("a")
        b = tree.add_frame("b")
        self.assertEqual((a.index, b.index), (1, 2))
        self.assertIs(tree.get_frame(2), b)
        self.assertIs(tree.get_frame_by_name("a"), a)
        with self.assertRaises(ValueError):
            tree.add_frame("a")
        with self.assertRaises(IndexError):
            tree.get_frame(3)
        with self.assertRaises(KeyError):
            tree.get_frame_by_name("c")

    def test_joints(self):
        tree = make_pendulum()
        joint = tree.get_joint_by_name("pivot")
        self.assertIsInstance(joint, RevoluteJoint)
        self.assertIs(tree.get_joint(0), joint)
        self.assertIs(joint.parent_tree, tree)
        self.assertEqual(joint.index, 0)
        with self.assertRaises(ValueError):
            tree.add_revolute_joint("pivot", tree.world_frame, tree.add_frame("other"), axis=(1.0, 0.0, 0.0))
        with self.assertRaises(ValueError):
            tree.add_joint(joint)
        with self.assertRaises(TypeError):
            tree.add_joint("pivot")
        with self.assertRaises(KeyError):
            tree.get_joint_by_name("hinge")
        with self.assertRaises(IndexError):
            tree.get_joint(1)

    def test_foreign_frames_are_rejected(self):
        tree = MultibodyTree()
        other = MultibodyTree()
        joint = RevoluteJoint("pin", other.world_frame, other.add_frame("link"), (0.0, 0.0, 1.0))
        with self.assertRaises(ValueError):
            tree.add_joint(joint)
        self.assertEqual(tree.num_joints, 0)

    def test_joint_without_tree(self):
        tree = MultibodyTree()
        joint = RevoluteJoint("pin", tree.world_frame, tree.add_frame("link"), (0.0, 0.0, 1.0))
        with self.assertRaises(RuntimeError):
            _ = joint.parent_tree


class TestMultibodyTreeFinalize(unittest.TestCase):
    def setUp(self):
        self.verbose = test_context.verbose  # Set to True to enable verbose output
        if self.verbose:
            msg.set_log_level(msg.LogLevel.DEBUG)
        else:
            msg.set_log_level(msg.LogLevel.WARNING)

    def tearDown(self):
        if self.verbose:
            msg.reset_log_level()

    def test_finalize(self):
        tree = make_pendulum()
        self.assertIs(tree.finalize(), tree)
        self.assertTrue(tree.is_finalized)
        self.assertEqual(tree.num_mobilizers, 1)
        self.assertEqual(tree.num_positions, 1)
        self.assertEqual(tree.num_velocities, 1)
        self.assertTrue(tree.get_joint(0).has_implementation)
        self.assertEqual(tree.get_joint(0).get_implementation().num_mobilizers, 1)

    def test_finalize_is_one_shot(self):
        tree = make_pendulum().finalize()
        with self.assertRaises(InternalConsistencyError):
            tree.finalize()
        self.assertEqual(tree.num_mobilizers, 1)

    def test_blueprint_is_one_shot(self):
        tree = make_pendulum().finalize()
        with self.assertRaises(InternalConsistencyError):
            tree.get_joint(0)._create_blueprint()

    def test_blueprint_contents(self):
        tree = make_pendulum()
        joint = tree.get_joint(0)
        blueprint = joint._make_implementation_blueprint()
        self.assertIsInstance(blueprint, Blueprint)
        self.assertEqual(len(blueprint.mobilizers), 1)
        np.testing.assert_array_equal(blueprint.mobilizers[0].revolute_axis, [0.0, 1.0, 0.0])

    def test_finalized_tree_is_frozen(self):
        tree = make_pendulum().finalize()
        with self.assertRaises(RuntimeError):
            tree.add_frame("extra")
        with self.assertRaises(RuntimeError):
            tree.add_revolute_joint("extra", tree.world_frame, tree.get_frame(1), (1.0, 0.0, 0.0))

    def test_frame_moved_twice_is_rejected(self):
        tree = MultibodyTree()
        a = tree.add_frame("a")
        b = tree.add_frame("b")
        tree.add_revolute_joint("j0", tree.world_frame, a, (0.0, 0.0, 1.0))
        tree.add_revolute_joint("j1", b, a, (0.0, 0.0, 1.0))
        with self.assertRaises(ValueError):
            tree.finalize()
        self.assertFalse(tree.is_finalized)
        self.assertEqual(tree.num_mobilizers, 0)
        for joint in tree.joints:
            self.assertFalse(joint.has_implementation)

    def test_world_as_child_is_rejected(self):
        tree = MultibodyTree()
        a = tree.add_frame("a")
        tree.add_revolute_joint("j0", a, tree.world_frame, (0.0, 0.0, 1.0))
        with self.assertRaises(ValueError):
            tree.finalize()

    def test_context_requires_finalize(self):
        tree = make_pendulum()
        with self.assertRaises(RuntimeError):
            tree.create_default_context()

    def test_default_context(self):
        tree = make_pendulum()
        tree.get_joint(0).set_default_angle(0.4)
        tree.finalize()
        context = tree.create_default_context()
        self.assertEqual(context.tree_uid, tree.uid)
        self.assertEqual(context.scalar_kind, tree.scalar_kind)
        self.assertEqual(context.time, tree.config.default_time)
        self.assertEqual((context.num_positions, context.num_velocities), (1, 1))
        np.testing.assert_array_equal(context.get_positions(), [0.4])
        np.testing.assert_array_equal(context.get_velocities(), [0.0])

        # Restore the defaults after modifying the state
        tree.get_joint(0).set_angle(context, 2.0).set_angular_rate(context, 3.0)
        tree.set_default_state(context)
        np.testing.assert_array_equal(context.get_positions(), [0.4])
        np.testing.assert_array_equal(context.get_velocities(), [0.0])
        with self.assertRaises(ContextTypeError):
            tree.set_default_state(make_pendulum("other").finalize().create_default_context())

    def test_independent_trees(self):
        tree_a = make_pendulum("a").finalize()
        tree_b = make_pendulum("b").finalize()
        joint_a = tree_a.get_joint(0)
        joint_b = tree_b.get_joint(0)
        mobilizer_a = joint_a.get_mobilizers()[0]
        mobilizer_b = joint_b.get_mobilizers()[0]
        self.assertIsNot(mobilizer_a, mobilizer_b)

        context_a = tree_a.create_default_context()
        context_b = tree_b.create_default_context()
        mobilizer_a.set_angle(context_a, 1.0)
        mobilizer_b.set_angle(context_b, -2.0)
        self.assertEqual(joint_a.get_angle(context_a), 1.0)
        self.assertEqual(joint_b.get_angle(context_b), -2.0)

        # Handles are only valid within the tree that issued them
        with self.assertRaises(InternalConsistencyError):
            tree_b.get_mobilizer(joint_a.get_implementation().handles[0])


###
# Test execution
###

if __name__ == "__main__":
    # Test setup
    setup_tests()

    # Run all tests
    unittest.main(verbosity=2)
