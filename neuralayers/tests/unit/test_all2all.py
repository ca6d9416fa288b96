# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

███████████████████████████████████████████████████████████████████████████████

Licensed to the Apache Software Foundation (ASF) under one
or more contributor license agreements.  See the NOTICE file
distributed with this work for additional information
regarding copyright ownership.  The ASF licenses this file
to you under the Apache License, Version 2.0 (the
"License"); you may not use this file except in compliance
with the License.  You may obtain a copy of the License at

  http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing,
software distributed under the License is distributed on an
"AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
KIND, either express or implied.  See the License for the
specific language governing permissions and limitations
under the License.

███████████████████████████████████████████████████████████████████████████████
"""


import numpy
import unittest

import neuralayers.activation as activation
import neuralayers.all2all as all2all
import neuralayers.error as error
from neuralayers.nn_units import Upstream
from neuralayers.tests.unit import LayerTest
from neuralayers.tests.unit.gd_numdiff import GDNumDiff


class TestAll2All(LayerTest, GDNumDiff):
    def _fixed_layer(self, function="identity"):
        layer = all2all.All2All(3, 2, function)
        layer.weights[:] = [[1, 0], [2, -1], [0, 3]]
        layer.bias[:] = [10, -10]
        return layer

    def test_with_fixed_input(self):
        self.info("Will test all2all layer")
        layer = self._fixed_layer()
        layer.feed_forward(numpy.array([1.0, 2.0, 3.0]))
        self.assertMaxDiff(layer.net, [15, -3])
        self.assertMaxDiff(layer.activation, [15, -3])

        upstream = Upstream([1.0, 2.0, 3.0])
        layer.feed_forward(upstream)
        self.assertMaxDiff(layer.activation, [15, -3])

        layer.activation_function = "tanh"
        layer.feed_forward(upstream)
        self.assertMaxDiff(layer.activation, numpy.tanh([15, -3]))
        self.assertEqual(str(layer), "[classic 3 -> 2 (tanh)]")

    def test_wrong_input(self):
        layer = self._fixed_layer()
        self.assertRaises(error.StructureError, layer.feed_forward,
                          numpy.zeros(4))

    def test_feed_through(self):
        layer = self._fixed_layer()
        result = layer.feed_through([[1, 2, 3], [0, 0, 0]])
        self.assertMaxDiff(result, [[15, -3], [10, -10]])

    def test_back_prop_error(self):
        layer = self._fixed_layer()
        layer.error[:] = [1, 2]
        upstream = Upstream(numpy.zeros(3))
        layer.back_prop_error(upstream)
        self.assertMaxDiff(upstream.error, [1, 0, 6])
        self.assertMaxDiff(layer.error, [1, 2])
        self.assertRaises(error.StructureError, layer.back_prop_error,
                          Upstream(numpy.zeros(2)))

    def test_update_and_apply_deltas(self):
        layer = self._fixed_layer()
        layer.error[:] = [1, -1]
        deltas = numpy.zeros(layer.count_weights())
        layer.update_deltas(numpy.array([1.0, 2.0, 3.0]), deltas)
        layer.update_deltas(numpy.array([1.0, 2.0, 3.0]), deltas)
        self.assertMaxDiff(deltas, [2, -2, 4, -4, 6, -6, 2, -2])
        layer.apply_deltas(deltas * 0.5)
        self.assertMaxDiff(layer.weights, [[2, -1], [4, -3], [3, 0]])
        self.assertMaxDiff(layer.bias, [11, -11])

    def test_numdiff(self):
        for name in ("identity", "tanh", "logistic", "scaled_tanh",
                     "softplus", "softmax"):
            self.info("Checking %s", name)
            layer = all2all.All2All(4, 3, name)
            layer.reset_weights(self.rand)
            self.numdiff_check_gd(layer, self.random_vector(4),
                                  self.random_vector(3, 0, 1), self.info,
                                  self.assertLess)

    def test_softmax(self):
        layer = all2all.All2AllSoftmax(5, 4)
        self.assertEqual(layer.type, "softmax")
        for scale in (1, 100, 10000):
            layer.feed_forward(self.random_vector(5) * scale)
            self.assertAlmostEqual(layer.activation.sum(), 1.0)
            self.assertGreaterEqual(layer.activation.min(), 0)
        self.assertRaises(error.UnsupportedOperationError,
                          layer.feed_forward_to_one_output,
                          numpy.zeros(5), 0)

    def test_resize(self):
        layer = all2all.All2All(3, 4)
        weights = layer.weights.copy()
        bias = layer.bias.copy()
        layer.resize(5, 6)
        self.assertEqual((layer.inputs, layer.outputs), (5, 6))
        self.assertEqual(layer.activation.size, 6)
        self.assertMaxDiff(layer.weights[:3, :4], weights, 0)
        self.assertMaxDiff(layer.bias[:4], bias, 0)
        self.assertTrue((layer.weights[3:] != 0).any())
        layer.resize(2, 3)
        self.assertMaxDiff(layer.weights, weights[:2, :3], 0)
        self.assertMaxDiff(layer.bias, bias[:3], 0)
        self.assertRaises(error.StructureError, layer.resize, -1, 3)

    def test_flexible(self):
        layer = all2all.All2All(None, 3)
        self.assertEqual(layer.inputs, 0)
        layer.resize_inputs(Upstream(numpy.zeros(7)))
        self.assertEqual(layer.inputs, 7)
        self.assertEqual(layer.outputs, 3)

    def test_max_norm(self):
        layer = all2all.All2All(2, 3)
        layer.weights[:] = [[3, 0, 0.1], [4, 0, 0]]
        layer.bias[:] = 100
        layer.max_norm(0.5, 1)
        self.assertMaxDiff(layer.weights, [[0.6, 0, 0.5], [0.8, 0, 0]])
        self.assertMaxDiff(layer.bias, [100, 100, 100])
        self.assertRaises(error.StructureError, layer.max_norm, 2, 1)

    def test_regularization(self):
        layer = self._fixed_layer()
        layer.scale_weights(0.5, False)
        self.assertMaxDiff(layer.weights, [[0.5, 0], [1, -0.5], [0, 1.5]])
        self.assertMaxDiff(layer.bias, [10, -10])
        layer.diminish_weights(0.75)
        self.assertMaxDiff(layer.weights, [[0, 0], [0.25, 0], [0, 0.75]])
        self.assertMaxDiff(layer.bias, [9.25, -9.25])

    def test_perturb_weights(self):
        layer = all2all.All2All(3, 5)
        weights = layer.weights.copy()
        layer.perturb_weights(self.rand, 0.5, 1, 2)
        changed = (layer.weights != weights).any(axis=0)
        self.assertEqual(changed.tolist(), [False, True, True, False, False])
        self.assertRaises(error.StructureError, layer.perturb_weights,
                          self.rand, 0.5, 4, 2)

    def test_identity(self):
        layer = all2all.All2All(3, 4, "identity")
        layer.set_weights_to_identity()
        inp = numpy.array([1.0, -2.0, 3.0])
        layer.feed_forward(inp)
        self.assertMaxDiff(layer.activation[:3], inp)

    def test_copy_single_neuron_weights(self):
        layer = self._fixed_layer()
        layer.copy_single_neuron_weights(0, 1)
        self.assertMaxDiff(layer.weights, [[1, 1], [2, 2], [0, 0]])
        self.assertMaxDiff(layer.bias, [10, 10])

    def test_renormalize_input(self):
        layer = all2all.All2All(3, 2)
        inp = numpy.array([5.0, 0.5, -1.0])
        layer.feed_forward(inp)
        expected = layer.activation.copy()
        layer.renormalize_input(0, 0, 10, -1, 1)
        inp[0] = 0.0
        layer.feed_forward(inp)
        self.assertMaxDiff(layer.activation, expected)

    def test_transform_weights(self):
        layer = all2all.All2All(2, 3)
        inp = numpy.array([0.5, -0.25])
        layer.feed_forward(inp)
        expected = layer.activation.copy()
        transform = numpy.array([[2.0, 1.0], [0.0, 1.0]])
        offset = numpy.array([0.1, 0.2])
        layer.transform_weights(transform, offset)
        # inputs transformed as pinv(transform) . x - offset
        layer.feed_forward(numpy.dot(numpy.linalg.inv(transform), inp) -
                           offset)
        self.assertMaxDiff(layer.activation, expected)

    def test_feed_forward_to_one_output(self):
        layer = self._fixed_layer("tanh")
        value = layer.feed_forward_to_one_output(
            numpy.array([1.0, 2.0, 3.0]), 1)
        self.assertAlmostEqual(value, numpy.tanh(-3))
        self.assertEqual(layer.activation[0], 0)

    def test_drop_connect(self):
        layer = all2all.All2All(20, 20)
        bias = layer.bias.copy()
        layer.drop_connect(self.rand, 0.5)
        zeros = (layer.weights == 0).sum()
        self.assertGreater(zeros, 100)
        self.assertLess(zeros, 300)
        self.assertMaxDiff(layer.bias, bias, 0)

    def test_shared_activation_function(self):
        function = activation.ActivationTanh()
        first = all2all.All2All(2, 2, function)
        second = all2all.All2All(2, 2, function)
        self.assertIs(first.activation_function, second.activation_function)


if __name__ == "__main__":
    unittest.main()
