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

import neuralayers.error as error
from neuralayers.nn_units import Upstream
import neuralayers.pooling as pooling
from neuralayers.tests.unit import LayerTest
from neuralayers.tests.unit.gd_numdiff import GDNumDiff


class TestPairPooling(LayerTest, GDNumDiff):
    def test_product(self):
        layer = pooling.ProductPooling(4)
        self.assertEqual((layer.inputs, layer.outputs), (4, 2))
        upstream = Upstream([2.0, 3.0, 4.0, 5.0])
        layer.feed_forward(upstream)
        self.assertMaxDiff(layer.activation, [6, 20], 0)
        layer.error[:] = [1, 1]
        layer.back_prop_error(upstream)
        self.assertMaxDiff(upstream.error, [3, 2, 5, 4], 0)

    def test_addition(self):
        layer = pooling.AdditionPooling(4)
        upstream = Upstream([2.0, 3.0, 4.0, 5.0])
        layer.feed_forward(upstream)
        self.assertMaxDiff(layer.activation, [5, 9], 0)
        layer.error[:] = [1, -2]
        layer.back_prop_error(upstream)
        self.assertMaxDiff(upstream.error, [1, 1, -2, -2], 0)

    def test_numdiff(self):
        for cls in pooling.ProductPooling, pooling.AdditionPooling:
            layer = cls(6)
            self.numdiff_check_input(layer, self.random_vector(6),
                                     self.random_vector(3), self.info,
                                     self.assertLess)

    def test_structure(self):
        self.assertRaises(error.StructureError, pooling.ProductPooling, 5)
        layer = pooling.AdditionPooling(4)
        self.assertRaises(error.StructureError, layer.resize, 6, 2)
        layer.resize(8, 4)
        self.assertEqual(layer.activation.size, 4)
        layer.resize_inputs(Upstream(numpy.zeros(10)))
        self.assertEqual(layer.outputs, 5)
        self.assertRaises(error.StructureError, layer.resize_inputs,
                          Upstream(numpy.zeros(7)))

    def test_no_weights(self):
        layer = pooling.ProductPooling(4)
        self.assertEqual(layer.count_weights(), 0)
        deltas = numpy.zeros(0)
        layer.update_deltas(numpy.ones(4), deltas)
        layer.apply_deltas(deltas)
        layer.scale_weights(0.5)
        layer.diminish_weights(0.1)
        layer.max_norm(0, 1)
        self.assertRaises(error.UnsupportedOperationError,
                          layer.drop_connect, self.rand, 0.5)


class TestMaxPooling2D(LayerTest, GDNumDiff):
    def setUp(self):
        super(TestMaxPooling2D, self).setUp()
        self.input = numpy.array([[1, 5, 2, 0],
                                  [3, 4, 8, 1],
                                  [0, 2, 7, 6],
                                  [9, 1, 3, 3]], dtype=self.dtype).ravel()

    def test_forward(self):
        self.info("Will test max pooling")
        layer = pooling.MaxPooling2D(4, 4, 1, 2)
        self.assertEqual((layer.inputs, layer.outputs), (16, 4))
        layer.feed_forward(self.input)
        self.assertMaxDiff(layer.activation, [5, 8, 9, 7], 0)
        self.assertEqual(layer.winners.tolist(), [1, 6, 12, 10])

    def test_back_prop_error(self):
        layer = pooling.MaxPooling2D(4, 4, 1, 2)
        upstream = Upstream(self.input)
        layer.feed_forward(upstream)
        layer.error[:] = [0, 1, 0, 0]
        layer.back_prop_error(upstream)
        expected = numpy.zeros(16)
        expected[6] = 1
        self.assertMaxDiff(upstream.error, expected, 0)

    def test_ties(self):
        layer = pooling.MaxPooling2D(4, 4, 1, 2)
        layer.feed_forward(numpy.zeros(16))
        self.assertEqual(layer.winners.tolist(), [0, 2, 8, 10])

    def test_channels(self):
        layer = pooling.MaxPooling2D(2, 2, 2, 2)
        layer.feed_forward(numpy.array([1, 8, 4, 2, 3, 5, 2, 7],
                                       dtype=self.dtype))
        self.assertMaxDiff(layer.activation, [4, 8], 0)
        self.assertEqual(layer.winners.tolist(), [2, 1])

    def test_numdiff(self):
        layer = pooling.MaxPooling2D(4, 6, 3, 2)
        self.numdiff_check_input(layer, self.random_vector(layer.inputs),
                                 self.random_vector(layer.outputs),
                                 self.info, self.assertLess)

    def test_structure(self):
        self.assertRaises(error.StructureError, pooling.MaxPooling2D,
                          5, 4, 1, 2)
        self.assertRaises(error.StructureError, pooling.MaxPooling2D,
                          4, 4, 1, 0)
        layer = pooling.MaxPooling2D(4, 4, 1, 2)
        self.assertRaises(error.StructureError, layer.resize, 32, 8)
        self.assertRaises(error.UnsupportedOperationError,
                          layer.drop_connect, self.rand, 0.5)
        self.assertEqual(str(layer), "[maxpool2 4x4x1 / 2]")


if __name__ == "__main__":
    unittest.main()
