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
from neuralayers.config import root
import neuralayers.error as error
from neuralayers.tests.unit import LayerTest


class TestActivation(LayerTest):
    def test_lookup(self):
        self.assertEqual(
            activation.names(),
            ["identity", "logistic", "relu", "scaled_tanh", "softmax",
             "softplus", "tanh"])
        self.assertIsInstance(activation.get("relu"),
                              activation.ActivationRELU)
        self.assertEqual(activation.get(None).NAME, root.common.activation)
        tanh = activation.ActivationTanh()
        self.assertIs(activation.get(tanh), tanh)
        self.assertEqual(activation.get("tanh"), tanh)
        self.assertRaises(error.NotExistsError, activation.get, "sine")

    def test_squash(self):
        net = numpy.array([-2.0, 0.0, 3.0])
        self.assertMaxDiff(activation.get("identity").squash(net), net)
        self.assertMaxDiff(activation.get("relu").squash(net), [0, 0, 3])
        self.assertMaxDiff(activation.get("logistic").squash(net),
                           1.0 / (1.0 + numpy.exp(-net)))
        self.assertMaxDiff(activation.get("softplus").squash(net),
                           numpy.log(1.0 + numpy.exp(net)))
        self.assertMaxDiff(activation.get("scaled_tanh").squash(net),
                           1.7159 * numpy.tanh(0.6666 * net))

    def test_derivatives(self):
        self.info("Will test the derivatives numerically")
        net = self.random_vector(7, -2, 2)
        h = 1.0e-6
        for name in ("identity", "tanh", "scaled_tanh", "logistic",
                     "softplus"):
            fn = activation.get(name)
            numeric = (fn.squash(net + h) - fn.squash(net - h)) / (2 * h)
            self.assertMaxDiff(fn.derivative(net, fn.squash(net)), numeric,
                               1.0e-6)

    def test_softmax(self):
        fn = activation.get("softmax")
        net = numpy.array([1000.0, 1001.0, 999.0, -1000.0])
        act = fn.squash(net)
        self.assertFalse(numpy.isnan(act).any())
        self.assertAlmostEqual(act.sum(), 1.0)
        self.assertGreaterEqual(act.min(), 0)
        self.assertEqual(act.argmax(), 1)

    def test_softmax_jacobian(self):
        fn = activation.get("softmax")
        net = self.random_vector(5)
        err = self.random_vector(5)
        act = fn.squash(net)
        jacobian = numpy.diag(act) - numpy.outer(act, act)
        self.assertMaxDiff(fn.deactivate(net, act, err),
                           numpy.dot(jacobian, err))


if __name__ == "__main__":
    unittest.main()
