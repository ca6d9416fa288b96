# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Common base class of the layer unit tests.

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


import logging
import numpy
import unittest

from neuralayers.config import get_dtype
import neuralayers.prng as prng


class LayerTest(unittest.TestCase):
    """Seeds the default generator and provides logging shortcuts.
    """

    def setUp(self):
        prng.get().seed(1234)
        self.rand = prng.get()
        self.dtype = get_dtype()

    @property
    def logger(self):
        return logging.getLogger(self.__class__.__name__)

    def info(self, msg, *args):
        self.logger.info(msg, *args)

    def random_vector(self, size, vle_min=-1.0, vle_max=1.0):
        vec = numpy.zeros(size, dtype=self.dtype)
        self.rand.fill(vec, vle_min, vle_max)
        return vec

    def assertMaxDiff(self, actual, expected, limit=1.0e-10):
        max_diff = numpy.fabs(numpy.asarray(actual, dtype=self.dtype) -
                              numpy.asarray(expected, dtype=self.dtype)).max()
        self.assertLessEqual(max_diff, limit,
                             "max difference is %.6e" % max_diff)
