# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Pseudo random number generator used for weights initialization, noise
and stochastic sampling.

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

from neuralayers.config import root
from neuralayers.logger import Logger


class RandomGenerator(Logger):
    """numpy.random.RandomState wrapper which fills arrays in-place.

    Attributes:
        state: the state of the underlying generator.
    """

    def __init__(self, seed=None, **kwargs):
        super(RandomGenerator, self).__init__(**kwargs)
        self._state = numpy.random.RandomState()
        if seed is not None:
            self.seed(seed)

    def seed(self, seed):
        self.debug("Seeding with %s", seed)
        self._state.seed(seed)

    @property
    def state(self):
        return self._state.get_state()

    @state.setter
    def state(self, value):
        self._state.set_state(value)

    def fill(self, arr, vle_min=-1.0, vle_max=1.0):
        """Fills the array in-place with uniform values from
        [vle_min, vle_max).
        """
        arr[...] = self._state.uniform(vle_min, vle_max, arr.shape)

    def fill_normal_real(self, arr, mean, stddev):
        """Fills the array in-place with normally distributed values.
        """
        arr[...] = self._state.normal(mean, stddev, arr.shape)

    def normal(self, mean=0.0, stddev=1.0, size=None):
        return self._state.normal(mean, stddev, size)

    def uniform(self, vle_min=0.0, vle_max=1.0, size=None):
        return self._state.uniform(vle_min, vle_max, size)

    def rand(self, *args):
        return self._state.rand(*args)


_generator = None


def get():
    """Returns the process-wide default generator.
    """
    global _generator
    if _generator is None:
        _generator = RandomGenerator(root.common.random_seed)
    return _generator


def xget(rand):
    """Returns rand itself or the default generator if it is None.
    """
    return get() if rand is None else rand
