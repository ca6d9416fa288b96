# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Max-out layer: each output unit passes through the strongest of the
weighted upstream values.

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
from zope.interface import implementer

from neuralayers.all2all import check_size, unit_range
from neuralayers.config import get_dtype
import neuralayers.error as error
import neuralayers.formats as formats
import neuralayers.nn_units as nn_units
import neuralayers.prng as prng


@implementer(nn_units.ILayer)
class MaxOut(nn_units.LayerBase):
    """activation[i] = max_j (input[j] + bias[j]) * weights[j, i].

    The index j of the maximum is remembered per output unit; the error
    and the deltas flow only through that connection. Ties go to the
    smallest j.

    Attributes:
        weights: matrix of shape (inputs, outputs).
        bias: vector of inputs, added to the input before weighting.
        winners: the winning input index of each output unit.
    """
    MAPPING = {"maxout"}
    TYPE = "maxout"

    def __init__(self, inputs=None, outputs=None, rand=None, **kwargs):
        super(MaxOut, self).__init__(**kwargs)
        self._weights = numpy.zeros((0, 0), dtype=get_dtype())
        self._bias = numpy.zeros(0, dtype=get_dtype())
        self._winners = numpy.zeros(0, dtype=numpy.int64)
        self.resize(inputs, outputs, rand)

    @property
    def inputs(self):
        return self._weights.shape[0]

    @property
    def outputs(self):
        return self._weights.shape[1]

    @property
    def weights(self):
        return self._weights

    @property
    def bias(self):
        return self._bias

    @property
    def winners(self):
        return self._winners

    def _parameters(self):
        return [(self._weights, False), (self._bias, True)]

    def resize(self, inputs, outputs, rand=None):
        inputs = check_size(inputs, "inputs")
        outputs = check_size(outputs, "outputs")
        if (inputs, outputs) == self._weights.shape:
            return
        rand = prng.xget(rand)
        magnitude = nn_units.init_magnitude(inputs)
        weights = numpy.zeros((inputs, outputs), dtype=get_dtype())
        bias = numpy.zeros(inputs, dtype=get_dtype())
        rand.fill_normal_real(weights, 0, magnitude)
        rand.fill_normal_real(bias, 0, magnitude)
        keep_in = min(inputs, self.inputs)
        keep_out = min(outputs, self.outputs)
        weights[:keep_in, :keep_out] = self._weights[:keep_in, :keep_out]
        bias[:keep_in] = self._bias[:keep_in]
        self.debug("Resized %dx%d -> %dx%d", self.inputs, self.outputs,
                   inputs, outputs)
        self._set_weights(weights, bias)

    def _set_weights(self, weights, bias):
        self._weights = weights
        self._bias = bias
        self._winners = numpy.zeros(weights.shape[1], dtype=numpy.int64)
        self._allocate_outputs(weights.shape[1])

    def reset_weights(self, rand=None):
        rand = prng.xget(rand)
        magnitude = nn_units.init_magnitude(self.inputs)
        rand.fill_normal_real(self._weights, 0, magnitude)
        rand.fill_normal_real(self._bias, 0, magnitude)

    def _feed_forward(self, inp):
        if self.inputs == 0:
            self._activation[:] = 0
            return
        candidates = (inp + self._bias)[:, numpy.newaxis] * self._weights
        self._winners[:] = candidates.argmax(axis=0)
        self._activation[:] = candidates[self._winners,
                                         numpy.arange(self.outputs)]

    def back_prop_error(self, upstream):
        self._check_upstream(upstream)
        upstream.error[:] = 0
        numpy.add.at(upstream.error, self._winners,
                     self._error * self._winning_weights())

    def _winning_weights(self):
        return self._weights[self._winners, numpy.arange(self.outputs)]

    def update_deltas(self, upstream_activation, deltas):
        inp = self._check_input(upstream_activation)
        d_weights, d_bias = self._delta_views(deltas)
        units = numpy.arange(self.outputs)
        d_weights[self._winners, units] += \
            self._error * (inp + self._bias)[self._winners]
        numpy.add.at(d_bias, self._winners,
                     self._error * self._winning_weights())

    def perturb_weights(self, rand, deviation, start=0, count=None):
        stop = unit_range(start, count, self.outputs)
        self._weights[:, start:stop] += prng.xget(rand).normal(
            0, deviation, (self.inputs, stop - start))

    def max_norm(self, min_value, max_value):
        nn_units.clip_norms(self._weights, 0, min_value, max_value)

    def drop_connect(self, rand, probability):
        mask = prng.xget(rand).uniform(size=self._weights.shape)
        self._weights[mask < probability] = 0

    def set_weights_to_identity(self, start=0, count=None):
        stop = min(self.inputs, self.outputs)
        if count is not None:
            stop = min(stop, start + count)
        for unit in range(start, stop):
            self._weights[:, unit] = 0
            self._weights[unit, unit] = 1
            self._bias[unit] = 0

    def copy_single_neuron_weights(self, source, dest):
        self._weights[:, dest] = self._weights[:, source]

    def transform_weights(self, transform, offset):
        """Adapts the layer to the inputs transformed as
        x' = pinv(transform) . x - offset. The weights and the per-input
        bias follow the transform, offset is added to the bias.
        """
        transform = numpy.asarray(transform, dtype=get_dtype())
        offset = numpy.asarray(offset, dtype=get_dtype())
        if transform.shape != (self.inputs, self.inputs):
            raise error.StructureError(
                "transform must be %dx%d, got %s" %
                (self.inputs, self.inputs, transform.shape))
        if offset.shape != (self.inputs,):
            raise error.StructureError(
                "offset must have %d values, got %s" %
                (self.inputs, offset.shape))
        self._weights[...] = numpy.dot(transform.T, self._weights)
        self._bias[...] = numpy.dot(transform.T, self._bias) + offset

    def serialize(self):
        return formats.make_node(
            self.TYPE, inputs=self.inputs, outputs=self.outputs,
            weights=self._weights, bias=self._bias)

    @classmethod
    def deserialize(cls, node):
        if formats.read_type(node) != cls.TYPE:
            raise error.BadFormatError("%s can not load \"%s\"" %
                                       (cls.__name__, node["type"]))
        inputs = formats.read_int(node, "inputs")
        outputs = formats.read_int(node, "outputs")
        layer = cls()
        layer._set_weights(
            formats.read_matrix(node, "weights", inputs, outputs),
            formats.read_vector(node, "bias", inputs))
        return layer
