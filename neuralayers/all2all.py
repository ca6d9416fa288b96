# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

All-to-all perceptron layer (:class:`All2All`) with a pluggable activation
function. Softmax output layer is :class:`All2All` driven by
:class:`neuralayers.activation.ActivationSoftmax`, see :func:`All2AllSoftmax`.

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

import neuralayers.activation as activation
from neuralayers.config import get_dtype
import neuralayers.error as error
import neuralayers.formats as formats
import neuralayers.nn_units as nn_units
import neuralayers.prng as prng


def check_size(value, name):
    """Converts None (flexible size) to 0 and validates the size.
    """
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, numpy.integer)):
        raise error.StructureError("%s must be an integer, got %r" %
                                   (name, value))
    if value < 0:
        raise error.StructureError("%s must not be negative, got %d" %
                                   (name, value))
    return int(value)


def unit_range(start, count, units):
    """Returns the end of [start, start + count) validated against units.
    count None means "through the last unit".
    """
    stop = units if count is None else start + count
    if start < 0 or stop < start or stop > units:
        raise error.StructureError(
            "Units range [%d, %d) is out of [0, %d)" % (start, stop, units))
    return stop


@implementer(nn_units.ILayer)
class All2All(nn_units.LayerBase):
    """Fully connected layer: net = input . weights + bias,
    activation = f(net).

    Attributes:
        weights: matrix of shape (inputs, outputs).
        bias: vector of outputs.
        activation_function: ActivationBase strategy, may be shared
                             between layers.
    """

    MAPPING = {"classic", "softmax"}

    def __init__(self, inputs=None, outputs=None, activation_function=None,
                 rand=None, **kwargs):
        super(All2All, self).__init__(**kwargs)
        self._activation_function = activation.get(activation_function)
        self._weights = numpy.zeros((0, 0), dtype=get_dtype())
        self._bias = numpy.zeros(0, dtype=get_dtype())
        self._net = numpy.zeros(0, dtype=get_dtype())
        self.resize(inputs, outputs, rand)

    @property
    def type(self):
        if isinstance(self._activation_function, activation.ActivationSoftmax):
            return "softmax"
        return "classic"

    @property
    def inputs(self):
        return self._weights.shape[0]

    @property
    def outputs(self):
        return self._weights.shape[1]

    @property
    def net(self):
        return self._net

    @property
    def weights(self):
        return self._weights

    @property
    def bias(self):
        return self._bias

    @property
    def activation_function(self):
        return self._activation_function

    @activation_function.setter
    def activation_function(self, value):
        self._activation_function = activation.get(value)

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
        bias = numpy.zeros(outputs, dtype=get_dtype())
        rand.fill_normal_real(weights, 0, magnitude)
        rand.fill_normal_real(bias, 0, magnitude)
        keep_in = min(inputs, self.inputs)
        keep_out = min(outputs, self.outputs)
        weights[:keep_in, :keep_out] = self._weights[:keep_in, :keep_out]
        bias[:keep_out] = self._bias[:keep_out]
        self.debug("Resized %dx%d -> %dx%d", self.inputs, self.outputs,
                   inputs, outputs)
        self._set_weights(weights, bias)

    def _set_weights(self, weights, bias):
        self._weights = weights
        self._bias = bias
        self._net = numpy.zeros(weights.shape[1], dtype=get_dtype())
        self._allocate_outputs(weights.shape[1])

    def reset_weights(self, rand=None):
        rand = prng.xget(rand)
        magnitude = nn_units.init_magnitude(self.inputs)
        rand.fill_normal_real(self._weights, 0, magnitude)
        rand.fill_normal_real(self._bias, 0, magnitude)

    def _feed_forward(self, inp):
        self._net[:] = numpy.dot(inp, self._weights) + self._bias
        self._activation[:] = self._activation_function.squash(self._net)

    def feed_forward_to_one_output(self, inp, output):
        """Computes net and activation of the single unit; other units
        are left intact. Returns the activation of the unit.
        """
        if isinstance(self._activation_function,
                      activation.ActivationSoftmax):
            raise error.UnsupportedOperationError(
                "softmax activation depends on all the outputs")
        inp = self._check_input(inp)
        net = numpy.dot(inp, self._weights[:, output]) + self._bias[output]
        self._net[output] = net
        self._activation[output] = self._activation_function.squash(
            numpy.array([net], dtype=get_dtype()))[0]
        return self._activation[output]

    def deactivate_error(self):
        self._error[:] = self._activation_function.deactivate(
            self._net, self._activation, self._error)

    def back_prop_error(self, upstream):
        self._check_upstream(upstream)
        upstream.error[:] = numpy.dot(self._weights, self._error)

    def update_deltas(self, upstream_activation, deltas):
        inp = self._check_input(upstream_activation)
        d_weights, d_bias = self._delta_views(deltas)
        d_weights += numpy.outer(inp, self._error)
        d_bias += self._error

    def perturb_weights(self, rand, deviation, start=0, count=None):
        stop = unit_range(start, count, self.outputs)
        rand = prng.xget(rand)
        self._weights[:, start:stop] += rand.normal(
            0, deviation, (self.inputs, stop - start))
        self._bias[start:stop] += rand.normal(0, deviation, stop - start)

    def max_norm(self, min_value, max_value):
        nn_units.clip_norms(self._weights, 0, min_value, max_value)

    def drop_connect(self, rand, probability):
        mask = prng.xget(rand).uniform(size=self._weights.shape)
        self._weights[mask < probability] = 0

    def set_weights_to_identity(self, start=0, count=None):
        """Makes units [start, start + count) pass the inputs with the same
        indices through. count is clipped to the smaller dimension.
        """
        stop = min(self.inputs, self.outputs)
        if count is not None:
            stop = min(stop, start + count)
        for unit in range(start, stop):
            self._weights[:, unit] = 0
            self._weights[unit, unit] = 1
            self._bias[unit] = 0

    def copy_single_neuron_weights(self, source, dest):
        self._weights[:, dest] = self._weights[:, source]
        self._bias[dest] = self._bias[source]

    def renormalize_input(self, inp, old_min, old_max, new_min=0.0,
                          new_max=1.0):
        """Adjusts the weights so that the values of input inp in the new
        range give the same net as the values in the old range did.
        """
        if old_max == old_min:
            raise error.StructureError("The old range is empty")
        factor = (new_max - new_min) / (old_max - old_min)
        row = self._weights[inp]
        row /= factor
        self._bias += row * (old_min * factor - new_min)

    def transform_weights(self, transform, offset):
        """Adapts the layer to the inputs transformed as
        x' = pinv(transform) . x - offset. transform must be the square
        matrix of inputs x inputs.
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
        weights = numpy.dot(transform.T, self._weights)
        self._bias += numpy.dot(offset, weights)
        self._weights[...] = weights

    def serialize(self):
        return formats.make_node(
            self.type, inputs=self.inputs, outputs=self.outputs,
            activation=self._activation_function.NAME,
            weights=self._weights, bias=self._bias)

    @classmethod
    def deserialize(cls, node):
        tag = formats.read_type(node)
        if tag not in cls.MAPPING:
            raise error.BadFormatError("%s can not load \"%s\"" %
                                       (cls.__name__, tag))
        if tag == "softmax":
            function = activation.ActivationSoftmax()
        else:
            name = formats.read_str(node, "activation")
            try:
                function = activation.get(name)
            except error.NotExistsError as e:
                raise error.BadFormatError(str(e)) from None
        inputs = formats.read_int(node, "inputs")
        outputs = formats.read_int(node, "outputs")
        weights = formats.read_matrix(node, "weights", inputs, outputs)
        bias = formats.read_vector(node, "bias", outputs)
        layer = cls(activation_function=function)
        layer._set_weights(weights, bias)
        return layer

    def __str__(self):
        return "[%s %d -> %d (%s)]" % (
            self.type, self.inputs, self.outputs,
            self._activation_function.NAME)


def All2AllSoftmax(inputs=None, outputs=None, rand=None, **kwargs):
    """Softmax output layer: the outputs are non-negative and sum to 1.
    """
    return All2All(inputs, outputs, activation.ActivationSoftmax(), rand,
                   **kwargs)
