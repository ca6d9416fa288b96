# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Restricted Boltzmann machine layer: the weights are shared between the
visible to hidden and the hidden to visible passes.

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
from neuralayers.all2all import check_size, unit_range
from neuralayers.config import get_dtype
import neuralayers.error as error
import neuralayers.formats as formats
import neuralayers.nn_units as nn_units
import neuralayers.prng as prng


def binarize(rand, probabilities):
    """Replaces each probability p in-place with 1 (with probability p)
    or 0.
    """
    f = rand.rand(*probabilities.shape)
    probabilities[:] = f < probabilities


@implementer(nn_units.ILayer)
class RestrictedBoltzmannMachine(nn_units.LayerBase):
    """RBM with visible units as the inputs and hidden units as the
    outputs.

    Attributes:
        weights: matrix of shape (outputs, inputs).
        bias: hidden bias.
        bias_reverse: visible bias.
        activation_reverse: visible values computed by feed_backward().
        error_reverse: the error with respect to activation_reverse.
        activation_function: used in both directions, logistic by default.
    """
    MAPPING = {"rbm"}
    TYPE = "rbm"

    def __init__(self, inputs=None, outputs=None, activation_function=None,
                 rand=None, **kwargs):
        super(RestrictedBoltzmannMachine, self).__init__(**kwargs)
        self._activation_function = activation.get(
            activation_function or activation.ActivationLogistic())
        self._weights = numpy.zeros((0, 0), dtype=get_dtype())
        self._bias = numpy.zeros(0, dtype=get_dtype())
        self._bias_reverse = numpy.zeros(0, dtype=get_dtype())
        self._net = numpy.zeros(0, dtype=get_dtype())
        self._net_reverse = numpy.zeros(0, dtype=get_dtype())
        self._activation_reverse = numpy.zeros(0, dtype=get_dtype())
        self._error_reverse = numpy.zeros(0, dtype=get_dtype())
        self.resize(inputs, outputs, rand)

    @property
    def inputs(self):
        return self._weights.shape[1]

    @property
    def outputs(self):
        return self._weights.shape[0]

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
    def bias_reverse(self):
        return self._bias_reverse

    @property
    def activation_reverse(self):
        return self._activation_reverse

    @property
    def error_reverse(self):
        return self._error_reverse

    @property
    def activation_function(self):
        return self._activation_function

    def _parameters(self):
        return [(self._weights, False), (self._bias, True),
                (self._bias_reverse, True)]

    def resize(self, inputs, outputs, rand=None):
        inputs = check_size(inputs, "inputs")
        outputs = check_size(outputs, "outputs")
        if (outputs, inputs) == self._weights.shape:
            return
        rand = prng.xget(rand)
        magnitude = nn_units.init_magnitude(inputs)
        weights = numpy.zeros((outputs, inputs), dtype=get_dtype())
        bias = numpy.zeros(outputs, dtype=get_dtype())
        bias_reverse = numpy.zeros(inputs, dtype=get_dtype())
        for arr in weights, bias, bias_reverse:
            rand.fill_normal_real(arr, 0, magnitude)
        keep_in = min(inputs, self.inputs)
        keep_out = min(outputs, self.outputs)
        weights[:keep_out, :keep_in] = self._weights[:keep_out, :keep_in]
        bias[:keep_out] = self._bias[:keep_out]
        bias_reverse[:keep_in] = self._bias_reverse[:keep_in]
        self.debug("Resized %dx%d -> %dx%d", self.inputs, self.outputs,
                   inputs, outputs)
        self._set_weights(weights, bias, bias_reverse)

    def _set_weights(self, weights, bias, bias_reverse):
        self._weights = weights
        self._bias = bias
        self._bias_reverse = bias_reverse
        outputs, inputs = weights.shape
        self._net = numpy.zeros(outputs, dtype=get_dtype())
        self._allocate_outputs(outputs)
        self._net_reverse = numpy.zeros(inputs, dtype=get_dtype())
        self._activation_reverse = numpy.zeros(inputs, dtype=get_dtype())
        self._error_reverse = numpy.zeros(inputs, dtype=get_dtype())

    def reset_weights(self, rand=None):
        rand = prng.xget(rand)
        magnitude = nn_units.init_magnitude(self.inputs)
        for arr, _ in self._parameters():
            rand.fill_normal_real(arr, 0, magnitude)

    def _feed_forward(self, inp):
        self._net[:] = numpy.dot(self._weights, inp) + self._bias
        self._activation[:] = self._activation_function.squash(self._net)

    def feed_backward(self):
        """Computes the visible values from the hidden activation.
        """
        self._net_reverse[:] = numpy.dot(self._activation, self._weights) + \
            self._bias_reverse
        self._activation_reverse[:] = self._activation_function.squash(
            self._net_reverse)

    def resample_hidden(self, rand):
        binarize(prng.xget(rand), self._activation)

    def resample_visible(self, rand):
        binarize(prng.xget(rand), self._activation_reverse)

    def draw_sample(self, rand, iters):
        """Gibbs sampling from a random hidden state. The hidden sample is
        left in activation, the visible sample in activation_reverse.
        """
        rand = prng.xget(rand)
        self._activation[:] = rand.rand(self.outputs) < 0.5
        for _ in range(iters):
            self.feed_backward()
            self.resample_visible(rand)
            self.feed_forward(self._activation_reverse)
            self.resample_hidden(rand)

    def free_energy(self, visible):
        """Returns -bias_reverse . v - sum(log(1 + exp(weights . v + bias))).
        """
        visible = self._check_input(visible)
        net = numpy.dot(self._weights, visible) + self._bias
        return -numpy.dot(visible, self._bias_reverse) - \
            numpy.logaddexp(0, net).sum()

    def contrastive_divergence(self, rand, visible, learning_rate,
                               gibbs_samples=1):
        """Makes one CD-k step: the positive phase from visible, the
        negative phase after gibbs_samples Gibbs steps.
        """
        rand = prng.xget(rand)
        visible = self._check_input(visible).copy()
        self.feed_forward(visible)
        self._weights += learning_rate * numpy.outer(self._activation,
                                                     visible)
        self._bias += learning_rate * self._activation
        self._bias_reverse += learning_rate * visible
        for _ in range(gibbs_samples):
            self.resample_hidden(rand)
            self.feed_backward()
            self.feed_forward(self._activation_reverse)
        self._weights -= learning_rate * numpy.outer(
            self._activation, self._activation_reverse)
        self._bias -= learning_rate * self._activation
        self._bias_reverse -= learning_rate * self._activation_reverse

    def deactivate_error(self):
        self._error[:] = self._activation_function.deactivate(
            self._net, self._activation, self._error)

    def back_prop_error(self, upstream):
        self._check_upstream(upstream)
        upstream.error[:] = numpy.dot(self._error, self._weights)

    def update_deltas(self, upstream_activation, deltas):
        inp = self._check_input(upstream_activation)
        d_weights, d_bias, _ = self._delta_views(deltas)
        d_weights += numpy.outer(self._error, inp)
        d_bias += self._error

    def perturb_weights(self, rand, deviation, start=0, count=None):
        stop = unit_range(start, count, self.outputs)
        rand = prng.xget(rand)
        self._weights[start:stop] += rand.normal(
            0, deviation, (stop - start, self.inputs))
        self._bias[start:stop] += rand.normal(0, deviation, stop - start)

    def max_norm(self, min_value, max_value):
        nn_units.clip_norms(self._weights, 1, min_value, max_value)

    def serialize(self):
        return formats.make_node(
            self.TYPE, inputs=self.inputs, outputs=self.outputs,
            activation=self._activation_function.NAME,
            weights=self._weights, bias=self._bias,
            bias_reverse=self._bias_reverse)

    @classmethod
    def deserialize(cls, node):
        if formats.read_type(node) != cls.TYPE:
            raise error.BadFormatError("%s can not load \"%s\"" %
                                       (cls.__name__, node["type"]))
        try:
            function = activation.get(formats.read_str(node, "activation"))
        except error.NotExistsError as e:
            raise error.BadFormatError(str(e)) from None
        inputs = formats.read_int(node, "inputs")
        outputs = formats.read_int(node, "outputs")
        layer = cls(activation_function=function)
        layer._set_weights(
            formats.read_matrix(node, "weights", outputs, inputs),
            formats.read_vector(node, "bias", outputs),
            formats.read_vector(node, "bias_reverse", inputs))
        return layer
