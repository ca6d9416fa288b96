# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Base classes for the neural network layers: the :class:`ILayer` contract,
the type tag registry and :class:`LayerBase` with the operations which are
the same for every layer.

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
from zope.interface import Interface, Attribute

from neuralayers.config import root, get_dtype
import neuralayers.error as error
import neuralayers.formats as formats
from neuralayers.logger import Logger
import neuralayers.prng as prng


class ILayer(Interface):
    """The operations every layer implements.

    The upstream layer arguments are anything with "outputs", "activation"
    and a writable "error" buffer.
    """

    inputs = Attribute("The number of input values")
    outputs = Attribute("The number of output values")
    net = Attribute("Pre-activation values")
    activation = Attribute("Output values computed by the last "
                           "feed_forward()")
    error = Attribute("The error with respect to the output, deactivated "
                      "in place by deactivate_error()")
    type = Attribute("The type tag written by serialize()")

    def resize(inputs, outputs, rand=None):
        """Changes the shape preserving the existing weights.
        """

    def resize_inputs(upstream, rand=None):
        """Resizes the inputs to match upstream.outputs.
        """

    def feed_forward(inp):
        """Computes net and activation from the input vector or the
        activation of the upstream layer.
        """

    def feed_through(matrix):
        """Feeds each row and returns the matrix of activations.
        """

    def deactivate_error():
        """Multiplies error by the derivative of the activation function.
        """

    def back_prop_error(upstream):
        """Writes the error of the upstream layer.
        """

    def update_deltas(upstream_activation, deltas):
        """Accumulates the weight changes into the deltas vector.
        """

    def apply_deltas(deltas):
        """Adds the deltas vector to the weights.
        """

    def scale_weights(factor, scale_biases=True):
        """Multiplies the weights by factor.
        """

    def diminish_weights(amount, regularize_biases=True):
        """Moves the weights towards zero by amount.
        """

    def count_weights():
        """Returns the number of weights.
        """

    def weights_to_vector(out):
        """Writes the weights into out, returns the number written.
        """

    def vector_to_weights(vec):
        """Reads the weights from vec, returns the number consumed.
        """

    def copy_weights(source):
        """Copies the weights from the layer of the same type and shape.
        """

    def reset_weights(rand=None):
        """Initializes the weights with small random values.
        """

    def perturb_weights(rand, deviation, start=0, count=None):
        """Adds Gaussian noise to the weights of the range of units.
        """

    def max_norm(min_value, max_value):
        """Clips the norm of the weights of each unit.
        """

    def drop_out(rand, probability):
        """Zeroes random activation values.
        """

    def drop_connect(rand, probability):
        """Zeroes random weights.
        """

    def serialize():
        """Returns the node with the type tag and all the fields.
        """


class LayerRegistry(type):
    """Metaclass which maps type tags from MAPPING to the layer classes.
    """
    mapping = {}
    logger = logging.getLogger("LayerRegistry")

    def __init__(cls, name, bases, clsdict):
        super(LayerRegistry, cls).__init__(name, bases, clsdict)
        mapping = clsdict.get("MAPPING", None)
        if mapping is None:
            LayerRegistry.logger.warning("%s does not have MAPPING", cls)
            return
        if not isinstance(mapping, set):
            raise TypeError("%s: MAPPING must be of type 'set'" % cls)
        for tag in mapping:
            existing = LayerRegistry.mapping.get(tag)
            if existing is not None and \
                    (existing.__module__, existing.__qualname__) != \
                    (cls.__module__, cls.__qualname__):
                raise error.AlreadyExistsError(
                    "%s: type tag \"%s\" is already registered by %s" %
                    (cls, tag, existing))
            LayerRegistry.mapping[tag] = cls


def clip_norms(matrix, axis, min_value, max_value):
    """Rescales the slices of matrix along axis so that their Euclidean
    norms are within [min_value, max_value]. Slices with the norm not
    greater than root.common.weights.norm_epsilon are left as is.
    """
    if min_value > max_value:
        raise error.StructureError(
            "min_value %s is greater than max_value %s" %
            (min_value, max_value))
    norms = numpy.sqrt((matrix * matrix).sum(axis=axis, keepdims=True))
    scale = numpy.ones_like(norms)
    big = norms > max_value
    scale[big] = max_value / norms[big]
    small = numpy.logical_and(
        norms < min_value, norms > root.common.weights.norm_epsilon)
    scale[small] = min_value / norms[small]
    matrix *= scale


def init_magnitude(inputs):
    return max(root.common.weights.min_magnitude, 1.0 / max(inputs, 1))


class LayerBase(Logger, metaclass=LayerRegistry):
    """Base class for all the layers.

    Descendants list their weight arrays in _parameters() and get the
    flattening, copying, scaling and applying of deltas for free.

    Attributes:
        MAPPING: type tags this class deserializes.
        TYPE: type tag written by serialize().
    """
    MAPPING = set()
    TYPE = None

    def __init__(self, **kwargs):
        super(LayerBase, self).__init__(**kwargs)
        self._activation = numpy.zeros(0, dtype=get_dtype())
        self._error = numpy.zeros(0, dtype=get_dtype())

    @property
    def type(self):
        return self.TYPE

    @property
    def inputs(self):
        raise NotImplementedError()

    @property
    def outputs(self):
        raise NotImplementedError()

    @property
    def net(self):
        return self._activation

    @property
    def activation(self):
        return self._activation

    @property
    def error(self):
        return self._error

    def _parameters(self):
        """Returns the list of (array, is_bias) in the flattening order.
        """
        return []

    @staticmethod
    def _as_vector(inp):
        if not isinstance(inp, numpy.ndarray) and hasattr(inp, "activation"):
            inp = inp.activation
        return numpy.asarray(inp, dtype=get_dtype())

    def _check_input(self, inp):
        inp = LayerBase._as_vector(inp)
        if inp.ndim != 1 or inp.size != self.inputs:
            raise error.StructureError(
                "%s expects %d inputs, got an array of shape %s" %
                (self, self.inputs, inp.shape))
        return inp

    def _check_upstream(self, upstream):
        if upstream.outputs != self.inputs:
            raise error.StructureError(
                "%s has %d inputs but the upstream layer has %d outputs" %
                (self, self.inputs, upstream.outputs))
        if len(upstream.error) != upstream.outputs:
            raise error.StructureError(
                "The upstream error buffer has %d values instead of %d" %
                (len(upstream.error), upstream.outputs))

    def _check_vector(self, vec, name="vector"):
        count = self.count_weights()
        if len(vec) < count:
            raise error.StructureError(
                "%s needs %d weights, the %s has only %d values" %
                (self, count, name, len(vec)))
        return count

    def _allocate_outputs(self, outputs):
        self._activation = numpy.zeros(outputs, dtype=get_dtype())
        self._error = numpy.zeros(outputs, dtype=get_dtype())

    def resize_inputs(self, upstream, rand=None):
        self.resize(upstream.outputs, self.outputs, rand)

    def feed_forward(self, inp):
        self._feed_forward(self._check_input(inp))

    def _feed_forward(self, inp):
        raise NotImplementedError()

    def feed_through(self, matrix):
        matrix = numpy.asarray(matrix, dtype=get_dtype())
        result = numpy.zeros((matrix.shape[0], self.outputs),
                             dtype=get_dtype())
        for i, row in enumerate(matrix):
            self.feed_forward(row)
            result[i] = self._activation
        return result

    def deactivate_error(self):
        pass

    def count_weights(self):
        return sum(arr.size for arr, _ in self._parameters())

    def weights_to_vector(self, out):
        self._check_vector(out)
        pos = 0
        for arr, _ in self._parameters():
            out[pos:pos + arr.size] = arr.ravel()
            pos += arr.size
        return pos

    def vector_to_weights(self, vec):
        self._check_vector(vec)
        pos = 0
        for arr, _ in self._parameters():
            arr[...] = numpy.reshape(vec[pos:pos + arr.size], arr.shape)
            pos += arr.size
        return pos

    def apply_deltas(self, deltas):
        self._check_vector(deltas, "deltas")
        pos = 0
        for arr, _ in self._parameters():
            arr += numpy.reshape(deltas[pos:pos + arr.size], arr.shape)
            pos += arr.size

    def _delta_views(self, deltas):
        """Returns the views of deltas shaped like _parameters().
        """
        self._check_vector(deltas, "deltas")
        views = []
        pos = 0
        for arr, _ in self._parameters():
            views.append(
                formats.reshape(deltas[pos:pos + arr.size], arr.shape))
            pos += arr.size
        return views

    def scale_weights(self, factor, scale_biases=True):
        for arr, is_bias in self._parameters():
            if scale_biases or not is_bias:
                arr *= factor

    def diminish_weights(self, amount, regularize_biases=True):
        for arr, is_bias in self._parameters():
            if regularize_biases or not is_bias:
                arr[...] = numpy.sign(arr) * numpy.maximum(
                    numpy.abs(arr) - amount, 0)

    def copy_weights(self, source):
        if type(source) is not type(self):
            raise error.StructureError(
                "Can not copy the weights of %s into %s" %
                (type(source).__name__, type(self).__name__))
        mine = self._parameters()
        theirs = source._parameters()
        if [a.shape for a, _ in mine] != [a.shape for a, _ in theirs]:
            raise error.StructureError(
                "Can not copy the weights of %s into %s: shapes differ" %
                (source, self))
        for dst, src in zip(mine, theirs):
            dst[0][...] = src[0]

    def drop_out(self, rand, probability):
        mask = prng.xget(rand).uniform(size=self._activation.shape)
        self._activation[mask < probability] = 0

    def drop_connect(self, rand, probability):
        raise error.UnsupportedOperationError(
            "%s does not support drop_connect()" % type(self).__name__)

    def print_debug_data(self):
        """Show some statistics.
        """
        if not self.logger.isEnabledFor(logging.DEBUG):
            return
        y = self._activation
        if y.size == 0:
            return
        self.debug(
            "%s: %d -> %d with %d weights: y: min avg max: %.6f %.6f %.6f",
            self.__class__.__name__, self.inputs, self.outputs,
            self.count_weights(), y.min(), numpy.average(y), y.max())

    def __str__(self):
        return "[%s %d -> %d]" % (self.type, self.inputs, self.outputs)

    def __repr__(self):
        return "<%s %d -> %d>" % (self.__class__.__name__, self.inputs,
                                  self.outputs)


class ParameterlessMixin(object):
    """Weight operations of the layers without weights.
    """

    def update_deltas(self, upstream_activation, deltas):
        pass

    def reset_weights(self, rand=None):
        pass

    def perturb_weights(self, rand, deviation, start=0, count=None):
        pass

    def max_norm(self, min_value, max_value):
        pass


class Upstream(object):
    """Upstream layer handle over an activation vector with its own error
    buffer, e.g. for the input of the first layer.
    """

    def __init__(self, activation):
        self.activation = numpy.asarray(activation, dtype=get_dtype())
        self.error = numpy.zeros_like(self.activation)

    @property
    def outputs(self):
        return len(self.activation)
