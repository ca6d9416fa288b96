# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Pooling layers without weights: pairwise product and sum
(:class:`ProductPooling`, :class:`AdditionPooling`) and 2-D max pooling of
interleaved channels (:class:`MaxPooling2D`).

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


from itertools import product
import numpy
from zope.interface import implementer

from neuralayers.all2all import check_size
import neuralayers.error as error
import neuralayers.formats as formats
import neuralayers.nn_units as nn_units


class PairPoolingBase(nn_units.ParameterlessMixin, nn_units.LayerBase):
    """Reduces each pair of adjacent inputs (2k, 2k + 1) to output k.
    """
    MAPPING = set()

    def __init__(self, inputs=None, **kwargs):
        super(PairPoolingBase, self).__init__(**kwargs)
        inputs = check_size(inputs, "inputs")
        if inputs % 2 != 0:
            raise error.StructureError(
                "%s needs an even number of inputs, got %d" %
                (type(self).__name__, inputs))
        self._outputs = 0
        self.resize(inputs, inputs // 2)

    @property
    def inputs(self):
        return self._outputs * 2

    @property
    def outputs(self):
        return self._outputs

    def resize(self, inputs, outputs, rand=None):
        inputs = check_size(inputs, "inputs")
        outputs = check_size(outputs, "outputs")
        if outputs * 2 != inputs:
            raise error.StructureError(
                "%s must have twice as many inputs as outputs, got %d -> %d"
                % (type(self).__name__, inputs, outputs))
        if outputs == self._outputs and self._activation.size == outputs:
            return
        self._outputs = outputs
        self._allocate_outputs(outputs)

    def resize_inputs(self, upstream, rand=None):
        self.resize(upstream.outputs, upstream.outputs // 2, rand)

    def serialize(self):
        return formats.make_node(self.TYPE, outputs=self.outputs)

    @classmethod
    def deserialize(cls, node):
        if formats.read_type(node) != cls.TYPE:
            raise error.BadFormatError("%s can not load \"%s\"" %
                                       (cls.__name__, node["type"]))
        return cls(formats.read_int(node, "outputs") * 2)


@implementer(nn_units.ILayer)
class ProductPooling(PairPoolingBase):
    """activation[k] = input[2k] * input[2k + 1].
    """
    MAPPING = {"productpooling"}
    TYPE = "productpooling"

    def _feed_forward(self, inp):
        numpy.multiply(inp[0::2], inp[1::2], out=self._activation)

    def back_prop_error(self, upstream):
        self._check_upstream(upstream)
        up_act = upstream.activation
        upstream.error[0::2] = self._error * up_act[1::2]
        upstream.error[1::2] = self._error * up_act[0::2]


@implementer(nn_units.ILayer)
class AdditionPooling(PairPoolingBase):
    """activation[k] = input[2k] + input[2k + 1].
    """
    MAPPING = {"additionpooling"}
    TYPE = "additionpooling"

    def _feed_forward(self, inp):
        numpy.add(inp[0::2], inp[1::2], out=self._activation)

    def back_prop_error(self, upstream):
        self._check_upstream(upstream)
        upstream.error[0::2] = self._error
        upstream.error[1::2] = self._error


@implementer(nn_units.ILayer)
class MaxPooling2D(nn_units.ParameterlessMixin, nn_units.LayerBase):
    """Max pooling over non-overlapping square regions of an image with
    interleaved channels: input[(y * width + x) * channels + c].

    Attributes:
        width, height, channels: the input geometry.
        region_size: the side of the pooling square.
        winners: indices in the input which were passed through by the last
                 feed_forward().
    """
    MAPPING = {"maxpool2"}
    TYPE = "maxpool2"

    def __init__(self, width=None, height=None, channels=1, region_size=2,
                 **kwargs):
        super(MaxPooling2D, self).__init__(**kwargs)
        self._width = 0
        self._height = 0
        self._channels = 0
        self._region_size = region_size
        self._winners = numpy.zeros(0, dtype=numpy.int64)
        if region_size < 1:
            raise error.StructureError(
                "region_size must be positive, got %d" % region_size)
        self._set_geometry(check_size(width, "width"),
                           check_size(height, "height"),
                           check_size(channels, "channels"))

    def _set_geometry(self, width, height, channels):
        r = self._region_size
        if width % r != 0 or height % r != 0:
            raise error.StructureError(
                "%dx%d image can not be split into %dx%d regions" %
                (width, height, r, r))
        self._width = width
        self._height = height
        self._channels = channels
        self._winners = numpy.zeros(self.outputs, dtype=numpy.int64)
        self._allocate_outputs(self.outputs)
        self.debug("Geometry is %dx%dx%d, region %d", width, height,
                   channels, r)

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    @property
    def channels(self):
        return self._channels

    @property
    def region_size(self):
        return self._region_size

    @property
    def output_width(self):
        return self._width // self._region_size

    @property
    def output_height(self):
        return self._height // self._region_size

    @property
    def output_channels(self):
        return self._channels

    @property
    def output_interlaced(self):
        return True

    @property
    def winners(self):
        return self._winners

    @property
    def inputs(self):
        return self._width * self._height * self._channels

    @property
    def outputs(self):
        return self.output_width * self.output_height * self._channels

    def resize(self, inputs, outputs, rand=None):
        if inputs != self.inputs or outputs != self.outputs:
            raise error.StructureError(
                "%s can not be resized to %s -> %s, change its geometry "
                "instead" % (self, inputs, outputs))

    def resize_inputs(self, upstream, rand=None):
        """Adopts the output geometry of a convolutional or pooling
        layer; other layers must match the current number of inputs. The
        upstream channels must be interlaced.
        """
        if hasattr(upstream, "output_width"):
            if not getattr(upstream, "output_interlaced", True):
                raise error.StructureError(
                    "%s can not read the planar output of %s" %
                    (self, upstream))
            self._set_geometry(upstream.output_width,
                               upstream.output_height,
                               upstream.output_channels)
        else:
            self.resize(upstream.outputs, self.outputs, rand)

    def _feed_forward(self, inp):
        image = inp.reshape(self._height, self._width, self._channels)
        r = self._region_size
        output = formats.reshape(self._activation, (
            self.output_height, self.output_width, self._channels))
        winners = formats.reshape(self._winners, output.shape)
        for out_y, out_x, ch in product(*map(range, output.shape)):
            y1 = out_y * r
            x1 = out_x * r
            cut = image[y1:y1 + r, x1:x1 + r, ch]
            i, j = numpy.unravel_index(cut.argmax(), cut.shape)
            idx = numpy.ravel_multi_index((y1 + i, x1 + j, ch), image.shape)
            winners[out_y, out_x, ch] = idx
            output[out_y, out_x, ch] = inp[idx]

    def back_prop_error(self, upstream):
        self._check_upstream(upstream)
        upstream.error[:] = 0
        upstream.error[self._winners] = self._error

    def serialize(self):
        return formats.make_node(
            self.TYPE, width=self._width, height=self._height,
            channels=self._channels, region_size=self._region_size)

    @classmethod
    def deserialize(cls, node):
        if formats.read_type(node) != cls.TYPE:
            raise error.BadFormatError("%s can not load \"%s\"" %
                                       (cls.__name__, node["type"]))
        return cls(formats.read_int(node, "width"),
                   formats.read_int(node, "height"),
                   formats.read_int(node, "channels"),
                   formats.read_int(node, "region_size", 1))

    def __str__(self):
        return "[%s %dx%dx%d / %d]" % (self.TYPE, self._width, self._height,
                                       self._channels, self._region_size)
