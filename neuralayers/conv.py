# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Convolutional layers: 1-D over interleaved channels (:class:`Conv1D`) and
2-D with padding and stride (:class:`Conv2D`).

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
from numpy.lib.stride_tricks import sliding_window_view
from zope.interface import implementer

import neuralayers.activation as activation
from neuralayers.all2all import check_size, unit_range
from neuralayers.config import get_dtype
import neuralayers.error as error
import neuralayers.formats as formats
from neuralayers.image import Image, convolve, convolve_full
import neuralayers.nn_units as nn_units
import neuralayers.prng as prng


class ConvolutionalBase(nn_units.LayerBase):
    """Kernels (one per row) and a bias per kernel.
    """
    MAPPING = set()

    def __init__(self, **kwargs):
        super(ConvolutionalBase, self).__init__(**kwargs)
        self._kernels = numpy.zeros((0, 0), dtype=get_dtype())
        self._bias = numpy.zeros(0, dtype=get_dtype())

    @property
    def kernels(self):
        return self._kernels

    @property
    def bias(self):
        return self._bias

    @property
    def kernel_count(self):
        return self._kernels.shape[0]

    def _parameters(self):
        return [(self._kernels, False), (self._bias, True)]

    def _init_kernels(self, count, size, rand):
        kernels = numpy.zeros((count, size), dtype=get_dtype())
        bias = numpy.zeros(count, dtype=get_dtype())
        rand = prng.xget(rand)
        magnitude = nn_units.init_magnitude(size)
        rand.fill_normal_real(kernels, 0, magnitude)
        rand.fill_normal_real(bias, 0, magnitude)
        return kernels, bias

    def reset_weights(self, rand=None):
        self._kernels[...], self._bias[...] = self._init_kernels(
            self.kernel_count, self._kernels.shape[1], rand)

    def perturb_weights(self, rand, deviation, start=0, count=None):
        """Perturbs the kernels [start, start + count).
        """
        stop = unit_range(start, count, self.kernel_count)
        rand = prng.xget(rand)
        self._kernels[start:stop] += rand.normal(
            0, deviation, (stop - start, self._kernels.shape[1]))
        self._bias[start:stop] += rand.normal(0, deviation, stop - start)

    def max_norm(self, min_value, max_value):
        nn_units.clip_norms(self._kernels, 1, min_value, max_value)

    def resize(self, inputs, outputs, rand=None):
        if inputs != self.inputs or outputs != self.outputs:
            raise error.StructureError(
                "%s can not be resized to %s -> %s, change its geometry "
                "instead" % (self, inputs, outputs))

    @classmethod
    def _check_type(cls, node):
        if formats.read_type(node) != cls.TYPE:
            raise error.BadFormatError("%s can not load \"%s\"" %
                                       (cls.__name__, node["type"]))


@implementer(nn_units.ILayer)
class Conv1D(ConvolutionalBase):
    """Valid 1-D convolution of the samples of each channel.

    The input is samples x channels with the channels of a sample adjacent.
    Channel j is convolved with kernels j * kernels_per_channel ...
    (j + 1) * kernels_per_channel - 1; the output is output_samples x
    (channels * kernels_per_channel), again sample-major.

    Attributes:
        kernels: matrix of shape (channels * kernels_per_channel,
                 kernel_size).
        activation_function: identity by default.
    """
    MAPPING = {"conv1d"}
    TYPE = "conv1d"

    def __init__(self, input_samples, input_channels, kernel_size,
                 kernels_per_channel, activation_function=None, rand=None,
                 **kwargs):
        super(Conv1D, self).__init__(**kwargs)
        self._input_samples = check_size(input_samples, "input_samples")
        self._input_channels = check_size(input_channels, "input_channels")
        self._kernels_per_channel = check_size(kernels_per_channel,
                                               "kernels_per_channel")
        kernel_size = check_size(kernel_size, "kernel_size")
        if kernel_size < 1 or kernel_size > self._input_samples:
            raise error.StructureError(
                "kernel_size must be within [1, %d], got %d" %
                (self._input_samples, kernel_size))
        self._activation_function = activation.get(
            activation_function or activation.ActivationIdentity())
        self._set_weights(*self._init_kernels(
            self._input_channels * self._kernels_per_channel, kernel_size,
            rand))

    def _set_weights(self, kernels, bias):
        self._kernels = kernels
        self._bias = bias
        self._net = numpy.zeros(self.outputs, dtype=get_dtype())
        self._allocate_outputs(self.outputs)

    @property
    def input_samples(self):
        return self._input_samples

    @property
    def input_channels(self):
        return self._input_channels

    @property
    def kernel_size(self):
        return self._kernels.shape[1]

    @property
    def kernels_per_channel(self):
        return self._kernels_per_channel

    @property
    def output_samples(self):
        return self._input_samples - self.kernel_size + 1

    @property
    def inputs(self):
        return self._input_samples * self._input_channels

    @property
    def outputs(self):
        return self.output_samples * self.kernel_count

    @property
    def net(self):
        return self._net

    @property
    def activation_function(self):
        return self._activation_function

    def _windows(self, inp):
        """Returns (output_samples, channels, kernel_size) windows.
        """
        return sliding_window_view(
            inp.reshape(self._input_samples, self._input_channels),
            self.kernel_size, axis=0)

    def _grouped_kernels(self, kernels):
        return formats.reshape(kernels, (self._input_channels,
                                         self._kernels_per_channel,
                                         self.kernel_size))

    def _grouped_outputs(self, vec):
        return vec.reshape(self.output_samples, self._input_channels,
                           self._kernels_per_channel)

    def _feed_forward(self, inp):
        net = numpy.einsum("icl,ckl->ick", self._windows(inp),
                           self._grouped_kernels(self._kernels))
        net += self._bias.reshape(self._input_channels,
                                  self._kernels_per_channel)
        self._net[:] = net.ravel()
        self._activation[:] = self._activation_function.squash(self._net)

    def deactivate_error(self):
        self._error[:] = self._activation_function.deactivate(
            self._net, self._activation, self._error)

    def back_prop_error(self, upstream):
        self._check_upstream(upstream)
        spread = numpy.einsum("ick,ckl->icl",
                              self._grouped_outputs(self._error),
                              self._grouped_kernels(self._kernels))
        upstream.error[:] = 0
        up_err = formats.reshape(upstream.error, (self._input_samples,
                                                  self._input_channels))
        for l in range(self.kernel_size):
            up_err[l:l + self.output_samples] += spread[:, :, l]

    def update_deltas(self, upstream_activation, deltas):
        inp = self._check_input(upstream_activation)
        d_kernels, d_bias = self._delta_views(deltas)
        err = self._grouped_outputs(self._error)
        self._grouped_kernels(d_kernels)[...] += numpy.einsum(
            "ick,icl->ckl", err, self._windows(inp))
        d_bias += err.sum(axis=0).ravel()

    def serialize(self):
        return formats.make_node(
            self.TYPE, input_samples=self._input_samples,
            input_channels=self._input_channels,
            kernel_size=self.kernel_size,
            kernels_per_channel=self._kernels_per_channel,
            activation=self._activation_function.NAME,
            kernels=self._kernels, bias=self._bias)

    @classmethod
    def deserialize(cls, node):
        cls._check_type(node)
        try:
            function = activation.get(formats.read_str(node, "activation"))
        except error.NotExistsError as e:
            raise error.BadFormatError(str(e)) from None
        samples = formats.read_int(node, "input_samples")
        channels = formats.read_int(node, "input_channels")
        size = formats.read_int(node, "kernel_size", 1)
        per_channel = formats.read_int(node, "kernels_per_channel")
        if size > samples:
            raise error.BadFormatError(
                "kernel_size %d is greater than input_samples %d" %
                (size, samples))
        kernels = formats.read_matrix(node, "kernels",
                                      channels * per_channel, size)
        bias = formats.read_vector(node, "bias", channels * per_channel)
        layer = cls(samples, channels, size, per_channel, function)
        layer._set_weights(kernels, bias)
        return layer

    def __str__(self):
        return "[%s %dx%d -> %dx%d, kernel %d]" % (
            self.TYPE, self._input_samples, self._input_channels,
            self.output_samples, self.kernel_count, self.kernel_size)


def output_size(size, kernel, padding, stride):
    """Returns the number of positions of the kernel along the axis.
    """
    return (size + 2 * padding - kernel) // stride + 1


@implementer(nn_units.ILayer)
class Conv2D(ConvolutionalBase):
    """2-D convolution with zero padding and stride, linear activation.

    Each kernel spans all the input channels and produces one output
    channel. The input, the kernels and the output are interlaced (the
    channels of a pixel are adjacent) unless told otherwise by
    set_*_interlaced().

    Attributes:
        kernels: matrix of shape (kernel_count,
                 kernel_width * kernel_height * input_channels).
        padding: (px, py).
        stride: (sx, sy).
    """
    MAPPING = {"conv2d"}
    TYPE = "conv2d"

    def __init__(self, width, height, channels, kernel_width, kernel_height,
                 kernel_count=0, rand=None, **kwargs):
        super(Conv2D, self).__init__(**kwargs)
        self._width = check_size(width, "width")
        self._height = check_size(height, "height")
        self._channels = check_size(channels, "channels")
        self._kernel_width = check_size(kernel_width, "kernel_width")
        self._kernel_height = check_size(kernel_height, "kernel_height")
        if self._kernel_width < 1 or self._kernel_height < 1:
            raise error.StructureError("Kernel must not be empty")
        self._padding = (0, 0)
        self._stride = (1, 1)
        self._input_interlaced = True
        self._kernels_interlaced = True
        self._output_interlaced = True
        self._output_width, self._output_height = self._output_geometry(
            self._width, self._height, self._padding, self._stride)
        self._kernels = numpy.zeros((0, self._kernel_size(self._channels)),
                                    dtype=get_dtype())
        self._allocate_outputs(0)
        self.add_kernels(check_size(kernel_count, "kernel_count"), rand)

    @classmethod
    def flexible(cls, kernel_width, kernel_height, kernel_count=0,
                 rand=None, **kwargs):
        """Creates the layer which takes its input geometry from the
        upstream layer in resize_inputs().
        """
        return cls(None, None, None, kernel_width, kernel_height,
                   kernel_count, rand, **kwargs)

    def _kernel_size(self, channels):
        return self._kernel_width * self._kernel_height * channels

    def _output_geometry(self, width, height, padding, stride):
        if width == 0 or height == 0:
            return 0, 0
        result = (output_size(width, self._kernel_width, padding[0],
                              stride[0]),
                  output_size(height, self._kernel_height, padding[1],
                              stride[1]))
        if min(result) <= 0:
            raise error.StructureError(
                "%dx%d kernel does not fit into %dx%d image with padding "
                "%s" % (self._kernel_width, self._kernel_height, width,
                        height, padding))
        return result

    def _update_output_size(self):
        self._allocate_outputs(self.outputs)
        self.debug("Output is %dx%dx%d", self._output_width,
                   self._output_height, self.kernel_count)

    @property
    def input_width(self):
        return self._width

    @property
    def input_height(self):
        return self._height

    @property
    def input_channels(self):
        return self._channels

    @property
    def kernel_width(self):
        return self._kernel_width

    @property
    def kernel_height(self):
        return self._kernel_height

    @property
    def kernel_channels(self):
        return self._channels

    @property
    def output_width(self):
        return self._output_width

    @property
    def output_height(self):
        return self._output_height

    @property
    def output_channels(self):
        return self.kernel_count

    @property
    def input_interlaced(self):
        return self._input_interlaced

    @property
    def output_interlaced(self):
        return self._output_interlaced

    @property
    def padding(self):
        return self._padding

    @property
    def stride(self):
        return self._stride

    @property
    def inputs(self):
        return self._width * self._height * self._channels

    @property
    def outputs(self):
        return self._output_width * self._output_height * self.kernel_count

    def set_padding(self, px, py=None):
        padding = (px, px if py is None else py)
        if min(padding) < 0:
            raise error.StructureError("Padding must not be negative")
        self._output_width, self._output_height = self._output_geometry(
            self._width, self._height, padding, self._stride)
        self._padding = padding
        self._update_output_size()

    def set_stride(self, sx, sy=None):
        stride = (sx, sx if sy is None else sy)
        if min(stride) < 1:
            raise error.StructureError("Stride must be positive")
        self._output_width, self._output_height = self._output_geometry(
            self._width, self._height, self._padding, stride)
        self._stride = stride
        self._update_output_size()

    def set_interlaced(self, interlaced):
        self._input_interlaced = interlaced
        self._kernels_interlaced = interlaced
        self._output_interlaced = interlaced

    def set_input_interlaced(self, interlaced):
        self._input_interlaced = interlaced

    def set_kernels_interlaced(self, interlaced):
        self._kernels_interlaced = interlaced

    def set_output_interlaced(self, interlaced):
        self._output_interlaced = interlaced

    def add_kernel(self, rand=None):
        self.add_kernels(1, rand)

    def add_kernels(self, count, rand=None):
        if count == 0:
            return
        kernels, bias = self._init_kernels(
            count, self._kernel_size(self._channels), rand)
        self._kernels = numpy.concatenate((self._kernels, kernels))
        self._bias = numpy.concatenate((self._bias, bias))
        self._update_output_size()

    def drop_connect(self, rand, probability):
        mask = prng.xget(rand).uniform(size=self._kernels.shape)
        self._kernels[mask < probability] = 0

    def resize_inputs(self, upstream, rand=None):
        """Adopts the output geometry and channel layout of a convolutional
        or pooling layer; other layers must match the current number of
        inputs.
        """
        if not hasattr(upstream, "output_width"):
            self.resize(upstream.outputs, self.outputs, rand)
            return
        width = upstream.output_width
        height = upstream.output_height
        channels = upstream.output_channels
        geometry = self._output_geometry(width, height, self._padding,
                                         self._stride)
        if channels != self._channels:
            self._kernels, self._bias = self._init_kernels(
                self.kernel_count, self._kernel_size(channels), rand)
        self._width, self._height, self._channels = width, height, channels
        self._input_interlaced = getattr(upstream, "output_interlaced", True)
        self._output_width, self._output_height = geometry
        self._update_output_size()

    def _input_image(self, data, **kwargs):
        return Image(data, self._width, self._height, self._channels,
                     self._input_interlaced, **kwargs)

    def _kernel_image(self, data, **kwargs):
        return Image(data, self._kernel_width, self._kernel_height,
                     self._channels, self._kernels_interlaced, **kwargs)

    def _output_image(self, data, channel, **kwargs):
        return Image(data, self._output_width, self._output_height,
                     self.kernel_count, self._output_interlaced, dz=channel,
                     **kwargs)

    def _channel_indices(self, data, channel):
        """Returns the indices of the output channel values in data.
        """
        ys, xs = numpy.mgrid[:self._output_height, :self._output_width]
        return self._output_image(data, channel).indices(xs, ys)[0].ravel()

    def _feed_forward(self, inp):
        self._activation[:] = 0
        px, py = self._padding
        sx, sy = self._stride
        image = self._input_image(inp, px=px, py=py, sx=sx, sy=sy)
        for co in range(self.kernel_count):
            convolve(image, self._kernel_image(self._kernels[co]),
                     self._output_image(self._activation, co),
                     self._channels)
            self._activation[self._channel_indices(self._activation, co)] \
                += self._bias[co]

    def back_prop_error(self, upstream):
        self._check_upstream(upstream)
        upstream.error[:] = 0
        sx, sy = self._stride
        for c in range(self._channels):
            up_err = self._input_image(upstream.error, dz=c)
            for co in range(self.kernel_count):
                convolve_full(
                    self._output_image(self._error, co, sx=sx, sy=sy),
                    self._kernel_image(self._kernels[co], dz=c), up_err, 1,
                    *self._padding)

    def update_deltas(self, upstream_activation, deltas):
        inp = self._check_input(upstream_activation)
        d_kernels, d_bias = self._delta_views(deltas)
        px, py = self._padding
        sx, sy = self._stride
        for co in range(self.kernel_count):
            err = self._output_image(self._error, co, sx=sx, sy=sy,
                                     invert_stride=True)
            for c in range(self._channels):
                convolve(self._input_image(inp, dz=c, px=px, py=py), err,
                         self._kernel_image(d_kernels[co], dz=c))
            d_bias[co] += self._error[
                self._channel_indices(self._error, co)].sum()

    def serialize(self):
        return formats.make_node(
            self.TYPE, width=self._width, height=self._height,
            channels=self._channels, kernel_width=self._kernel_width,
            kernel_height=self._kernel_height, padding=list(self._padding),
            stride=list(self._stride),
            input_interlaced=self._input_interlaced,
            kernels_interlaced=self._kernels_interlaced,
            output_interlaced=self._output_interlaced,
            kernels=self._kernels, bias=self._bias)

    @classmethod
    def deserialize(cls, node):
        cls._check_type(node)
        padding = formats.read_vector(node, "padding", 2).astype(int)
        stride = formats.read_vector(node, "stride", 2).astype(int)
        layer = cls(formats.read_int(node, "width"),
                    formats.read_int(node, "height"),
                    formats.read_int(node, "channels"),
                    formats.read_int(node, "kernel_width", 1),
                    formats.read_int(node, "kernel_height", 1))
        try:
            layer.set_padding(*padding)
            layer.set_stride(*stride)
        except error.StructureError as e:
            raise error.BadFormatError(str(e)) from None
        layer.set_input_interlaced(formats.read_bool(node, "input_interlaced"))
        layer.set_kernels_interlaced(
            formats.read_bool(node, "kernels_interlaced"))
        layer.set_output_interlaced(
            formats.read_bool(node, "output_interlaced"))
        bias = formats.read_vector(node, "bias")
        layer._kernels = formats.read_matrix(
            node, "kernels", bias.size, layer._kernel_size(layer._channels))
        layer._bias = bias
        layer._update_output_size()
        return layer

    def __str__(self):
        return "[%s %dx%dx%d -> %dx%dx%d, kernel %dx%d]" % (
            self.TYPE, self._width, self._height, self._channels,
            self._output_width, self._output_height, self.kernel_count,
            self._kernel_width, self._kernel_height)
