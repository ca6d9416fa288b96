# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Image views over flat vectors and the convolution routines built on them.

An :class:`Image` never owns its data: it maps (x, y, channel) to an index
in a 1-D numpy array through an offset, zero padding, stride (optionally
inverted, which inserts zeros between the values) and a 180 degree flip.
The views are immutable; use ``_replace()`` to derive another view of the
same buffer. The forward convolution, its weight gradient and the
transposed convolution of the backward pass all reduce to
:func:`filter_sum` over different views.

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


from collections import namedtuple
import numpy


class Image(namedtuple("Image", (
        "data", "width", "height", "channels", "interlaced", "dx", "dy",
        "dz", "px", "py", "sx", "sy", "invert_stride", "flip"))):
    """View of data as a width x height x channels image.

    Attributes:
        data: 1-D numpy array.
        interlaced: the channels of a pixel are adjacent
                    ((y * width + x) * channels + z), otherwise the
                    channels are separate planes ((z * height + y) * width
                    + x).
        dx, dy, dz: offset.
        px, py: zero padding around the image.
        sx, sy: stride.
        invert_stride: insert sx - 1 (sy - 1) zeros between the values
                       instead of skipping them.
        flip: rotate the image by 180 degrees.
    """
    __slots__ = ()

    def __new__(cls, data, width, height, channels=1, interlaced=True,
                dx=0, dy=0, dz=0, px=0, py=0, sx=1, sy=1,
                invert_stride=False, flip=False):
        return super(Image, cls).__new__(
            cls, data, width, height, channels, interlaced, dx, dy, dz,
            px, py, sx, sy, invert_stride, flip)

    @property
    def view_width(self):
        width = self.width
        if self.invert_stride:
            width = (width - 1) * self.sx + 1
        return width + 2 * self.px

    @property
    def view_height(self):
        height = self.height
        if self.invert_stride:
            height = (height - 1) * self.sy + 1
        return height + 2 * self.py

    def indices(self, x, y, z=0):
        """Maps view coordinates (scalars or broadcastable arrays) to the
        indices in data. Returns (indices, valid); indices of invalid
        (padding or stride gap) positions are 0.
        """
        z += self.dz
        if z < 0 or z >= self.channels:
            raise IndexError("Channel %d is out of [0, %d)" %
                             (z, self.channels))
        x, y = numpy.broadcast_arrays(numpy.asarray(x) + self.dx - self.px,
                                      numpy.asarray(y) + self.dy - self.py)
        valid = numpy.ones(x.shape, dtype=bool)
        if self.invert_stride:
            valid &= (x % self.sx == 0) & (y % self.sy == 0)
            x = x // self.sx
            y = y // self.sy
        valid &= (x >= 0) & (x < self.width) & (y >= 0) & (y < self.height)
        if self.flip:
            x = self.width - 1 - x
            y = self.height - 1 - y
        if self.interlaced:
            idx = (y * self.width + x) * self.channels + z
        else:
            idx = (z * self.height + y) * self.width + x
        return numpy.where(valid, idx, 0), valid

    def read(self, x, y, z=0):
        idx, valid = self.indices(x, y, z)
        return self.data[idx] if valid else 0.0

    def add(self, x, y, z, value):
        idx, valid = self.indices(x, y, z)
        if not valid:
            raise IndexError("(%d, %d) is outside of %s" % (x, y, self))
        self.data[idx] += value

    def patch(self, width, height, x=0, y=0, z=0):
        """Returns the height x width array of values starting at (x, y).
        """
        ys, xs = numpy.mgrid[y:y + height, x:x + width]
        idx, valid = self.indices(xs, ys, z)
        return numpy.where(valid, self.data[idx], 0)

    def __repr__(self):
        return "<Image %dx%dx%d at (%d, %d, %d) pad %dx%d stride %dx%d%s%s>" \
            % (self.width, self.height, self.channels, self.dx, self.dy,
               self.dz, self.px, self.py, self.sx, self.sy,
               " inverted" if self.invert_stride else "",
               " flipped" if self.flip else "")


def filter_sum(inp, filt, x, y, channels=1):
    """Returns the sum of the products of filt and the window of inp at
    (x, y) over the first channels channels.
    """
    width = filt.view_width
    height = filt.view_height
    return sum(
        numpy.sum(inp.patch(width, height, x, y, z) *
                  filt.patch(width, height, 0, 0, z))
        for z in range(channels))


def convolve(inp, filt, out, channels=1):
    """Adds the valid correlation of inp with filt to out. The window moves
    by the stride of inp unless it is inverted.
    """
    step_x = 1 if inp.invert_stride else inp.sx
    step_y = 1 if inp.invert_stride else inp.sy
    for y in range(out.height):
        for x in range(out.width):
            out.add(x, y, 0,
                    filter_sum(inp, filt, x * step_x, y * step_y, channels))


def convolve_full(inp, filt, out, channels=1, pad_x=0, pad_y=0):
    """Adds the full convolution of inp (typically the error, with its
    stride inverted) with filt to out: the transposed operation of
    :func:`convolve`. pad_x and pad_y are the padding of the forward pass.
    """
    inp = inp._replace(px=filt.width - 1, py=filt.height - 1,
                       invert_stride=True)
    filt = filt._replace(flip=True)
    for y in range(out.height):
        for x in range(out.width):
            out.add(x, y, 0,
                    filter_sum(inp, filt, x + pad_x, y + pad_y, channels))
