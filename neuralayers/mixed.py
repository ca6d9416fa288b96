# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Composite layer which runs several layers side by side on consecutive
slices of the same input and concatenates their outputs.

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

from neuralayers.config import get_dtype
import neuralayers.error as error
import neuralayers.formats as formats
import neuralayers.nn_units as nn_units


@implementer(nn_units.ILayer)
class Mixed(nn_units.LayerBase):
    """Runs the components on consecutive slices of the input.

    Component k receives the inputs starting right after the inputs of
    component k - 1, its outputs are placed right after the outputs of
    component k - 1. The errors the components propagate upstream are
    summed.
    """
    MAPPING = {"mixed"}
    TYPE = "mixed"

    def __init__(self, components=tuple(), **kwargs):
        super(Mixed, self).__init__(**kwargs)
        self._components = []
        for component in components:
            self.add_component(component)

    def add_component(self, layer):
        self._components.append(layer)
        self._allocate_outputs(self.outputs)
        self.debug("Added %s, now %d -> %d", layer, self.inputs,
                   self.outputs)

    def component(self, index):
        return self._components[index]

    @property
    def components(self):
        return tuple(self._components)

    @property
    def inputs(self):
        return sum(c.inputs for c in self._components)

    @property
    def outputs(self):
        return sum(c.outputs for c in self._components)

    @property
    def net(self):
        if not self._components:
            return numpy.zeros(0, dtype=get_dtype())
        return numpy.concatenate([c.net for c in self._components])

    def _parameters(self):
        params = []
        for component in self._components:
            params.extend(component._parameters())
        return params

    def _slices(self):
        """Yields (component, input slice, output slice).
        """
        in_pos = out_pos = 0
        for component in self._components:
            yield (component, slice(in_pos, in_pos + component.inputs),
                   slice(out_pos, out_pos + component.outputs))
            in_pos += component.inputs
            out_pos += component.outputs

    def _scatter_error(self):
        if self._error.size != self.outputs:
            raise error.StructureError(
                "%s has %d outputs but the error holds %d values, run "
                "feed_forward() after resizing the components" %
                (self, self.outputs, self._error.size))
        for component, _, outs in self._slices():
            component.error[:] = self._error[outs]

    def _gather(self, buffer, name):
        for component, _, outs in self._slices():
            buffer[outs] = getattr(component, name)

    def resize(self, inputs, outputs, rand=None):
        if inputs != self.inputs or outputs != self.outputs:
            raise error.StructureError(
                "%s can not be resized to %s -> %s, resize the components "
                "instead" % (self, inputs, outputs))

    def _feed_forward(self, inp):
        if self._activation.size != self.outputs:
            # a component was resized after it had been added
            self._allocate_outputs(self.outputs)
        for component, ins, _ in self._slices():
            component.feed_forward(inp[ins])
        self._gather(self._activation, "activation")

    def deactivate_error(self):
        self._scatter_error()
        for component in self._components:
            component.deactivate_error()
        self._gather(self._error, "error")

    def back_prop_error(self, upstream):
        self._check_upstream(upstream)
        self._scatter_error()
        upstream.error[:] = 0
        for component, ins, _ in self._slices():
            view = nn_units.Upstream(upstream.activation[ins])
            component.back_prop_error(view)
            upstream.error[ins] += view.error

    def update_deltas(self, upstream_activation, deltas):
        inp = self._check_input(upstream_activation)
        self._check_vector(deltas, "deltas")
        self._scatter_error()
        pos = 0
        for component, ins, _ in self._slices():
            count = component.count_weights()
            component.update_deltas(inp[ins], deltas[pos:pos + count])
            pos += count

    def reset_weights(self, rand=None):
        for component in self._components:
            component.reset_weights(rand)

    def perturb_weights(self, rand, deviation, start=0, count=None):
        stop = self.outputs if count is None else start + count
        if start < 0 or stop < start or stop > self.outputs:
            raise error.StructureError(
                "Units range [%d, %d) is out of [0, %d)" %
                (start, stop, self.outputs))
        for component, _, outs in self._slices():
            first = max(start, outs.start)
            last = min(stop, outs.stop)
            if (first, last) == (outs.start, outs.stop):
                component.perturb_weights(rand, deviation)
            elif first < last:
                component.perturb_weights(rand, deviation,
                                          first - outs.start, last - first)

    def max_norm(self, min_value, max_value):
        for component in self._components:
            component.max_norm(min_value, max_value)

    def drop_out(self, rand, probability):
        for component in self._components:
            component.drop_out(rand, probability)
        self._gather(self._activation, "activation")

    def drop_connect(self, rand, probability):
        for component in self._components:
            component.drop_connect(rand, probability)

    def copy_weights(self, source):
        if type(source) is not type(self) or \
                len(source.components) != len(self._components):
            raise error.StructureError(
                "Can not copy the weights of %s into %s" % (source, self))
        for mine, theirs in zip(self._components, source.components):
            mine.copy_weights(theirs)

    def serialize(self):
        return formats.make_node(
            self.TYPE, components=[c.serialize() for c in self._components])

    @classmethod
    def deserialize(cls, node):
        from neuralayers.serialization import deserialize

        if formats.read_type(node) != cls.TYPE:
            raise error.BadFormatError("%s can not load \"%s\"" %
                                       (cls.__name__, node["type"]))
        return cls([deserialize(child)
                    for child in formats.read_list(node, "components")])

    def __str__(self):
        return "[%s %d -> %d: %s]" % (
            self.TYPE, self.inputs, self.outputs,
            ", ".join(str(c) for c in self._components))
