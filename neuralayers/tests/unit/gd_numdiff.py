# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Helper class for numeric differentiation tests.

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

from neuralayers.nn_units import Upstream


class NumDiff(object):
    """Five-point numeric derivative.

    Attributes:
        points: the offsets of the argument.
        errs: the function values at the points, filled by the caller.
    """

    def __init__(self, h=1.0e-4):
        self.h = h
        self.points = (2.0 * h, h, -h, -2.0 * h)
        self.errs = numpy.zeros(len(self.points))

    @property
    def derivative(self):
        return (self.errs[3] - self.errs[0] +
                (self.errs[1] - self.errs[2]) * 8) / (12 * self.h)


class GDNumDiff(object):
    """Checks update_deltas() and back_prop_error() of a layer against the
    numeric derivatives of the error function of its activation.

    WARNING: it is invalid for single precision float data type.
    """

    @staticmethod
    def sse(y, t):
        return numpy.square(y - t).sum() * 0.5

    @staticmethod
    def _backward(layer, inp, target):
        layer.feed_forward(inp)
        layer.error[:] = target - layer.activation
        layer.deactivate_error()

    def numdiff_check_weights(self, layer, inp, target, logging_info,
                              assertLess, error_function=None, limit=None,
                              threshold=1.0e-6):
        """The deltas hold the negative gradient, so deltas + numeric
        derivative must be zero.
        """
        error_function = error_function or GDNumDiff.sse
        weights = numpy.zeros(layer.count_weights())
        layer.weights_to_vector(weights)
        GDNumDiff._backward(layer, inp, target)
        deltas = numpy.zeros_like(weights)
        layer.update_deltas(inp, deltas)

        numdiff = NumDiff()
        for offs in range(weights.size):
            for i, p in enumerate(numdiff.points):
                shifted = weights.copy()
                shifted[offs] += p
                layer.vector_to_weights(shifted)
                layer.feed_forward(inp)
                numdiff.errs[i] = error_function(layer.activation, target)
            derivative = numdiff.derivative
            d = numpy.fabs(derivative + deltas[offs])
            logging_info("%.2e %.2e %.2e", derivative, -deltas[offs], d)
            assertLess(d, threshold, "Numeric diff test failed at weight %d"
                       % offs)
            if limit is not None and offs >= limit - 1:
                logging_info("Limit of %d checks reached, skipping the rest",
                             limit)
                break
        layer.vector_to_weights(weights)

    def numdiff_check_input(self, layer, inp, target, logging_info,
                            assertLess, error_function=None,
                            threshold=1.0e-6):
        """The upstream error holds the negative gradient with respect to
        the input.
        """
        error_function = error_function or GDNumDiff.sse
        inp = numpy.array(inp)
        GDNumDiff._backward(layer, inp, target)
        upstream = Upstream(inp)
        layer.back_prop_error(upstream)

        numdiff = NumDiff()
        for offs in range(inp.size):
            for i, p in enumerate(numdiff.points):
                shifted = inp.copy()
                shifted[offs] += p
                layer.feed_forward(shifted)
                numdiff.errs[i] = error_function(layer.activation, target)
            derivative = numdiff.derivative
            d = numpy.fabs(derivative + upstream.error[offs])
            logging_info("%.2e %.2e %.2e", derivative, -upstream.error[offs],
                         d)
            assertLess(d, threshold, "Numeric diff test failed at input %d"
                       % offs)

    def numdiff_check_gd(self, layer, inp, target, logging_info, assertLess,
                         error_function=None, limit=None, threshold=1.0e-6):
        """Tests all derivatives of a typical layer.
        """
        logging_info("Checking weights via numeric differentiation on %s",
                     layer.__class__.__name__)
        self.numdiff_check_weights(layer, inp, target, logging_info,
                                   assertLess, error_function, limit,
                                   threshold)
        logging_info("Checking input via numeric differentiation on %s",
                     layer.__class__.__name__)
        self.numdiff_check_input(layer, inp, target, logging_info,
                                 assertLess, error_function, threshold)
