# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Activation functions (:class:`ActivationBase` descendants) used by the layers
with parameters.

Each activation is a stateless strategy: :meth:`ActivationBase.squash`
computes the activation from the net and
:meth:`ActivationBase.deactivate` transforms the error with respect to the
activation into the error with respect to the net. Being stateless, a single
instance can be shared between any number of layers.

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
from scipy.special import expit

from neuralayers.config import root
import neuralayers.error as error


class ActivationBase(object):
    """Base class for the activation functions.

    Attributes:
        NAME: the name used for lookups and serialization.
    """
    NAME = None

    def squash(self, net):
        raise NotImplementedError()

    def derivative(self, net, activation):
        """Returns f'(net). Either argument may be used, activation is
        always squash(net).
        """
        raise NotImplementedError()

    def deactivate(self, net, activation, err):
        """Returns err multiplied by the derivative of the activation.
        """
        return err * self.derivative(net, activation)

    def __eq__(self, other):
        return type(self) is type(other)

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(type(self))

    def __repr__(self):
        return "<%s>" % self.NAME


class ActivationIdentity(ActivationBase):
    """f(x) = x.
    """
    NAME = "identity"

    def squash(self, net):
        return net.copy()

    def derivative(self, net, activation):
        return numpy.ones_like(net)

    def deactivate(self, net, activation, err):
        return err.copy()


class ActivationTanh(ActivationBase):
    """f(x) = tanh(x).
    """
    NAME = "tanh"

    def squash(self, net):
        return numpy.tanh(net)

    def derivative(self, net, activation):
        return 1.0 - activation * activation


class ActivationScaledTanh(ActivationBase):
    """f(x) = 1.7159 * tanh(0.6666 * x).
    """
    NAME = "scaled_tanh"
    A = 1.7159
    B = 0.6666

    def squash(self, net):
        return numpy.tanh(net * self.B) * self.A

    def derivative(self, net, activation):
        t = activation / self.A
        return (1.0 - t * t) * (self.A * self.B)


class ActivationLogistic(ActivationBase):
    """f(x) = 1 / (1 + exp(-x)).
    """
    NAME = "logistic"

    def squash(self, net):
        return expit(net)

    def derivative(self, net, activation):
        return activation * (1.0 - activation)


class ActivationRELU(ActivationBase):
    """f(x) = max(x, 0).
    """
    NAME = "relu"

    def squash(self, net):
        return numpy.clip(net, 0.0, None)

    def derivative(self, net, activation):
        return (net > 0).astype(net.dtype)


class ActivationSoftPlus(ActivationBase):
    """f(x) = log(1.0 + exp(x)) (smooth RELU).
    """
    NAME = "softplus"

    def squash(self, net):
        return numpy.logaddexp(0.0, net)

    def derivative(self, net, activation):
        return expit(net)


class ActivationSoftmax(ActivationBase):
    """Softmax normalization of the whole vector. The maximum is subtracted
    before the exponentiation to avoid overflows.
    """
    NAME = "softmax"

    def squash(self, net):
        if net.size == 0:
            return net.copy()
        act = numpy.exp(net - net.max())
        act /= act.sum()
        return act

    def derivative(self, net, activation):
        # diagonal of the Jacobian only, deactivate() uses the full one
        return activation * (1.0 - activation)

    def deactivate(self, net, activation, err):
        return activation * (err - numpy.dot(err, activation))


def _all_subclasses(cls):
    for sub in cls.__subclasses__():
        yield sub
        for subsub in _all_subclasses(sub):
            yield subsub


def names():
    return sorted(cls.NAME for cls in _all_subclasses(ActivationBase)
                  if cls.NAME is not None)


def get(name=None):
    """Returns a new activation object by its name. If name is None,
    root.common.activation is used. Activation objects are passed through.
    """
    if isinstance(name, ActivationBase):
        return name
    if name is None:
        name = root.common.activation
    for cls in _all_subclasses(ActivationBase):
        if cls.NAME == name:
            return cls()
    raise error.NotExistsError(
        "Unknown activation function \"%s\" (known: %s)" %
        (name, ", ".join(names())))
