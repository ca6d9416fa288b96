# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Global configuration tree. Any attribute of :class:`Config` which does not
exist yet is created as an empty subtree on the first access, so
``root.common.weights.min_magnitude = 0.03`` just works.

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


class Config(object):
    """Config tree node.
    """

    def __init__(self, path):
        self.__dict__["_path"] = path

    def __getattr__(self, name):
        if name.startswith("__"):
            raise AttributeError(name)
        child = Config("%s.%s" % (self._path, name))
        self.__dict__[name] = child
        return child

    def __setattr__(self, name, value):
        if isinstance(value, dict):
            getattr(self, name).update(value)
        else:
            self.__dict__[name] = value

    def __repr__(self):
        return "<Config %s: %s>" % (self._path, self.__content__)

    @property
    def __content__(self):
        return {k: v for k, v in self.__dict__.items()
                if not k.startswith("_")}

    def update(self, value):
        """Recursively merges the dictionary into this subtree.
        """
        if not isinstance(value, dict):
            raise TypeError("Config.update() accepts only dicts, got %s" %
                            type(value))
        for key, val in value.items():
            setattr(self, key, val)
        return self

    def get(self, name, default=None):
        """Returns the leaf value or default if it was never assigned.
        """
        value = self.__dict__.get(name)
        if value is None or isinstance(value, Config):
            return default
        return value


root = Config("root")

root.common.update({
    "precision_type": "double",
    "activation": "tanh",
    "random_seed": 1234,
    "weights": {
        "min_magnitude": 0.03,
        "norm_epsilon": 1.0e-12,
    },
})


dtypes = {"float": numpy.float32, "double": numpy.float64}


def get_dtype():
    """Returns numpy dtype for the layer buffers.
    """
    return dtypes[root.common.precision_type]
