# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Loading layers from nodes by their type tag and storing the nodes as JSON.

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


import json
import logging

# the layer modules register their type tags on import
import neuralayers.all2all  # pylint: disable=W0611
import neuralayers.conv  # pylint: disable=W0611
import neuralayers.maxout  # pylint: disable=W0611
import neuralayers.mixed  # pylint: disable=W0611
import neuralayers.pooling  # pylint: disable=W0611
import neuralayers.rbm_units  # pylint: disable=W0611
import neuralayers.error as error
import neuralayers.formats as formats
from neuralayers.nn_units import LayerRegistry


logger = logging.getLogger("Serialization")


def registered_types():
    return sorted(LayerRegistry.mapping)


def deserialize(node):
    """Creates the layer from the node, dispatching on its "type" field.
    """
    tag = formats.read_type(node)
    try:
        cls = LayerRegistry.mapping[tag]
    except KeyError:
        raise error.BadFormatError(
            "Unknown layer type \"%s\" (known: %s)" %
            (tag, ", ".join(registered_types()))) from None
    layer = cls.deserialize(node)
    logger.debug("Loaded %s", layer)
    return layer


def dumps(layer, **kwargs):
    return json.dumps(layer.serialize(), **kwargs)


def loads(text):
    try:
        node = json.loads(text)
    except ValueError as e:
        raise error.BadFormatError("Invalid JSON: %s" % e) from None
    return deserialize(node)


def dump(layer, fout, **kwargs):
    json.dump(layer.serialize(), fout, **kwargs)


def load(fin):
    try:
        node = json.load(fin)
    except ValueError as e:
        raise error.BadFormatError("Invalid JSON: %s" % e) from None
    return deserialize(node)
