# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Serialized node format helpers and in-place numpy utilities.

A node is a plain dictionary with a ``"type"`` string and other named fields
of type int, float, bool, str or (nested) lists thereof. Readers validate
every field and raise :class:`neuralayers.error.BadFormatError` instead of
silently substituting defaults.

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


import numbers
import numpy

from neuralayers.config import get_dtype
import neuralayers.error as error


def assert_addr(a, b):
    """Raises an exception if addresses of the supplied arrays differ.
    """
    if a.__array_interface__["data"][0] != b.__array_interface__["data"][0]:
        raise error.StructureError("Addresses of the arrays are not equal.")


def reshape(a, shape):
    """numpy.reshape() with address check.
    """
    b = a.reshape(shape)
    assert_addr(a, b)
    return b


def _plain(value):
    if isinstance(value, numpy.ndarray):
        return value.tolist()
    if isinstance(value, numpy.generic):
        return value.item()
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def make_node(type_tag, **fields):
    """Creates a new node with the specified type tag and fields. numpy
    arrays are converted to (nested) lists.
    """
    node = {"type": type_tag}
    for key, value in fields.items():
        node[key] = _plain(value)
    return node


def _get(node, name):
    if not isinstance(node, dict):
        raise error.BadFormatError(
            "Expected a node (dict), got %s" % type(node).__name__)
    try:
        return node[name]
    except KeyError:
        raise error.BadFormatError(
            "Node of type \"%s\" has no field \"%s\"" %
            (node.get("type"), name)) from None


def read_type(node):
    tag = _get(node, "type")
    if not isinstance(tag, str):
        raise error.BadFormatError("\"type\" field must be a string, got %s" %
                                   type(tag).__name__)
    return tag


def read_int(node, name, minimum=0):
    value = _get(node, name)
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise error.BadFormatError("Field \"%s\" must be an integer, got %r" %
                                   (name, value))
    if minimum is not None and value < minimum:
        raise error.BadFormatError("Field \"%s\" must be >= %d, got %d" %
                                   (name, minimum, value))
    return int(value)


def read_bool(node, name):
    value = _get(node, name)
    if not isinstance(value, bool):
        raise error.BadFormatError("Field \"%s\" must be a boolean, got %r" %
                                   (name, value))
    return value


def read_str(node, name):
    value = _get(node, name)
    if not isinstance(value, str):
        raise error.BadFormatError("Field \"%s\" must be a string, got %r" %
                                   (name, value))
    return value


def read_list(node, name):
    value = _get(node, name)
    if not isinstance(value, list):
        raise error.BadFormatError("Field \"%s\" must be a list, got %s" %
                                   (name, type(value).__name__))
    return value


def _to_array(name, value, ndim):
    if not isinstance(value, list):
        raise error.BadFormatError("Field \"%s\" must be a list, got %s" %
                                   (name, type(value).__name__))
    if ndim == 2 and any(not isinstance(row, list) for row in value):
        raise error.BadFormatError(
            "Field \"%s\" must be a list of lists" % name)
    if ndim == 2 and len(set(len(row) for row in value)) > 1:
        raise error.BadFormatError(
            "Rows of the matrix \"%s\" have different lengths" % name)
    try:
        arr = numpy.array(value, dtype=get_dtype())
    except (TypeError, ValueError) as e:
        raise error.BadFormatError(
            "Field \"%s\" is not numeric: %s" % (name, e)) from None
    if ndim == 2 and arr.ndim == 1 and arr.size == 0:
        arr = arr.reshape(0, 0)
    if arr.ndim != ndim:
        raise error.BadFormatError(
            "Field \"%s\" must have %d dimension(s), got %d" %
            (name, ndim, arr.ndim))
    return arr


def read_vector(node, name, size=None):
    """Reads a 1-D array of floats; checks its size if it is not None.
    """
    arr = _to_array(name, _get(node, name), 1)
    if size is not None and arr.size != size:
        raise error.BadFormatError(
            "Vector \"%s\" must have %d elements, got %d" %
            (name, size, arr.size))
    return arr


def read_matrix(node, name, rows=None, cols=None):
    """Reads a 2-D array of floats; checks its shape against rows and
    cols if they are not None.
    """
    arr = _to_array(name, _get(node, name), 2)
    if arr.size == 0 and rows is not None and cols is not None and \
            rows * cols == 0:
        # [] and [[]] carry no shape
        return arr.reshape(rows, cols)
    if rows is not None and arr.shape[0] != rows:
        raise error.BadFormatError(
            "Matrix \"%s\" must have %d rows, got %d" %
            (name, rows, arr.shape[0]))
    if cols is not None and arr.shape[1] != cols:
        raise error.BadFormatError(
            "Matrix \"%s\" must have %d columns, got %d" %
            (name, cols, arr.shape[1]))
    return arr
