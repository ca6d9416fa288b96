# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Classes for custom exceptions raised by the layers.

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


class LayerError(Exception):
    """Base class for all the errors raised by neuralayers.
    """
    pass


class StructureError(LayerError, ValueError):
    """Raised when the requested shape or configuration is structurally
    impossible for the layer (incompatible resize, indivisible pooling
    region, mismatched component widths, etc.).
    """
    pass


class BadFormatError(LayerError):
    """Raised when a serialized node is malformed: unknown type tag, missing
    field, wrong field type or mismatched shape.
    """
    pass


class UnsupportedOperationError(LayerError, NotImplementedError):
    """Raised when an operation of the layer contract is not defined for
    the concrete layer.
    """
    pass


class AlreadyExistsError(LayerError):
    """Raised when something already exists (e.g., a type tag is
    registered twice).
    """
    pass


class NotExistsError(LayerError, KeyError):
    """Raised when something does not exist.
    """
    pass
