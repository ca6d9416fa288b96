# -*- coding: utf-8 -*-
"""
Created on Oct 17, 2026

Logging mixin shared by all the layers.

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


import logging


class Logger(object):
    """Provides logging facilities to derived classes.

    Attributes:
        logger: logging.Logger named after the class.
    """

    def __init__(self, **kwargs):
        self._logger_ = kwargs.get(
            "logger", logging.getLogger(self.__class__.__name__))
        super(Logger, self).__init__()

    @property
    def logger(self):
        logger = getattr(self, "_logger_", None)
        if logger is None:
            logger = logging.getLogger(self.__class__.__name__)
            self._logger_ = logger
        return logger

    def change_log_level(self, level):
        self.logger.setLevel(level)

    def log(self, level, msg, *args, **kwargs):
        self.logger.log(level, msg, *args, **kwargs)

    def debug(self, msg, *args, **kwargs):
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        self.logger.warning(msg, *args, **kwargs)

    # no error() here, layers use that name for their error buffer
    def exception(self, msg="Exception", *args, **kwargs):
        self.logger.exception(msg, *args, **kwargs)
