# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

import logging

from .version import version_info, __version__

from .resource import CouchdbResource
from .exceptions import ResourceError, RequestError, RequestFailed, \
ResourceNotFound, ResourceConflict, PreconditionFailed, \
DuplicatePropertyError, BadValueError, ReservedWordError, \
ConfigurationError, PersistenceFailure, ViewNotDeclared, QueryFailed

from .client import Server, Database, ViewResults

from .schema import JsonProperty, StringProperty, IntegerProperty, \
LongProperty, FloatProperty, Number, BooleanProperty, DecimalProperty, \
DateTimeProperty, DateProperty, TimeProperty, ListProperty, DictProperty, \
SetProperty, Hooks, hook, ViewDefinition, DesignDocument, ViewRegistry, \
Synchronizer, QueryDispatcher, QueryOutcome, ViewBy, DocumentBase, \
Document, default_registry, contain


LOG_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG
}

def set_logging(level, handler=None):
    """
    Set level of logging, and choose where to display/save logs
    (file or standard output).
    """
    if not handler:
        handler = logging.StreamHandler()

    loglevel = LOG_LEVELS.get(level, logging.INFO)
    logger = logging.getLogger('couchmodel')
    logger.setLevel(loglevel)
    format = r"%(asctime)s [%(process)d] [%(levelname)s] %(message)s"
    datefmt = r"%Y-%m-%d %H:%M:%S"

    handler.setFormatter(logging.Formatter(format, datefmt))
    logger.addHandler(handler)
