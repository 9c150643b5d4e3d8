# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

"""
All exceptions used in couchmodel.
"""

# raised by the properties on bad or missing required values
from jsonobject.exceptions import BadValueError


class ResourceError(Exception):
    """ default error raised by the resource when the store answers
    with an HTTP error status """

    status_int = None

    def __init__(self, msg=None, http_code=None, response=None):
        self.msg = msg or ''
        self.response = response
        if http_code is not None:
            self.status_int = http_code
        Exception.__init__(self, self.msg)

    def __str__(self):
        if self.status_int is not None:
            return "%s (HTTP %s)" % (self.msg, self.status_int)
        return str(self.msg)


class RequestError(ResourceError):
    """ raised when the store can't be reached at all """


class RequestFailed(ResourceError):
    """ raised for any HTTP error status without a dedicated class """


class ResourceNotFound(ResourceError):
    """ Exception raised when resource is not found"""
    status_int = 404


class ResourceConflict(ResourceError):
    """ Exception raised when there is conflict while updating"""
    status_int = 409


class PreconditionFailed(ResourceError):
    """ Exception raised when 412 HTTP error is received in response
    to a request """
    status_int = 412


class DuplicatePropertyError(Exception):
    """ exception raised when there is a duplicate
    property in a model """


class ReservedWordError(Exception):
    """ exception raised when a reserved word
    is used in Document schema """


class ConfigurationError(Exception):
    """ raised when a document class is misconfigured, e.g. its
    unique id rule returned nothing """


class PersistenceFailure(Exception):
    """ raised when the store answered a save or delete without `ok`.
    The raw answer is kept in `result`. """

    def __init__(self, msg, result=None):
        self.result = result
        Exception.__init__(self, msg)


class ViewNotDeclared(KeyError):
    """ raised when querying a view name the document class never
    declared """


class QueryFailed(Exception):
    """ raised when a view is still missing on the store after the
    design document has been pushed again """

    def __init__(self, msg, view_name=None):
        self.view_name = view_name
        Exception.__init__(self, msg)
