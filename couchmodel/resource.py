# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

"""
couchmodel.resource
~~~~~~~~~~~~~~~~~~~

This module provides a common interface for all CouchDB requests. HTTP
requests are made with a :mod:`requests` session shared by a resource and
all the resources cloned or derived from it.

Example:

    >>> resource = CouchdbResource()
    >>> info = resource.get().json_body
    >>> info['couchdb']
    'Welcome'

"""
import logging

import requests

from .version import __version__
from .exceptions import ResourceNotFound, ResourceConflict, \
PreconditionFailed, RequestFailed, RequestError
from .utils import json, url_quote

USER_AGENT = 'couchmodel/%s' % __version__

logger = logging.getLogger(__name__)


class CouchDBResponse(object):
    """ thin wrapper around a `requests.Response` """

    def __init__(self, response):
        self.response = response

    @property
    def status_int(self):
        return self.response.status_code

    @property
    def headers(self):
        return self.response.headers

    def body_string(self):
        return self.response.text

    @property
    def json_body(self):
        body = self.body_string()

        # try to decode json
        try:
            return json.loads(body)
        except ValueError:
            return body


class CouchdbResource(object):

    def __init__(self, uri="http://127.0.0.1:5984", session=None,
            timeout=None, auth=None, headers=None):
        """Constructor for a `CouchdbResource` object.

        CouchdbResource represent an HTTP resource to CouchDB.

        @param uri: str, full uri to the server.
        @param session: `requests.Session`, created if not given.
        @param timeout: float, seconds before giving up a request.
        @param auth: anything `requests` accepts as auth.
        @param headers: dict, headers sent with every request.
        """
        self.uri = uri.rstrip('/')
        if session is None:
            session = requests.Session()
        if auth is not None:
            session.auth = auth
        self.session = session
        self.timeout = timeout
        self.headers = headers or {}

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.uri)

    def clone(self):
        """ return a resource on the same uri sharing the session """
        return self.__class__(self.uri, session=self.session,
                timeout=self.timeout, headers=self.headers.copy())

    def __call__(self, path):
        """ return a new resource for `path` below this one """
        res = self.clone()
        res.uri = make_uri(self.uri, path)
        return res

    def get(self, path=None, headers=None, **params):
        return self.request('GET', path=path, headers=headers, **params)

    def head(self, path=None, headers=None, **params):
        return self.request('HEAD', path=path, headers=headers, **params)

    def delete(self, path=None, headers=None, **params):
        return self.request('DELETE', path=path, headers=headers, **params)

    def post(self, path=None, payload=None, headers=None, **params):
        return self.request('POST', path=path, payload=payload,
                headers=headers, **params)

    def put(self, path=None, payload=None, headers=None, **params):
        return self.request('PUT', path=path, payload=payload,
                headers=headers, **params)

    def request(self, method, path=None, payload=None, headers=None, **params):
        """ Perform HTTP call to the couchdb server and manage
        JSON conversions, support GET, HEAD, POST, PUT and DELETE.

        Usage example, get infos of a couchdb server on
        http://127.0.0.1:5984 :


            from couchmodel.resource import CouchdbResource
            resource = CouchdbResource()
            infos = resource.request('GET').json_body

        @param method: str, the HTTP action to be performed:
            'GET', 'HEAD', 'POST', 'PUT', or 'DELETE'
        @param path: str, path to add to the uri
        @param payload: str or any object that could be
            converted to JSON.
        @param headers: dict, optional headers that will
            be added to HTTP request.
        @param params: Optional parameters added to the request.
            Parameters are for example the parameters for a view. See
            `CouchDB View API reference
            <http://wiki.apache.org/couchdb/HTTP_view_API>`_ for example.

        @return: `CouchDBResponse` instance
        """
        _headers = self.headers.copy()
        _headers.update(headers or {})
        _headers.setdefault('Accept', 'application/json')
        _headers.setdefault('User-Agent', USER_AGENT)

        if payload is not None:
            if not hasattr(payload, 'read') and \
                    not isinstance(payload, (str, bytes)):
                payload = json.dumps(payload).encode('utf-8')
                _headers.setdefault('Content-Type', 'application/json')

        uri = make_uri(self.uri, path)
        params = encode_params(params)
        logger.debug("%s %s %s", method, uri, params)
        try:
            resp = self.session.request(method, uri, data=payload,
                    headers=_headers, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise RequestError(str(e))

        if resp.status_code >= 400:
            raise make_error(resp)
        return CouchDBResponse(resp)


def make_error(resp):
    """ build the exception matching an error response """
    msg = resp.text
    if resp.headers.get('content-type', '').startswith('application/json'):
        try:
            msg = json.loads(msg)
        except ValueError:
            pass

    if type(msg) is dict:
        error = msg.get('reason') or msg.get('error')
    else:
        error = msg

    response = CouchDBResponse(resp)
    if resp.status_code == 404:
        return ResourceNotFound(error, http_code=404, response=response)
    elif resp.status_code == 409:
        return ResourceConflict(error, http_code=409, response=response)
    elif resp.status_code == 412:
        return PreconditionFailed(error, http_code=412, response=response)
    return RequestFailed(error, http_code=resp.status_code,
            response=response)


def make_uri(base, path=None):
    if not path:
        return base
    return "%s/%s" % (base.rstrip('/'), path.lstrip('/'))


def encode_params(params):
    """ encode parameters in json if needed """
    _params = {}
    if params:
        for name, value in params.items():
            if name in ('key', 'startkey', 'endkey'):
                value = json.dumps(value)
            elif value is None:
                continue
            elif not isinstance(value, str):
                value = json.dumps(value)
            _params[name] = value
    return _params


def escape_docid(docid):
    if docid.startswith('/'):
        docid = docid[1:]
    if docid.startswith('_design'):
        docid = '_design/%s' % url_quote(docid[8:], safe='')
    else:
        docid = url_quote(docid, safe='')
    return docid
