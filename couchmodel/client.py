# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

"""
Client implementation for CouchDB access: the document and view
operations the document classes rely on.

Example:

    >>> from couchmodel import Server
    >>> server = Server()
    >>> db = server.create_db('couchmodel_test')
    >>> doc = { 'string': 'test', 'number': 4 }
    >>> db.save_doc(doc)
    >>> doc2 = db.get(doc['_id'])
    >>> doc2['string']
    'test'
    >>> db.delete_doc(doc2)

"""

from collections import deque

from .exceptions import ResourceNotFound
from . import resource
from .utils import url_quote, validate_dbname


DEFAULT_UUID_BATCH_COUNT = 1000


class Server(object):
    """ Server object giving access to the databases of a couchdb node """

    resource_class = resource.CouchdbResource

    def __init__(self, uri='http://127.0.0.1:5984',
            uuid_batch_count=DEFAULT_UUID_BATCH_COUNT,
            resource_class=None, **client_opts):

        """ constructor for Server object

        @param uri: uri of CouchDb host
        @param uuid_batch_count: max of uuids to get in one time
        @param resource_class: class of the resource, `CouchdbResource`
            by default
        @param client_opts: passed to the resource class (session,
            timeout, auth, headers)
        """

        if not uri or uri is None:
            raise ValueError("Server uri is missing")

        if uri.endswith("/"):
            uri = uri[:-1]

        self.uri = uri
        self.uuid_batch_count = uuid_batch_count

        if resource_class is not None:
            self.resource_class = resource_class
        self.res = self.resource_class(uri, **client_opts)
        self._uuids = deque()

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.uri)

    def get_db(self, dbname, **params):
        """
        Try to return a Database object for dbname.

        """
        return Database(self._db_uri(dbname), server=self, **params)

    def create_db(self, dbname, **params):
        """ Create a database on CouchDb host unless it exists

        @param dname: str, name of db

        @return: Database instance
        """
        return self.get_db(dbname, create=True, **params)

    get_or_create_db = create_db

    def uuids(self, count=1):
        return self.res.get('/_uuids', count=count).json_body

    def next_uuid(self):
        """
        return an available uuid from the server, uuids are fetched
        in batches of `uuid_batch_count`
        """
        try:
            return self._uuids.pop()
        except IndexError:
            self._uuids.extend(
                    self.uuids(count=self.uuid_batch_count)["uuids"])
            return self._uuids.pop()

    def _db_uri(self, dbname):
        if dbname.startswith("/"):
            dbname = dbname[1:]

        dbname = url_quote(dbname, safe=":")
        return "/".join([self.uri, dbname])


class Database(object):
    """ Object that abstract access to a CouchDB database """

    def __init__(self, uri, create=False, server=None, **params):
        """Constructor for Database

        @param uri: str, Database uri
        @param create: boolean, False by default,
        if True try to create the database.
        @param server: Server instance

        """
        self.uri = uri
        self.server_uri, self.dbname = uri.rsplit("/", 1)

        if server is not None:
            if not hasattr(server, 'next_uuid'):
                raise TypeError('%s is not a couchmodel.Server instance' %
                            server.__class__.__name__)
            self.server = server
        else:
            self.server = server = Server(self.server_uri, **params)

        validate_dbname(self.dbname)
        if create:
            try:
                self.server.res.head('/%s/' % self.dbname)
            except ResourceNotFound:
                self.server.res.put('/%s/' % self.dbname)

        self.res = server.res(self.dbname)

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.dbname)

    def get(self, docid, wrapper=None, **params):
        """Get document from database

        @param docid: str, document id to retrieve
        @param wrapper: callable taking the document dict, its result
            is returned instead of the dict
        @param **params: See doc api for parameters to use:
        http://wiki.apache.org/couchdb/HTTP_Document_API

        @return: dict, representation of CouchDB document as
         a dict.
        """
        doc = self.res.get(resource.escape_docid(docid), **params).json_body
        if wrapper is not None:
            if not callable(wrapper):
                raise TypeError("wrapper isn't a callable")
            return wrapper(doc)
        return doc

    def save_doc(self, doc):
        """ Save a document. It will use the `_id` member of the document
        or request a new uuid from CouchDB. IDs are attached to
        documents on the client side because POST has the curious property of
        being automatically retried by proxies in the event of network
        segmentation and lost responses.

        @param doc: dict.  doc is updated
        with doc '_id' and '_rev' properties returned
        by CouchDB server when you save.

        @return res: result of save. doc is updated in the mean time
        """
        if '_id' not in doc:
            doc['_id'] = self.server.next_uuid()

        res = self.res.put(resource.escape_docid(doc['_id']),
                payload=doc).json_body
        doc.update({'_id': res['id'], '_rev': res['rev']})
        return res

    def delete_doc(self, doc):
        """ delete a document
        @param doc: dict with `_id` and `_rev`
        @return: dict like:

        .. code-block:: python

            {"ok":true,"rev":"2839830636"}
        """
        if '_id' not in doc or '_rev' not in doc:
            raise KeyError('_id and _rev are required to delete a doc')

        docid = resource.escape_docid(doc['_id'])
        result = self.res.delete(docid, rev=doc['_rev']).json_body
        if 'rev' in result:
            doc.update({
                "_rev": result['rev'],
                "_deleted": True
            })
        return result

    def view(self, view_name, **params):
        """ get view results from database. viewname is a string
        like `designname/viewname`. It returns a lazy ViewResults object.

        @param view_name, string 'designname/viewname'. A beginning slash
        is removed.
        @param params: params of the view

        """
        if view_name.startswith('/'):
            view_name = view_name[1:]
        dname, vname = view_name.split('/', 1)
        view_path = '_design/%s/_view/%s' % (dname, vname)
        return ViewResults(self, view_path, **params)


class ViewResults(object):
    """
    Object to retrieve view results. Rows are fetched once, on first
    access, or again with `fetch`.
    """

    def __init__(self, db, view_path, **params):
        """
        Constructor of ViewResults object

        @param db: Database the view belongs to
        @param view_path: path of the view in the database
        @param params: params to apply when fetching view.

        """
        self.db = db
        self.view_path = view_path
        self.params = params
        self._result_cache = None

    def fetch(self):
        """ fetch results and cache them """
        params = dict(self.params)
        if 'keys' in params:
            keys = params.pop('keys')
            response = self.db.res.post(self.view_path,
                    payload={'keys': keys}, **params)
        else:
            response = self.db.res.get(self.view_path, **params)
        self._result_cache = response.json_body

    def _fetch_if_needed(self):
        if self._result_cache is None:
            self.fetch()

    @property
    def rows(self):
        """ the raw rows """
        self._fetch_if_needed()
        return self._result_cache.get('rows', [])

    @property
    def total_rows(self):
        """ return number of total rows in the view """
        self._fetch_if_needed()
        # reduce case, count number of lines
        return self._result_cache.get('total_rows', len(self.rows))

    @property
    def offset(self):
        """ current position in the view """
        self._fetch_if_needed()
        return self._result_cache.get('offset', 0)

    def __iter__(self):
        return iter(self.rows)

    def __len__(self):
        return len(self.rows)
