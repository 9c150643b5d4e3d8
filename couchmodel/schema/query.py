# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

""" query the views of a document type.

Before the first query of a type the design document is synchronized. If
the store answers that the view doesn't exist (the design document may
have been deleted by another process) the design document is pushed again
and the query retried once, a second "not found" is final.
"""

import logging

from ..exceptions import ResourceError, ResourceNotFound, QueryFailed
from .sync import Synchronizer

__all__ = ['QueryOutcome', 'QueryDispatcher']

logger = logging.getLogger(__name__)


class QueryOutcome(object):
    """ result of one round trip to a view """

    OK = "ok"
    RECOVERABLE = "recoverable"
    PERMANENT = "permanent"

    __slots__ = ('status', 'rows', 'error')

    def __init__(self, status, rows=None, error=None):
        self.status = status
        self.rows = rows
        self.error = error

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.status)

    @classmethod
    def ok(cls, rows):
        return cls(cls.OK, rows=rows)

    @classmethod
    def recoverable(cls, error):
        return cls(cls.RECOVERABLE, error=error)

    @classmethod
    def permanent(cls, error):
        return cls(cls.PERMANENT, error=error)

    @property
    def is_ok(self):
        return self.status == self.OK

    @property
    def is_recoverable(self):
        return self.status == self.RECOVERABLE


class QueryDispatcher(object):

    max_retries = 1

    def __init__(self, registry, synchronizer=None):
        self.registry = registry
        if synchronizer is None:
            synchronizer = Synchronizer(registry)
        self.synchronizer = synchronizer

    def query(self, db, doc_type, view_name, hydrate=None, **options):
        """ query the view `view_name` of `doc_type`.

        @param db: database holding the documents
        @param hydrate: callable building a document from its id, used
            for each row unless raw results are asked
        @param options: view parameters. `raw=True` returns the rows,
            `reduce=True` implies `raw=True`. Other options are passed
            to the store.

        @return: list of rows or list of hydrated documents
        """
        options = dict(options)
        if options.get('reduce'):
            options['raw'] = True

        if not self.registry.is_fresh(doc_type):
            try:
                self.synchronizer.synchronize(db, doc_type)
            except ResourceError as e:
                logger.warning("can't synchronize the views of %s: %s",
                        doc_type, e)

        raw = options.pop('raw', False)
        path = "%s/%s" % (doc_type, view_name)

        outcome = self._dispatch(db, path, options)
        retries = 0
        while outcome.is_recoverable and retries < self.max_retries:
            retries += 1
            logger.debug("%s not found, pushing the views of %s again",
                    path, doc_type)
            self.synchronizer.synchronize(db, doc_type)
            outcome = self._dispatch(db, path, options)

        if outcome.is_recoverable:
            raise QueryFailed("view %s not found" % path,
                    view_name=path) from outcome.error
        elif not outcome.is_ok:
            raise outcome.error

        if raw or hydrate is None:
            return outcome.rows
        return [hydrate(row['id']) for row in outcome.rows]

    def _dispatch(self, db, path, options):
        logger.debug("query %s %s", path, options)
        results = db.view(path, **options)
        try:
            results.fetch()
        except ResourceNotFound as e:
            return QueryOutcome.recoverable(e)
        except ResourceError as e:
            return QueryOutcome.permanent(e)
        return QueryOutcome.ok(results.rows)
