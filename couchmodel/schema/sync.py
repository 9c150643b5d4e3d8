# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

""" push the in-memory design document of a type to the store """

import logging

from ..exceptions import ResourceError

__all__ = ['Synchronizer']

logger = logging.getLogger(__name__)


class Synchronizer(object):
    """ reconcile a registry with the design documents stored in a
    database.

    Views found on the store but not declared locally are kept: they may
    come from another process sharing the same document type. Last writer
    wins if two processes merge at the same time.
    """

    def __init__(self, registry):
        self.registry = registry

    def synchronize(self, db, doc_type):
        """ merge the local views of `doc_type` into the stored design
        document, or store the local design document if none can be
        fetched. The type is marked fresh once saved. Errors raised while
        saving propagate and leave the type stale. """
        design = self.registry.design_doc(doc_type)
        try:
            saved = db.get(design.id)
        except ResourceError as e:
            logger.debug("can't fetch %s (%s), pushing it", design.id, e)
            saved = None

        if saved is not None:
            views = saved.setdefault("views", {})
            should_save = False
            for name, view in design.views.items():
                view = view.to_json()
                if views.get(name) != view:
                    views[name] = view
                    should_save = True

            if should_save:
                logger.debug("merge %s into %s", sorted(design.views),
                        design.id)
                db.save_doc(saved)
            else:
                logger.debug("%s is up to date", design.id)
        else:
            db.save_doc(design.to_json())
            logger.debug("%s created", design.id)

        self.registry.mark_fresh(doc_type)
