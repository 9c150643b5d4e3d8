# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

""" in-memory design documents.

Every document class owns one design document, `_design/<doc_type>`,
holding all the views declared on the class. A `ViewRegistry` keeps these
design documents along with a freshness flag telling whether the design
document is known to be pushed to the store. Declaring a view always
clears the flag.
"""

from ..exceptions import ViewNotDeclared

__all__ = ['LANGUAGE', 'ViewDefinition', 'DesignDocument', 'ViewRegistry',
        'view_name_for', 'conventional_map', 'design_doc_id']

LANGUAGE = "javascript"

MAP_TEMPLATE = """function(doc) {
  if (doc['%(type_attr)s'] == '%(doc_type)s' && %(guard)s) {
    emit(%(emit)s, null);
  }
}"""


def design_doc_id(doc_type):
    return "_design/%s" % doc_type


def view_name_for(keys):
    """ `by_<key1>_and_<key2>...` """
    if not keys:
        raise ValueError("a view needs at least one key")
    return "by_%s" % "_and_".join(keys)


def conventional_map(doc_type, keys, type_attr='doc_type'):
    """ build the map function emitting `keys` for the documents of
    `doc_type`. Documents missing one of the keys aren't emitted. A
    single key is emitted as is, several keys as an array. """
    if not keys:
        raise ValueError("a view needs at least one key")
    doc_keys = ["doc['%s']" % k for k in keys]
    if len(doc_keys) == 1:
        emit = doc_keys[0]
    else:
        emit = "[%s]" % ", ".join(doc_keys)
    return MAP_TEMPLATE % {
        "type_attr": type_attr,
        "doc_type": doc_type,
        "guard": " && ".join(doc_keys),
        "emit": emit
    }


class ViewDefinition(object):
    """ map function and optional reduce function of a view """

    def __init__(self, map_fun, reduce_fun=None):
        self.map_fun = map_fun
        self.reduce_fun = reduce_fun

    def __repr__(self):
        return "<%s reduce=%s>" % (self.__class__.__name__,
                self.reduce_fun is not None)

    def __eq__(self, other):
        if not isinstance(other, ViewDefinition):
            return NotImplemented
        return self.to_json() == other.to_json()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    @property
    def has_reduce(self):
        return self.reduce_fun is not None

    def to_json(self):
        view = {"map": self.map_fun}
        if self.reduce_fun is not None:
            view["reduce"] = self.reduce_fun
        return view

    @classmethod
    def wrap(cls, data):
        return cls(data["map"], data.get("reduce"))


class DesignDocument(object):
    """ views of one document type """

    language = LANGUAGE

    def __init__(self, doc_type):
        self.doc_type = doc_type
        self.views = {}

    def __repr__(self):
        return "<%s %s %s>" % (self.__class__.__name__, self.id,
                sorted(self.views))

    @property
    def id(self):
        return design_doc_id(self.doc_type)

    def to_json(self):
        return {
            "_id": self.id,
            "language": self.language,
            "views": dict((name, view.to_json())
                for name, view in self.views.items())
        }


class _Entry(object):

    def __init__(self, doc_type):
        self.design = DesignDocument(doc_type)
        self.fresh = False


class ViewRegistry(object):
    """ design documents and freshness flags, keyed by document type.

    A registry is shared by all the document classes bound to it, the
    flag of a type is process wide as the design document on the store
    is itself shared.
    """

    def __init__(self):
        self._entries = {}

    def __contains__(self, doc_type):
        return doc_type in self._entries

    def _entry(self, doc_type):
        try:
            return self._entries[doc_type]
        except KeyError:
            entry = self._entries[doc_type] = _Entry(doc_type)
            return entry

    def design_doc(self, doc_type):
        """ return the design document of `doc_type`, created empty
        if nothing was declared yet """
        return self._entry(doc_type).design

    def declare(self, doc_type, view_name, definition):
        """ add or overwrite a view, the type is no longer fresh """
        if not isinstance(definition, ViewDefinition):
            raise TypeError("%r isn't a ViewDefinition" % definition)
        entry = self._entry(doc_type)
        entry.design.views[view_name] = definition
        entry.fresh = False

    def lookup(self, doc_type, view_name):
        """ return the definition of a view, raise ViewNotDeclared if the view
        isn't declared """
        try:
            return self._entries[doc_type].design.views[view_name]
        except KeyError:
            raise ViewNotDeclared("%s has no view %r" % (doc_type, view_name))

    def is_fresh(self, doc_type):
        return doc_type in self._entries and self._entries[doc_type].fresh

    def mark_fresh(self, doc_type):
        self._entry(doc_type).fresh = True

    def invalidate(self, doc_type):
        self._entry(doc_type).fresh = False
