# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

""" module that provides a Document object that allows you
to map CouchDB documents in Python. Documents are jsonobject objects:
declared properties, defaults, views and hooks add behaviour on top of
the json they wrap.
"""
import copy
import datetime
import functools

import jsonobject
from jsonobject.base_properties import JsonProperty
from jsonobject.exceptions import DeleteNotAllowed

from ..exceptions import ReservedWordError, DuplicatePropertyError, \
ConfigurationError, PersistenceFailure, ViewNotDeclared
from .design import ViewDefinition, ViewRegistry, conventional_map, \
view_name_for
from .hooks import Hooks, run_hooks
from .properties import DateTimeProperty
from .query import QueryDispatcher


__all__ = ['ReservedWordError', 'SchemaProperties', 'ViewBy',
        'DocumentBase', 'Document', 'default_registry']

_RESERVED_WORDS = ['_id', '_rev', 'doc_type', 'defaults', 'unique_id',
        'timestamps']

# class attributes configuring a document class, kept out of the
# properties jsonobject builds from plain values
_CONFIG_ATTRS = ('defaults', 'unique_id', 'timestamps')

default_registry = ViewRegistry()


def check_reserved_words(attr_name, bases):
    if attr_name in _RESERVED_WORDS:
        raise ReservedWordError(
            "Cannot define property using reserved word '%(attr_name)s'." %
            locals())
    for base in bases:
        attr = getattr(base, attr_name, None)
        if attr is not None and not isinstance(attr, JsonProperty):
            raise ReservedWordError(
                "Cannot define property using reserved word "
                "'%(attr_name)s'." % locals())


class ViewBy(object):
    """ declare a view on a document class::

        class Article(Document):
            by_date = ViewBy("date", descending=True)
            by_user_id_and_date = ViewBy("user_id", "date")
            by_tags = ViewBy("tags", map_fun=TAGS_MAP, reduce_fun=SUM)

    The view is named `by_<key1>_and_<key2>...`. Without `map_fun` the map
    function emits the keys of the documents of the class having all of
    them. Other keyword arguments are default query options, overridden at
    query time. Views with a reduce function are queried with
    `reduce=False` unless asked otherwise.

    On the class the attribute is the query function::

        Article.by_date(limit=10)
    """

    def __init__(self, *keys, map_fun=None, reduce_fun=None,
            **query_defaults):
        if not keys:
            raise ValueError("a view needs at least one key")
        if reduce_fun is not None and map_fun is None:
            raise ValueError("a reduce function needs a map function")
        self.keys = keys
        self.name = view_name_for(keys)
        self.map_fun = map_fun
        self.reduce_fun = reduce_fun
        self.query_defaults = query_defaults
        if reduce_fun is not None:
            self.query_defaults.setdefault('reduce', False)

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.name)

    def definition(self, document_class):
        """ view definition for `document_class` """
        if self.map_fun is not None:
            return ViewDefinition(self.map_fun, self.reduce_fun)
        return ViewDefinition(conventional_map(document_class._doc_type,
                self.keys))

    def __get__(self, document_instance, document_class):
        if document_instance is not None:
            raise AttributeError("views aren't accessible via %s instances"
                    % document_class.__name__)
        return functools.partial(document_class.query_view, self.name)


class SchemaProperties(jsonobject.JsonObjectMeta):
    """ collect the type name, configuration, views and hooks of a
    document class. Properties are collected by jsonobject. """

    def __new__(mcs, name, bases, dct):
        if isinstance(dct.get('doc_type'), str):
            doc_type = dct.pop('doc_type')
        else:
            doc_type = name

        if any(isinstance(base, SchemaProperties) for base in bases):
            keys = set()
            for attr_name, attr in dct.items():
                if not isinstance(attr, JsonProperty):
                    continue
                check_reserved_words(attr_name, bases)
                key = attr.name or attr_name
                if key in keys:
                    raise DuplicatePropertyError("Duplicate key %s in %s"
                            % (key, name))
                keys.add(key)

        config = {}
        for attr_name in _CONFIG_ATTRS:
            if attr_name in dct:
                config[attr_name] = dct.pop(attr_name)

        inherited_timestamps = any(getattr(b, 'timestamps', False)
                for b in bases)
        timestamps = config.get('timestamps', inherited_timestamps)
        if timestamps:
            for ts_name in ('created_at', 'updated_at'):
                declared = any(ts_name in getattr(b, '_properties_by_key', {})
                        for b in bases)
                if ts_name not in dct and not declared:
                    dct[ts_name] = DateTimeProperty(writable=False)

        views = {}
        for base in reversed(bases):
            views.update(getattr(base, '_views', {}))
        for attr in dct.values():
            if isinstance(attr, ViewBy):
                views[attr.name] = attr

        cls = super(SchemaProperties, mcs).__new__(mcs, name, bases, dct)
        cls._doc_type = doc_type
        for attr_name, value in config.items():
            setattr(cls, attr_name, value)
        cls._views = views

        hooks = Hooks()
        if timestamps and not inherited_timestamps:
            hooks.add("before", "create", _touch_created)
            hooks.add("before", "update", _touch_updated)
        for attr in dct.values():
            for moment, event in getattr(attr, "_hook_events", ()):
                hooks.add(moment, event, attr)
        cls._hooks = hooks

        if cls._registry is not None:
            cls._register_views(cls._registry)
        return cls


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def _touch_created(doc):
    doc['created_at'] = doc['updated_at'] = _utcnow()


def _touch_updated(doc):
    doc['updated_at'] = _utcnow()


class DocumentBase(jsonobject.JsonObject, metaclass=SchemaProperties):
    """ document with declared properties, defaults, views and
    lifecycle hooks.

    Class configuration:

    - `doc_type`: type name, default is the class name
    - `defaults`: dict of default values
    - `timestamps`: maintain `created_at` and `updated_at`
    - `unique_id`: name of a key or method, or a callable taking the
      document, giving the `_id` of new documents
    """

    _validate_required_lazily = True

    _id = jsonobject.StringProperty(exclude_if_none=True)
    _rev = jsonobject.StringProperty(exclude_if_none=True)

    _db = None
    _registry = None

    defaults = None
    unique_id = None
    timestamps = False

    @jsonobject.StringProperty
    def doc_type(self):
        return self._doc_type

    def __init__(self, _d=None, **kwargs):
        super(DocumentBase, self).__init__(_d)

        stored = _d or {}
        if self.defaults:
            for key, value in self.defaults.items():
                if key not in stored:
                    self[key] = copy.deepcopy(value)

        for attr, value in kwargs.items():
            prop = self._properties_by_attr.get(attr)
            self[prop.name if prop is not None else attr] = value

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self._obj)

    def __delitem__(self, key):
        try:
            super(DocumentBase, self).__delitem__(key)
        except DeleteNotAllowed:
            self[key] = None

    def __delattr__(self, name):
        try:
            super(DocumentBase, self).__delattr__(name)
        except DeleteNotAllowed:
            setattr(self, name, None)

    @classmethod
    def set_db(cls, db):
        """ Set document db"""
        cls._db = db

    @classmethod
    def get_db(cls):
        """ get document db"""
        db = getattr(cls, '_db', None)
        if db is None:
            raise TypeError("doc database required to save document")
        return db

    @classmethod
    def get(cls, docid, rev=None, db=None):
        """ get document with `docid` """
        if db is None:
            db = cls.get_db()
        return db.get(docid, rev=rev, wrapper=cls.wrap)

    @property
    def id(self):
        return self._id

    @property
    def rev(self):
        return self._rev

    new_document = property(lambda self: self._rev is None)

    def save(self):
        """ Save document in database, creating it if it is new. Runs
        the save hooks around the create or update hooks. The document
        is validated once the before hooks ran.

        @return: True. PersistenceFailure is raised if the store
        doesn't accept the document.
        """
        run_hooks(self, "before", "save")
        if self.new_document:
            self._create()
        else:
            self._update()
        run_hooks(self, "after", "save")
        return True

    def _create(self):
        run_hooks(self, "before", "create")
        self._set_unique_id()
        self._save_doc()
        run_hooks(self, "after", "create")

    def _update(self):
        run_hooks(self, "before", "update")
        self._save_doc()
        run_hooks(self, "after", "update")

    def _set_unique_id(self):
        rule = type(self).unique_id
        if rule is None or self._id:
            return

        if callable(rule):
            uniqid = rule(self)
        else:
            value = getattr(self, rule, None)
            if value is None and rule in self:
                value = self[rule]
            uniqid = value() if callable(value) else value

        if not isinstance(uniqid, str):
            raise ConfigurationError("unique_id of %s must give a string, "
                    "got %r" % (self._doc_type, uniqid))
        if not uniqid:
            raise ConfigurationError("unique_id of %s returned nothing"
                    % self._doc_type)
        self['_id'] = uniqid

    def _save_doc(self):
        db = self.get_db()
        self.validate()
        result = db.save_doc(self.to_json())
        if not result.get('ok'):
            raise PersistenceFailure("can't save %s" % self._id,
                    result=result)
        self['_id'] = result['id']
        self['_rev'] = result['rev']

    def destroy(self):
        """ Delete document from the database. `_id` and `_rev` are
        cleared, a new save stores it as a new document.

        @return: True. PersistenceFailure is raised if the store
        doesn't delete the document.
        """
        if self.new_document:
            raise TypeError("the document is not saved")

        db = self.get_db()
        run_hooks(self, "before", "destroy")
        result = db.delete_doc({'_id': self._id, '_rev': self._rev})
        if not result.get('ok'):
            raise PersistenceFailure("can't delete %s" % self._id,
                    result=result)

        # reinit document
        self['_id'] = None
        self['_rev'] = None
        run_hooks(self, "after", "destroy")
        return True

    delete = destroy

    @classmethod
    def before(cls, event, callback):
        """ run `callback(document)` before `event` """
        cls._hooks.add("before", event, callback)

    @classmethod
    def after(cls, event, callback):
        """ run `callback(document)` after `event` """
        cls._hooks.add("after", event, callback)

    @classmethod
    def get_registry(cls):
        """ get the view registry of the class """
        registry = getattr(cls, '_registry', None)
        if registry is None:
            raise TypeError("view registry required to declare or query "
                    "views of %s, use set_registry" % cls.__name__)
        return registry

    @classmethod
    def set_registry(cls, registry):
        """ bind the class and its subclasses to another view registry.
        Their views are declared in it. Subclasses bound to their own
        registry keep it. """
        cls._registry = registry
        cls._register_tree(registry)

    @classmethod
    def _register_tree(cls, registry):
        cls._register_views(registry)
        for subclass in cls.__subclasses__():
            if '_registry' not in subclass.__dict__:
                subclass._register_tree(registry)

    @classmethod
    def _register_views(cls, registry):
        for name, view in cls._views.items():
            registry.declare(cls._doc_type, name, view.definition(cls))

    @classmethod
    def view_by(cls, *keys, **opts):
        """ declare a view after the class creation, see `ViewBy`.

        @return: name of the view, also the name of the class attribute
        querying it.
        """
        registry = cls.get_registry()
        view = ViewBy(*keys, **opts)
        cls._views = dict(cls._views)
        cls._views[view.name] = view
        setattr(cls, view.name, view)
        registry.declare(cls._doc_type, view.name, view.definition(cls))
        return view.name

    @classmethod
    def query_view(cls, view_name, **options):
        """ query a declared view.

        @param options: view parameters merged over the defaults given
            at declaration. `raw=True` returns the rows instead of the
            documents, `reduce=True` implies raw.

        @return: list of documents, each loaded by id, or list of rows.
        """
        registry = cls.get_registry()
        try:
            view = cls._views[view_name]
        except KeyError:
            raise ViewNotDeclared("%s has no view %r" % (cls.__name__,
                view_name))

        query = dict(view.query_defaults)
        query.update(options)
        dispatcher = QueryDispatcher(registry)
        return dispatcher.query(cls.get_db(), cls._doc_type, view_name,
                hydrate=cls.get, **query)


class Document(DocumentBase):
    """
    Document bound to the default view registry.

        class Article(Document):
            unique_id = "slug"
            timestamps = True

            title = StringProperty()
            date = DateTimeProperty()

            by_date = ViewBy("date", descending=True)
    """

    _registry = default_registry
