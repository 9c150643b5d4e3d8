# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

""" Schema is an easy way to map couchdb documents to python classes.

A document class declares its fields, default values, unique id rule,
timestamps, lifecycle hooks and views::

    from couchmodel import Document, StringProperty, DateTimeProperty, \\
            ViewBy, hook

    class Article(Document):
        unique_id = "slug"
        timestamps = True

        title = StringProperty()
        slug = StringProperty(writable=False)
        date = DateTimeProperty(readable=False)

        by_date = ViewBy("date", descending=True)
        by_user_id_and_date = ViewBy("user_id", "date")

        @hook("before", "create")
        def generate_slug_from_title(self):
            self['slug'] = re.sub('[^a-z0-9]+', '-', self.title.lower())

    Article.set_db(db)

    article = Article(title="Hello world", date=datetime.datetime.utcnow())
    article.save()
    latest = Article.by_date(limit=10)

Views are pushed to the database in the design document
`_design/Article` lazily, on the first query, and again whenever a view
is declared or the store lost them.

Binding a database to a class shares it across threads, it's better to
use the db object methods if you want to be threadsafe.
"""

from .properties import JsonProperty, StringProperty, IntegerProperty, \
LongProperty, FloatProperty, Number, BooleanProperty, DecimalProperty, \
DateTimeProperty, DateProperty, TimeProperty, ListProperty, DictProperty, \
SetProperty
from .hooks import Hooks, hook, run_hooks
from .design import ViewDefinition, DesignDocument, ViewRegistry, \
conventional_map, view_name_for
from .sync import Synchronizer
from .query import QueryDispatcher, QueryOutcome
from .base import ReservedWordError, SchemaProperties, ViewBy, \
DocumentBase, Document, default_registry


def contain(db, *docs):
    """ associate a db to multiple `Document` classes """
    for doc in docs:
        doc.set_db(db)
