# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

""" properties of document classes. Wrapping, type checks, required,
choices, validators and defaults come from jsonobject, the properties
here only add attribute access control::

    class Article(Document):
        slug = StringProperty(writable=False)
        token = StringProperty(readable=False)

`writable=False` makes the attribute read-only, `readable=False` makes it
write-only. Item access (`doc['slug']`) is never restricted.
"""

import jsonobject
from jsonobject.base_properties import JsonProperty


__all__ = ['JsonProperty', 'StringProperty', 'IntegerProperty',
        'FloatProperty', 'BooleanProperty', 'DecimalProperty',
        'DateTimeProperty', 'DateProperty', 'TimeProperty',
        'ListProperty', 'DictProperty', 'SetProperty', 'LongProperty',
        'Number']


class AccessMixin(object):

    def __init__(self, *args, readable=True, writable=True, **kwargs):
        self.readable = readable
        self.writable = writable
        super(AccessMixin, self).__init__(*args, **kwargs)

    def __get__(self, instance, owner):
        if instance is not None and not self.readable:
            raise AttributeError("%s is write-only" % self.name)
        return super(AccessMixin, self).__get__(instance, owner)

    def __set__(self, instance, value):
        if not self.writable:
            raise AttributeError("%s is read-only" % self.name)
        super(AccessMixin, self).__set__(instance, value)


class StringProperty(AccessMixin, jsonobject.StringProperty):
    pass


class IntegerProperty(AccessMixin, jsonobject.IntegerProperty):
    pass

LongProperty = IntegerProperty


class FloatProperty(AccessMixin, jsonobject.FloatProperty):
    pass

Number = FloatProperty


class BooleanProperty(AccessMixin, jsonobject.BooleanProperty):
    pass


class DecimalProperty(AccessMixin, jsonobject.DecimalProperty):
    pass


class DateTimeProperty(AccessMixin, jsonobject.DateTimeProperty):
    """ stored as `YYYY-MM-DDTHH:MM:SSZ`, naive UTC in python """


class DateProperty(AccessMixin, jsonobject.DateProperty):
    pass


class TimeProperty(AccessMixin, jsonobject.TimeProperty):
    pass


class ListProperty(AccessMixin, jsonobject.ListProperty):
    pass


class DictProperty(AccessMixin, jsonobject.DictProperty):
    pass


class SetProperty(AccessMixin, jsonobject.SetProperty):
    pass
