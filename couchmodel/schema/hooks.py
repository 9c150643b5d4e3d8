# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.

""" lifecycle callbacks of documents.

Callbacks are plain callables taking the document. Each document class
keeps one ordered list per (moment, event) for the callbacks it declares
itself; they are run synchronously by the persistence methods of the
document::

    class Article(Document):

        @hook("before", "create")
        def generate_slug(self):
            self['slug'] = slugify(self['title'])

    Article.after("destroy", purge_cache)

`save` hooks wrap both `create` (first save) and `update` hooks.
"""

__all__ = ['EVENTS', 'MOMENTS', 'Hooks', 'hook', 'run_hooks']

EVENTS = ('save', 'create', 'update', 'destroy')
MOMENTS = ('before', 'after')


def _check(moment, event):
    if moment not in MOMENTS:
        raise ValueError("unknown hook moment %r, expected one of %r"
                % (moment, MOMENTS))
    if event not in EVENTS:
        raise ValueError("unknown hook event %r, expected one of %r"
                % (event, EVENTS))


def hook(moment, event):
    """ decorator registering a document method as callback """
    _check(moment, event)

    def decorator(func):
        events = list(getattr(func, "_hook_events", []))
        events.append((moment, event))
        func._hook_events = events
        return func
    return decorator


class Hooks(object):
    """ ordered callback lists declared by one document class """

    def __init__(self):
        self._callbacks = dict(((moment, event), [])
                for moment in MOMENTS for event in EVENTS)

    def add(self, moment, event, callback):
        _check(moment, event)
        if not callable(callback):
            raise TypeError("hook callback isn't a callable")
        self._callbacks[(moment, event)].append(callback)

    def callbacks(self, moment, event):
        return list(self._callbacks[(moment, event)])


def run_hooks(document, moment, event):
    """ run the callbacks of every class of the document, bases first
    (reversed method resolution order), so a mixin's callbacks run even
    when it isn't the first base. """
    for klass in reversed(type(document).__mro__):
        hooks = klass.__dict__.get('_hooks')
        if hooks is None:
            continue
        for callback in hooks.callbacks(moment, event):
            callback(document)
