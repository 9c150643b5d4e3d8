# -*- coding: utf-8 -
#
# This file is part of couchmodel released under the MIT license.
# See the NOTICE for more information.


"""
Mostly utility functions couchmodel uses internally that don't
really belong anywhere else in the modules.
"""
import json
import re
from urllib.parse import quote, unquote

__all__ = ['json', 'url_quote', 'validate_dbname']


def url_quote(s, safe='/'):
    """ quote a path segment, utf-8 encoding unicode first """
    if isinstance(s, bytes):
        s = s.decode('utf-8')
    return quote(str(s), safe=safe)


VALID_DB_NAME = re.compile(r'^[a-z][a-z0-9_$()+-/]*$')
SPECIAL_DBS = ("_users", "_replicator",)
def validate_dbname(name):
    """ validate dbname """
    if name in SPECIAL_DBS:
        return True
    elif not VALID_DB_NAME.match(unquote(name)):
        raise ValueError("Invalid db name: '%s'" % name)
    return True
