#!/usr/bin/env python

"""
    Core module for Circulation: database, loan engine and reservation queues

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

from circulation.core import db as database

db = database.init()

__all__ = ["db"]
