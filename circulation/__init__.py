#!/usr/bin/env python

"""
    Circulation, the loan lifecycle engine for the college library

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

__version__ = '0.1.0'
