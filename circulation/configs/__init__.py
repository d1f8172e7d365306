#!/usr/bin/env python

"""
    Configurations for Circulation

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import os
from decimal import Decimal


def _int_list(value):
    return tuple(int(v.strip()) for v in value.split(',') if v.strip())


# Determine environment
TESTING = os.getenv("TESTING", "false").lower() == "true"

# API server configuration
SCHEME = 'http'
HOST = os.environ.get('CIRCULATION_HOST', 'localhost')
PORT = int(os.environ.get('CIRCULATION_PORT', 8080))
WORKERS = int(os.environ.get('CIRCULATION_WORKERS', 1))
DEBUG = bool(int(os.environ.get('CIRCULATION_DEBUG', 0)))
LOG_LEVEL = os.environ.get('CIRCULATION_LOG_LEVEL', 'info')
SSL_CRT = os.environ.get('CIRCULATION_SSL_CRT')
SSL_KEY = os.environ.get('CIRCULATION_SSL_KEY')
ALLOWED_ORIGINS = os.environ.get(
    'CIRCULATION_ALLOWED_ORIGINS', 'http://localhost:3000').split(',')

OPTIONS = {
    'host': HOST,
    'port': PORT,
    'log_level': LOG_LEVEL,
    'reload': DEBUG,
    'workers': WORKERS,
}
if SSL_CRT and SSL_KEY:
    OPTIONS['ssl_keyfile'] = SSL_KEY
    OPTIONS['ssl_certfile'] = SSL_CRT
    SCHEME = 'https'

DB_CONFIG = {
    'user': os.environ.get('DB_USER', 'postgres'),
    'password': os.environ.get('DB_PASSWORD'),
    'host': os.environ.get('DB_HOST', 'localhost'),
    'port': int(os.environ.get('DB_PORT', '5432')),
    'dbname': os.environ.get('DB_NAME', 'library'),
}

# Database configuration
DB_URI = os.environ.get('CIRCULATION_DB_URI') or (
    "sqlite:///:memory:" if TESTING else
    'postgresql+psycopg2://{user}:{password}@{host}:{port}/{dbname}'.format(**DB_CONFIG)
)

# Loan policy defaults (library settings page)
LOAN_PERIODS = _int_list(os.environ.get('CIRCULATION_LOAN_PERIODS', '7,14,21,30'))
DEFAULT_LOAN_PERIOD = int(os.environ.get('CIRCULATION_DEFAULT_LOAN_PERIOD', 14))
MAX_RENEWALS = int(os.environ.get('CIRCULATION_MAX_RENEWALS', 2))
RENEWAL_DAYS = int(os.environ.get('CIRCULATION_RENEWAL_DAYS', 7))
FINE_PER_DAY = Decimal(os.environ.get('CIRCULATION_FINE_PER_DAY', '5.00'))
MAX_BOOKS = int(os.environ.get('CIRCULATION_MAX_BOOKS', 5))
MAX_BOOKS_BY_ROLE = {
    'faculty': int(os.environ.get('CIRCULATION_MAX_BOOKS_FACULTY', 10)),
}
HOLD_DAYS = int(os.environ.get('CIRCULATION_HOLD_DAYS', 7))
DUE_SOON_DAYS = int(os.environ.get('CIRCULATION_DUE_SOON_DAYS', 2))
REMINDER_DAYS = _int_list(os.environ.get('CIRCULATION_REMINDER_DAYS', '1,3,7'))

__all__ = [
    'SCHEME', 'HOST', 'PORT', 'DEBUG', 'OPTIONS', 'DB_URI', 'DB_CONFIG', 'TESTING',
    'LOAN_PERIODS', 'DEFAULT_LOAN_PERIOD', 'MAX_RENEWALS', 'RENEWAL_DAYS',
    'FINE_PER_DAY', 'MAX_BOOKS', 'MAX_BOOKS_BY_ROLE', 'HOLD_DAYS',
    'DUE_SOON_DAYS', 'REMINDER_DAYS',
]
