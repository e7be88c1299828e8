"""
Configuration for the AWS signing helper

This module provides the options for one credential exchange and the
region/endpoint resolution derived from them.
"""

from .credentials_config import (
    CredentialsOpts,
    DEFAULT_SESSION_DURATION,
    DEFAULT_TIMEOUT,
    MAX_SESSION_DURATION,
    MIN_SESSION_DURATION,
    default_endpoint,
    parse_region_from_arn,
)

__all__ = [
    'CredentialsOpts',
    'DEFAULT_SESSION_DURATION',
    'DEFAULT_TIMEOUT',
    'MAX_SESSION_DURATION',
    'MIN_SESSION_DURATION',
    'default_endpoint',
    'parse_region_from_arn',
]
