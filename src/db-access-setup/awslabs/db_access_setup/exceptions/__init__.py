"""
Custom exceptions for DB access setup.

Provides a hierarchy of exceptions for proper error handling and reporting.
"""

from .setup_exceptions import (
    SetupException,
    SetupResourceNotFoundException,
    SetupDuplicateResourceException,
    SetupInvalidStateException,
    SetupInvalidParameterException,
    SetupAccessDeniedException,
    SetupConfigurationException,
    SetupUsageException,
    SetupPollingException,
    AWS_ERROR_MAP,
)

__all__ = [
    'SetupException',
    'SetupResourceNotFoundException',
    'SetupDuplicateResourceException',
    'SetupInvalidStateException',
    'SetupInvalidParameterException',
    'SetupAccessDeniedException',
    'SetupConfigurationException',
    'SetupUsageException',
    'SetupPollingException',
    'AWS_ERROR_MAP',
]
