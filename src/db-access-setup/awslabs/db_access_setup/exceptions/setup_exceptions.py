# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Exception hierarchy for DB access setup.

Provides custom exceptions that map to AWS API errors with
structured error information for proper error handling.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class SetupException(Exception):
    """Base exception for DB access setup."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        suggested_action: Optional[str] = None,
    ):
        """Initialize base exception.

        Args:
            message: Error message
            details: Additional error details
            suggested_action: Suggested action to resolve the error
        """
        self.message = message
        self.details = details or {}
        self.suggested_action = suggested_action
        self.timestamp = datetime.now(timezone.utc)
        super().__init__(self.message)

    @property
    def error_code(self) -> Optional[str]:
        """AWS error code this exception was translated from, if any."""
        return self.details.get('error_code')

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to structured dictionary.

        Returns:
            Dictionary representation of the error
        """
        error_dict = {
            'error': True,
            'error_type': self.__class__.__name__,
            'message': self.message,
            'timestamp': self.timestamp.strftime('%Y-%m-%dT%H:%M:%S.%f') + 'Z',
        }

        if self.details:
            error_dict['details'] = dict(self.details)

        if self.suggested_action:
            error_dict['details'] = error_dict.get('details', {})
            error_dict['details']['suggested_action'] = self.suggested_action

        return error_dict


class SetupResourceNotFoundException(SetupException):
    """Resource not found (404-equivalent)."""

    pass


class SetupDuplicateResourceException(SetupException):
    """Resource or rule already exists; callers treat this as success."""

    pass


class SetupInvalidStateException(SetupException):
    """Resource is not in a state that allows the operation."""

    pass


class SetupInvalidParameterException(SetupException):
    """Invalid parameter provided."""

    pass


class SetupAccessDeniedException(SetupException):
    """Access denied (403-equivalent)."""

    pass


class SetupConfigurationException(SetupException):
    """Configuration file could not be read or parsed."""

    pass


class SetupUsageException(SetupException):
    """Command invoked with missing or invalid arguments."""

    pass


class SetupPollingException(SetupException):
    """A polled operation ended in a negative terminal state or timed out."""

    def __init__(self, resource: str, outcome: str, last_state: Optional[str], attempts: int):
        """Initialize polling exception.

        Args:
            resource: Identifier of the resource being waited on
            outcome: Poll outcome (failed, timed_out, cancelled)
            last_state: Last observed state
            attempts: Number of status checks performed
        """
        message = f'Waiting for {resource} ended with outcome {outcome} (last state: {last_state})'
        super().__init__(
            message,
            details={
                'resource': resource,
                'outcome': outcome,
                'last_state': last_state,
                'attempts': attempts,
            },
        )
        self.outcome = outcome
        self.last_state = last_state


# AWS Error Code Mapping
# Used by AWSClient to translate AWS SDK errors to custom exceptions
AWS_ERROR_MAP = {
    # Idempotency: the thing we wanted already exists
    'InvalidPermission.Duplicate': SetupDuplicateResourceException,
    'RouteAlreadyExists': SetupDuplicateResourceException,
    'EntityAlreadyExists': SetupDuplicateResourceException,
    'ConflictException': SetupDuplicateResourceException,
    # Lookups
    'InvalidVpcPeeringConnectionID.NotFound': SetupResourceNotFoundException,
    'InvalidVpcPeeringConnectionId.Malformed': SetupInvalidParameterException,
    'InvalidRouteTableID.NotFound': SetupResourceNotFoundException,
    'InvalidGroup.NotFound': SetupResourceNotFoundException,
    'InvalidVpcID.NotFound': SetupResourceNotFoundException,
    'NoSuchEntity': SetupResourceNotFoundException,
    'ResourceNotFoundException': SetupResourceNotFoundException,
    # State
    'InvalidStateTransition': SetupInvalidStateException,
    'OperationNotPermitted': SetupInvalidStateException,
    'VpcPeeringConnectionAlreadyExists': SetupInvalidStateException,
    # Permissions
    'AccessDenied': SetupAccessDeniedException,
    'AccessDeniedException': SetupAccessDeniedException,
    'UnauthorizedOperation': SetupAccessDeniedException,
    # Input
    'InvalidParameterValue': SetupInvalidParameterException,
    'InvalidParameterCombination': SetupInvalidParameterException,
    'MalformedPolicyDocument': SetupInvalidParameterException,
    'ValidationException': SetupInvalidParameterException,
}
