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

"""AWS client wrapper for boto3.

Provides centralized boto3 client management with retry configuration
and translation of AWS SDK errors into the setup exception hierarchy.
"""

import boto3
from ..config import SetupConfig
from ..exceptions import AWS_ERROR_MAP, SetupException
from botocore.config import Config
from botocore.exceptions import ClientError
from loguru import logger
from typing import Any, Dict, Optional


class AWSClient:
    """Wrapper for a boto3 service client with enhanced error handling."""

    service_name: str = ''

    def __init__(self, config: SetupConfig, session: Optional[boto3.Session] = None):
        """Initialize client wrapper.

        Args:
            config: Setup configuration
            session: Optional boto3 session shared between service clients
        """
        self.config = config
        self._session = session
        self._client = None

        logger.debug(f'Initializing {self.service_name} client (region={config.aws_region})')

    def get_client(self) -> Any:
        """Get or create the boto3 client.

        Returns:
            Configured boto3 client
        """
        if self._client is None:
            retry_config = Config(
                retries={'max_attempts': 3, 'mode': 'standard'},
                connect_timeout=self.config.default_timeout,
                read_timeout=self.config.default_timeout,
            )

            if self._session is not None:
                session = self._session
            elif self.config.aws_profile:
                session = boto3.Session(profile_name=self.config.aws_profile)
            else:
                session = None

            if session is not None:
                self._client = session.client(
                    self.service_name, region_name=self.config.aws_region, config=retry_config
                )
            else:
                self._client = boto3.client(
                    self.service_name, region_name=self.config.aws_region, config=retry_config
                )

            logger.debug(f'Created boto3 {self.service_name} client')

        return self._client

    def call_api(self, operation: str, **kwargs) -> Dict[str, Any]:
        """Call an API operation with error handling and logging.

        Args:
            operation: boto3 operation name (snake_case)
            **kwargs: Operation parameters

        Returns:
            API response dictionary

        Raises:
            SetupException: API call failed (a subclass when the code is mapped)
        """
        logger.debug(f'Calling {self.service_name}.{operation} with {kwargs}')

        try:
            operation_method = getattr(self.get_client(), operation)
            response = operation_method(**kwargs)
        except ClientError as e:
            exception = self.translate_error(e, operation)
            logger.debug(
                f'{self.service_name}.{operation} failed: '
                f'{exception.error_code}: {exception.message}'
            )
            raise exception

        logger.debug(
            f'{self.service_name}.{operation} succeeded '
            f'(request id {response.get("ResponseMetadata", {}).get("RequestId")})'
        )
        return response

    def translate_error(self, error: ClientError, operation: str) -> SetupException:
        """Translate AWS SDK error to custom exception.

        Args:
            error: boto3 ClientError
            operation: Operation that raised the error

        Returns:
            Custom SetupException
        """
        error_code = error.response.get('Error', {}).get('Code', 'Unknown')
        error_message = error.response.get('Error', {}).get('Message', 'Unknown error')
        request_id = error.response.get('ResponseMetadata', {}).get('RequestId')

        exception_class = AWS_ERROR_MAP.get(error_code, SetupException)

        return exception_class(
            message=f'{self.service_name} API error ({error_code}): {error_message}',
            details={
                'error_code': error_code,
                'aws_request_id': request_id,
                'operation': operation,
            },
        )
