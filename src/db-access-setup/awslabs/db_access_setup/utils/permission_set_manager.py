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

"""Permission Set Manager.

Creates the IAM Identity Center permission set used for ECS Exec / SSM
sessions and provisions it into a workload account.
"""

import threading
from ..config import SetupConfig
from ..exceptions import SetupPollingException
from ..models.aws_models import ProvisioningStatus
from ..models.policy_models import PolicyDocument, PolicyStatement
from .poller import poll_until
from .service_clients import SSOAdminClient
from loguru import logger
from typing import Any, Dict, Optional


PERMISSION_SET_DESCRIPTION = 'Custom permission set for ECS and SSM access'


def ecs_ssm_access_policy() -> PolicyDocument:
    """Inline policy for SSM sessions/commands and ECS task discovery."""
    return PolicyDocument.build(
        [
            PolicyStatement(
                Sid='SSMSessionAndCommandPolicy',
                Effect='Allow',
                Action=[
                    'ssm:StartSession',
                    'ssm:DescribeSessions',
                    'ssm:TerminateSession',
                    'ssm:SendCommand',
                ],
                Resource='*',
            ),
            PolicyStatement(
                Sid='ECSDescribeAndListTasksServices',
                Effect='Allow',
                Action=[
                    'ecs:DescribeTasks',
                    'ecs:ListTasks',
                    'ecs:DescribeServices',
                    'ecs:ListServices',
                ],
                Resource='*',
            ),
        ]
    )


class PermissionSetManager:
    """Manager for IAM Identity Center permission sets."""

    def __init__(
        self,
        config: SetupConfig,
        sso_admin: SSOAdminClient,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize permission set manager.

        Args:
            config: Setup configuration
            sso_admin: SSO admin service client
            cancel_event: Event that interrupts status polling when set
        """
        self.config = config
        self.sso_admin = sso_admin
        self.cancel_event = cancel_event

    def provision(self, instance_arn: str, account_id: str) -> Dict[str, Any]:
        """Create the permission set, provision it and wait for the result.

        Returns:
            Description of the provisioned permission set

        Raises:
            SetupPollingException: Provisioning FAILED, timed out or was cancelled;
                ``details['status']`` holds the last provisioning status
        """
        logger.info('Step 1: Creating Permission Set...')
        permission_set_arn = self.sso_admin.create_permission_set(
            instance_arn,
            self.config.permission_set_name,
            PERMISSION_SET_DESCRIPTION,
            self.config.permission_set_session_duration,
        )
        logger.info(f'Created Permission Set ARN: {permission_set_arn}')

        logger.info('Step 2: Adding inline policy...')
        self.sso_admin.put_inline_policy(instance_arn, permission_set_arn, ecs_ssm_access_policy())

        logger.info('Step 3: Starting provisioning...')
        request_id = self.sso_admin.provision_permission_set(
            instance_arn, permission_set_arn, account_id
        )
        logger.info(f'Provisioning Request ID: {request_id}')

        logger.info('Step 4: Monitoring provisioning status...')
        poll = poll_until(
            check=lambda: self.sso_admin.get_provisioning_status(instance_arn, request_id).get(
                'Status', ''
            ),
            is_success=lambda status: status == ProvisioningStatus.SUCCEEDED.value,
            is_failure=lambda status: status == ProvisioningStatus.FAILED.value,
            interval=self.config.provisioning_poll_interval,
            max_attempts=self.config.provisioning_attempt_ceiling,
            cancel_event=self.cancel_event,
            description=f'permission set provisioning {request_id}',
        )

        if not poll.succeeded:
            logger.error('Provisioning did not succeed. Getting failure details...')
            status = self.sso_admin.get_provisioning_status(instance_arn, request_id)
            error = SetupPollingException(
                f'permission set provisioning {request_id}',
                poll.outcome.value,
                poll.last_state,
                poll.attempts,
            )
            error.details['status'] = status
            raise error

        logger.info('Provisioning completed successfully!')

        logger.info('Step 5: Verifying permission set exists...')
        permission_set = self.sso_admin.describe_permission_set(instance_arn, permission_set_arn)

        logger.info(
            'Setup completed! To assign users/groups to this permission set, use the IAM '
            'Identity Center console or run additional AWS CLI commands.'
        )
        return permission_set
