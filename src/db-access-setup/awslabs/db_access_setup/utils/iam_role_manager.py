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

"""IAM Role Manager.

Grants roles RDS IAM authentication permissions, lets the ECS task role of a
workload account assume them, and lets that task role reach new database
account roles.
"""

from ..config import SetupConfig
from ..exceptions import SetupResourceNotFoundException
from ..models.policy_models import PolicyDocument, PolicyStatement
from .service_clients import IAMClient
from loguru import logger
from typing import Dict, List, Optional, Sequence


RDS_CONNECT_POLICY_DESCRIPTION = 'Policy for RDS IAM authentication connection'
RDS_AUTH_TOKEN_POLICY_DESCRIPTION = 'Policy for generating RDS auth tokens'


def role_arn(account_id: str, role_name: str) -> str:
    """Build the ARN of a role in another account."""
    return f'arn:aws:iam::{account_id}:role/{role_name}'


def rds_db_resource(account_id: str) -> str:
    """Every RDS IAM database user in every region of the account."""
    return f'arn:aws:rds-db:*:{account_id}:*:*/*'


def rds_connect_policy(account_id: str) -> PolicyDocument:
    """Policy allowing IAM database authentication."""
    return PolicyDocument.build(
        [
            PolicyStatement(
                Effect='Allow',
                Action=['rds-db:connect'],
                Resource=[rds_db_resource(account_id)],
            )
        ]
    )


def rds_auth_token_policy(account_id: str) -> PolicyDocument:
    """Policy allowing auth token generation and DB discovery."""
    return PolicyDocument.build(
        [
            PolicyStatement(
                Effect='Allow',
                Action=[
                    'rds:GetAuthenticationToken',
                    'rds:DescribeDBClusters',
                    'rds:DescribeDBInstances',
                ],
                Resource=[rds_db_resource(account_id)],
            )
        ]
    )


class IamRoleManager:
    """Manager for IAM role permissions and trust relationships."""

    def __init__(self, config: SetupConfig, iam: IAMClient):
        """Initialize IAM role manager.

        Args:
            config: Setup configuration
            iam: IAM service client
        """
        self.config = config
        self.iam = iam

    def extend_role_permissions(
        self, account_id: str, role_names: Sequence[str]
    ) -> Dict[str, List[Dict[str, str]]]:
        """Create the two RDS policies and attach them to every role.

        Any API error propagates; there is no partial-success tracking.

        Args:
            account_id: Account that owns the databases
            role_names: Roles receiving the policies

        Returns:
            Attached policies of each role, read back after attaching
        """
        logger.info('Creating RDS Connect policy...')
        connect_arn = self.iam.create_policy(
            self.config.rds_connect_policy_name,
            rds_connect_policy(account_id),
            RDS_CONNECT_POLICY_DESCRIPTION,
        )

        logger.info('Creating RDS Auth Token Generation policy...')
        auth_token_arn = self.iam.create_policy(
            self.config.rds_auth_token_policy_name,
            rds_auth_token_policy(account_id),
            RDS_AUTH_TOKEN_POLICY_DESCRIPTION,
        )

        for role_name in role_names:
            logger.info(f'Attaching RDS policies to role: {role_name}')
            self.iam.attach_role_policy(role_name, connect_arn)
            self.iam.attach_role_policy(role_name, auth_token_arn)
            logger.info(f'Successfully attached RDS policies to {role_name}')

        logger.info('All RDS policies have been created and attached')

        attached: Dict[str, List[Dict[str, str]]] = {}
        for role_name in role_names:
            logger.info(f'Verifying policies for role: {role_name}')
            attached[role_name] = self.iam.list_attached_role_policies(role_name)
        return attached

    def extend_trust_policy(self, role_name: str, trusted_account_id: str) -> PolicyDocument:
        """Let the ECS task role of ``trusted_account_id`` assume ``role_name``.

        Any existing statement dedicated to that principal is replaced, so the
        edit can be re-run safely.

        Returns:
            The trust policy read back after the update
        """
        principal_arn = role_arn(trusted_account_id, self.config.ecs_task_role_name)

        logger.info(f'Fetching current trust policy for role: {role_name}')
        current = self.iam.get_role_trust_policy(role_name)

        replaced = len(current.statements_for(principal_arn))
        if replaced:
            logger.info(f'Replacing {replaced} existing statement(s) for {principal_arn}')

        logger.info(f'Updating trust relationship for role: {role_name}')
        self.iam.update_assume_role_policy(role_name, current.grant_assume_role(principal_arn))
        logger.info(f'Successfully updated trust relationship for {role_name}')

        logger.info(f'Verifying updated trust relationship for role: {role_name}')
        return self.iam.get_role_trust_policy(role_name)

    def extend_assume_role_policy(
        self, connected_account_id: str, target_role_name: str
    ) -> Optional[PolicyDocument]:
        """Add a database account role to the ECS task role's assume-role policy.

        Returns:
            The new default policy document, or None when the role was already listed

        Raises:
            SetupResourceNotFoundException: The policy is not attached to the task role
        """
        task_role = self.config.ecs_task_role_name
        policy_name = self.config.assume_role_policy_name

        logger.info(f'Fetching policy ARN for {policy_name}')
        policy_arn = next(
            (
                policy['PolicyArn']
                for policy in self.iam.list_attached_role_policies(task_role)
                if policy.get('PolicyName') == policy_name
            ),
            None,
        )
        if not policy_arn:
            raise SetupResourceNotFoundException(
                f'Policy {policy_name} is not attached to role {task_role}.',
                details={'role_name': task_role, 'policy_name': policy_name},
            )
        logger.info(f'Found policy ARN: {policy_arn}')

        logger.info('Fetching current policy document')
        version_id, document = self.iam.get_default_policy_document(policy_arn)
        if not document.statement:
            raise SetupResourceNotFoundException(
                f'Policy {policy_name} has no statements', details={'policy_arn': policy_arn}
            )

        target_arn = role_arn(connected_account_id, target_role_name)
        first = document.statement[0]
        resources = first.resources()
        if target_arn in resources:
            logger.info(f'{target_arn} is already listed in {policy_name} ({version_id})')
            return None

        updated_first = first.model_copy(update={'resource': [*resources, target_arn]})
        updated = document.model_copy(
            update={'statement': [updated_first, *document.statement[1:]]}
        )

        logger.info('Creating a new policy version')
        new_version = self.iam.create_policy_version(policy_arn, updated, set_as_default=True)
        logger.info(f'Successfully updated assume role policy for {task_role} ({new_version})')

        logger.info('Verifying updated policy')
        return self.iam.get_default_policy_document(policy_arn)[1]
