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

"""Typed service clients.

Each class exposes only the operations the setup commands use, with plain
Python arguments and return values, on top of AWSClient.call_api.
"""

import boto3
from ..config import SetupConfig
from ..models.policy_models import PolicyDocument
from .aws_client import AWSClient
from dataclasses import dataclass
from loguru import logger
from typing import Any, Dict, List, Optional, Tuple


class EC2Client(AWSClient):
    """VPC, route table and security group operations."""

    service_name = 'ec2'

    def describe_route_table_ids(self, vpc_id: str) -> List[str]:
        """Return the ids of every route table in a VPC."""
        route_table_ids: List[str] = []
        params: Dict[str, Any] = {'Filters': [{'Name': 'vpc-id', 'Values': [vpc_id]}]}

        while True:
            response = self.call_api('describe_route_tables', **params)
            route_table_ids.extend(
                table['RouteTableId']
                for table in response.get('RouteTables', [])
                if table.get('RouteTableId')
            )
            next_token = response.get('NextToken')
            if not next_token:
                return route_table_ids
            params['NextToken'] = next_token

    def create_route(self, route_table_id: str, destination_cidr: str, peering_id: str) -> None:
        """Route ``destination_cidr`` through a VPC peering connection."""
        self.call_api(
            'create_route',
            RouteTableId=route_table_id,
            DestinationCidrBlock=destination_cidr,
            VpcPeeringConnectionId=peering_id,
        )

    def authorize_ingress(self, group_id: str, port: int, cidr: str) -> None:
        """Allow TCP ``port`` from ``cidr`` into a security group."""
        self.call_api(
            'authorize_security_group_ingress',
            GroupId=group_id,
            IpPermissions=[
                {
                    'IpProtocol': 'tcp',
                    'FromPort': port,
                    'ToPort': port,
                    'IpRanges': [{'CidrIp': cidr}],
                }
            ],
        )

    def accept_vpc_peering_connection(self, peering_id: str) -> Dict[str, Any]:
        """Accept a pending VPC peering connection."""
        response = self.call_api(
            'accept_vpc_peering_connection', VpcPeeringConnectionId=peering_id
        )
        return response.get('VpcPeeringConnection', {})

    def get_vpc_peering_status(self, peering_id: str) -> str:
        """Return the ``Status.Code`` of a peering connection, '' when unknown."""
        response = self.call_api(
            'describe_vpc_peering_connections', VpcPeeringConnectionIds=[peering_id]
        )
        connections = response.get('VpcPeeringConnections', [])
        if not connections:
            return ''
        return connections[0].get('Status', {}).get('Code', '')

    def create_vpc_peering_connection(
        self,
        vpc_id: str,
        peer_owner_id: str,
        peer_vpc_id: str,
        peer_region: Optional[str] = None,
        tags: Optional[Dict[str, str]] = None,
    ) -> str:
        """Request a peering connection and return its id."""
        params: Dict[str, Any] = {
            'VpcId': vpc_id,
            'PeerOwnerId': peer_owner_id,
            'PeerVpcId': peer_vpc_id,
        }
        if peer_region:
            params['PeerRegion'] = peer_region
        if tags:
            params['TagSpecifications'] = [
                {
                    'ResourceType': 'vpc-peering-connection',
                    'Tags': [{'Key': key, 'Value': value} for key, value in tags.items()],
                }
            ]

        response = self.call_api('create_vpc_peering_connection', **params)
        return response.get('VpcPeeringConnection', {}).get('VpcPeeringConnectionId', '')


class IAMClient(AWSClient):
    """Managed policy and role operations."""

    service_name = 'iam'

    def create_policy(self, name: str, document: PolicyDocument, description: str) -> str:
        """Create a managed policy and return its ARN."""
        response = self.call_api(
            'create_policy',
            PolicyName=name,
            PolicyDocument=document.to_json(),
            Description=description,
        )
        return response['Policy']['Arn']

    def attach_role_policy(self, role_name: str, policy_arn: str) -> None:
        """Attach a managed policy to a role."""
        self.call_api('attach_role_policy', RoleName=role_name, PolicyArn=policy_arn)

    def list_attached_role_policies(self, role_name: str) -> List[Dict[str, str]]:
        """Return ``{PolicyName, PolicyArn}`` for every policy attached to a role."""
        attached: List[Dict[str, str]] = []
        params: Dict[str, Any] = {'RoleName': role_name}

        while True:
            response = self.call_api('list_attached_role_policies', **params)
            attached.extend(response.get('AttachedPolicies', []))
            if not response.get('IsTruncated'):
                return attached
            params['Marker'] = response['Marker']

    def get_role_trust_policy(self, role_name: str) -> PolicyDocument:
        """Return the assume-role (trust) policy of a role."""
        response = self.call_api('get_role', RoleName=role_name)
        return PolicyDocument.from_api(response['Role']['AssumeRolePolicyDocument'])

    def update_assume_role_policy(self, role_name: str, document: PolicyDocument) -> None:
        """Replace the trust policy of a role."""
        self.call_api(
            'update_assume_role_policy', RoleName=role_name, PolicyDocument=document.to_json()
        )

    def get_default_policy_document(self, policy_arn: str) -> Tuple[str, PolicyDocument]:
        """Return the default version id and document of a managed policy."""
        policy = self.call_api('get_policy', PolicyArn=policy_arn)['Policy']
        version_id = policy['DefaultVersionId']
        version = self.call_api('get_policy_version', PolicyArn=policy_arn, VersionId=version_id)
        return version_id, PolicyDocument.from_api(version['PolicyVersion']['Document'])

    def create_policy_version(
        self, policy_arn: str, document: PolicyDocument, set_as_default: bool = True
    ) -> str:
        """Publish a new policy version and return its id."""
        response = self.call_api(
            'create_policy_version',
            PolicyArn=policy_arn,
            PolicyDocument=document.to_json(),
            SetAsDefault=set_as_default,
        )
        return response['PolicyVersion']['VersionId']


class SSOAdminClient(AWSClient):
    """IAM Identity Center permission set operations."""

    service_name = 'sso-admin'

    def create_permission_set(
        self, instance_arn: str, name: str, description: str, session_duration: str
    ) -> str:
        """Create a permission set and return its ARN."""
        response = self.call_api(
            'create_permission_set',
            InstanceArn=instance_arn,
            Name=name,
            Description=description,
            SessionDuration=session_duration,
        )
        return response['PermissionSet']['PermissionSetArn']

    def put_inline_policy(
        self, instance_arn: str, permission_set_arn: str, document: PolicyDocument
    ) -> None:
        """Attach an inline policy to a permission set."""
        self.call_api(
            'put_inline_policy_to_permission_set',
            InstanceArn=instance_arn,
            PermissionSetArn=permission_set_arn,
            InlinePolicy=document.to_json(),
        )

    def provision_permission_set(
        self, instance_arn: str, permission_set_arn: str, account_id: str
    ) -> str:
        """Provision a permission set into an account and return the request id."""
        response = self.call_api(
            'provision_permission_set',
            InstanceArn=instance_arn,
            PermissionSetArn=permission_set_arn,
            TargetType='AWS_ACCOUNT',
            TargetId=account_id,
        )
        return response['PermissionSetProvisioningStatus']['RequestId']

    def get_provisioning_status(self, instance_arn: str, request_id: str) -> Dict[str, Any]:
        """Return the ``PermissionSetProvisioningStatus`` of a provisioning request."""
        response = self.call_api(
            'describe_permission_set_provisioning_status',
            InstanceArn=instance_arn,
            ProvisionPermissionSetRequestId=request_id,
        )
        return response.get('PermissionSetProvisioningStatus', {})

    def describe_permission_set(
        self, instance_arn: str, permission_set_arn: str
    ) -> Dict[str, Any]:
        """Return the description of a permission set."""
        response = self.call_api(
            'describe_permission_set',
            InstanceArn=instance_arn,
            PermissionSetArn=permission_set_arn,
        )
        return response.get('PermissionSet', {})


class STSClient(AWSClient):
    """Caller identity lookup."""

    service_name = 'sts'

    def get_caller_account_id(self) -> str:
        """Return the account id of the current credentials."""
        return self.call_api('get_caller_identity')['Account']


@dataclass
class ServiceClients:
    """The service clients of one command run, sharing a boto3 session."""

    ec2: EC2Client
    iam: IAMClient
    sso_admin: SSOAdminClient
    sts: STSClient

    @classmethod
    def from_config(cls, config: SetupConfig) -> 'ServiceClients':
        """Build every service client from the setup configuration."""
        session = boto3.Session(profile_name=config.aws_profile, region_name=config.aws_region)
        logger.debug(f'Using AWS profile {config.aws_profile or "default"}')
        return cls(
            ec2=EC2Client(config, session),
            iam=IAMClient(config, session),
            sso_admin=SSOAdminClient(config, session),
            sts=STSClient(config, session),
        )
