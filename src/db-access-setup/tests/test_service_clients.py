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

"""Tests for the typed service clients."""

import boto3
import json
import pytest
from awslabs.db_access_setup.exceptions import SetupDuplicateResourceException
from awslabs.db_access_setup.models.policy_models import PolicyDocument, PolicyStatement
from awslabs.db_access_setup.utils.service_clients import ServiceClients, SSOAdminClient
from moto import mock_aws
from unittest.mock import MagicMock


MOTO_ACCOUNT_ID = '123456789012'

ECS_TRUST_POLICY = json.dumps(
    {
        'Version': '2012-10-17',
        'Statement': [
            {
                'Effect': 'Allow',
                'Principal': {'Service': 'ecs-tasks.amazonaws.com'},
                'Action': 'sts:AssumeRole',
            }
        ],
    }
)


@pytest.fixture
def clients(aws_credentials, mock_config):
    """Service clients backed by moto."""
    with mock_aws():
        yield ServiceClients.from_config(mock_config)


@pytest.fixture
def ec2(clients):
    """Raw boto3 EC2 client for arranging moto state."""
    return boto3.client('ec2', region_name='us-east-1')


@pytest.fixture
def iam(clients):
    """Raw boto3 IAM client for arranging moto state."""
    return boto3.client('iam', region_name='us-east-1')


class TestEC2Client:
    """Test EC2Client against moto."""

    def test_describe_route_table_ids(self, clients, ec2):
        """Test listing the route tables of a VPC."""
        vpc_id = ec2.create_vpc(CidrBlock='10.0.0.0/16')['Vpc']['VpcId']
        extra = ec2.create_route_table(VpcId=vpc_id)['RouteTable']['RouteTableId']

        route_table_ids = clients.ec2.describe_route_table_ids(vpc_id)

        assert len(route_table_ids) == 2
        assert extra in route_table_ids

    def test_describe_route_table_ids_unknown_vpc(self, clients):
        """Test that an unknown VPC has no route tables."""
        assert clients.ec2.describe_route_table_ids('vpc-00000000') == []

    def test_authorize_ingress_duplicate(self, clients, ec2):
        """Test that a repeated rule raises the duplicate exception."""
        vpc_id = ec2.create_vpc(CidrBlock='10.0.0.0/16')['Vpc']['VpcId']
        group_id = ec2.create_security_group(
            GroupName='rds', Description='rds', VpcId=vpc_id
        )['GroupId']

        clients.ec2.authorize_ingress(group_id, 5432, '10.1.0.0/16')
        with pytest.raises(SetupDuplicateResourceException):
            clients.ec2.authorize_ingress(group_id, 5432, '10.1.0.0/16')

        permissions = ec2.describe_security_groups(GroupIds=[group_id])['SecurityGroups'][0][
            'IpPermissions'
        ]
        assert permissions[0]['FromPort'] == 5432
        assert permissions[0]['IpRanges'][0]['CidrIp'] == '10.1.0.0/16'

    def test_peering_lifecycle(self, clients, ec2):
        """Test creating, accepting and reading the status of a peering."""
        vpc_id = ec2.create_vpc(CidrBlock='10.0.0.0/16')['Vpc']['VpcId']
        peer_vpc_id = ec2.create_vpc(CidrBlock='10.1.0.0/16')['Vpc']['VpcId']

        peering_id = clients.ec2.create_vpc_peering_connection(
            vpc_id=vpc_id, peer_owner_id=MOTO_ACCOUNT_ID, peer_vpc_id=peer_vpc_id
        )
        assert peering_id.startswith('pcx-')
        assert clients.ec2.get_vpc_peering_status(peering_id) == 'pending-acceptance'

        clients.ec2.accept_vpc_peering_connection(peering_id)
        assert clients.ec2.get_vpc_peering_status(peering_id) == 'active'

        route_table_id = clients.ec2.describe_route_table_ids(vpc_id)[0]
        clients.ec2.create_route(route_table_id, '10.1.0.0/16', peering_id)
        routes = ec2.describe_route_tables(RouteTableIds=[route_table_id])['RouteTables'][0][
            'Routes'
        ]
        assert any(route.get('VpcPeeringConnectionId') == peering_id for route in routes)


class TestIAMClient:
    """Test IAMClient against moto."""

    def test_trust_policy_update(self, clients, iam):
        """Test reading and replacing a trust policy."""
        iam.create_role(RoleName='cdx-role_cross_accnt', AssumeRolePolicyDocument=ECS_TRUST_POLICY)

        current = clients.iam.get_role_trust_policy('cdx-role_cross_accnt')
        updated = current.grant_assume_role('arn:aws:iam::222222222222:role/cdx-ECSTaskRole')
        clients.iam.update_assume_role_policy('cdx-role_cross_accnt', updated)

        result = clients.iam.get_role_trust_policy('cdx-role_cross_accnt')
        assert len(result.statement) == 2
        assert result.statements_for('arn:aws:iam::222222222222:role/cdx-ECSTaskRole')

    def test_policy_versions(self, clients, iam):
        """Test creating, attaching and versioning a managed policy."""
        iam.create_role(RoleName='task-role', AssumeRolePolicyDocument=ECS_TRUST_POLICY)
        document = PolicyDocument.build(
            [
                PolicyStatement(
                    Effect='Allow',
                    Action='sts:AssumeRole',
                    Resource=['arn:aws:iam::333333333333:role/a'],
                )
            ]
        )

        policy_arn = clients.iam.create_policy('assume-policy', document, 'test policy')
        clients.iam.attach_role_policy('task-role', policy_arn)

        attached = clients.iam.list_attached_role_policies('task-role')
        assert attached == [{'PolicyName': 'assume-policy', 'PolicyArn': policy_arn}]

        version_id, current = clients.iam.get_default_policy_document(policy_arn)
        assert version_id == 'v1'
        assert current.statement[0].resources() == ['arn:aws:iam::333333333333:role/a']

        new_version = clients.iam.create_policy_version(policy_arn, document)
        assert new_version == 'v2'
        assert clients.iam.get_default_policy_document(policy_arn)[0] == 'v2'


class TestSTSClient:
    """Test STSClient against moto."""

    def test_get_caller_account_id(self, clients):
        """Test caller account lookup."""
        assert clients.sts.get_caller_account_id() == MOTO_ACCOUNT_ID


class TestSSOAdminClient:
    """Test SSOAdminClient request shapes."""

    @pytest.fixture
    def sso_admin(self, mock_config):
        client = SSOAdminClient(mock_config)
        client._client = MagicMock()
        return client

    def test_provision_targets_account(self, sso_admin):
        """Test that provisioning targets an AWS account."""
        sso_admin._client.provision_permission_set.return_value = {
            'PermissionSetProvisioningStatus': {'RequestId': 'req-1', 'Status': 'IN_PROGRESS'}
        }

        request_id = sso_admin.provision_permission_set('arn:instance', 'arn:ps', '222222222222')

        assert request_id == 'req-1'
        sso_admin._client.provision_permission_set.assert_called_once_with(
            InstanceArn='arn:instance',
            PermissionSetArn='arn:ps',
            TargetType='AWS_ACCOUNT',
            TargetId='222222222222',
        )

    def test_inline_policy_is_json(self, sso_admin):
        """Test that the inline policy is sent as a JSON string."""
        document = PolicyDocument.build([PolicyStatement(Effect='Allow', Action='ssm:*', Resource='*')])

        sso_admin.put_inline_policy('arn:instance', 'arn:ps', document)

        kwargs = sso_admin._client.put_inline_policy_to_permission_set.call_args[1]
        assert json.loads(kwargs['InlinePolicy'])['Statement'][0]['Action'] == 'ssm:*'

    def test_get_provisioning_status(self, sso_admin):
        """Test status extraction."""
        sso_admin._client.describe_permission_set_provisioning_status.return_value = {
            'PermissionSetProvisioningStatus': {'Status': 'SUCCEEDED'}
        }
        assert sso_admin.get_provisioning_status('arn:instance', 'req-1') == {'Status': 'SUCCEEDED'}
