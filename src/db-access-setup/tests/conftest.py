"""Pytest configuration and fixtures for DB access setup tests."""

import os
import pytest
from awslabs.db_access_setup.config import SetupConfig
from awslabs.db_access_setup.utils.service_clients import (
    EC2Client,
    IAMClient,
    ServiceClients,
    SSOAdminClient,
    STSClient,
)
from botocore.exceptions import ClientError
from unittest.mock import Mock


@pytest.fixture
def mock_config(tmp_path):
    """Provide a test configuration.

    Poll intervals are zero so waits finish immediately, and audit files
    land in a temporary directory.

    Returns:
        SetupConfig with test settings
    """
    return SetupConfig(
        aws_region='us-east-1',
        log_level='DEBUG',
        audit_dir=tmp_path,
        peering_poll_interval=0,
        requester_poll_interval=0,
        provisioning_poll_interval=0,
    )


@pytest.fixture
def mock_ec2():
    """Provide a mocked EC2 client."""
    return Mock(spec=EC2Client)


@pytest.fixture
def mock_iam():
    """Provide a mocked IAM client."""
    return Mock(spec=IAMClient)


@pytest.fixture
def mock_sso_admin():
    """Provide a mocked SSO admin client."""
    return Mock(spec=SSOAdminClient)


@pytest.fixture
def mock_sts():
    """Provide a mocked STS client."""
    client = Mock(spec=STSClient)
    client.get_caller_account_id.return_value = '111111111111'
    return client


@pytest.fixture
def mock_clients(mock_ec2, mock_iam, mock_sso_admin, mock_sts):
    """Provide a ServiceClients bundle of mocked clients."""
    return ServiceClients(ec2=mock_ec2, iam=mock_iam, sso_admin=mock_sso_admin, sts=mock_sts)


@pytest.fixture
def aws_credentials():
    """Mocked AWS Credentials for moto."""
    os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
    os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
    os.environ['AWS_SECURITY_TOKEN'] = 'testing'
    os.environ['AWS_SESSION_TOKEN'] = 'testing'
    os.environ['AWS_DEFAULT_REGION'] = 'us-east-1'


@pytest.fixture
def client_error():
    """Build botocore ClientError instances for a given error code."""

    def _make(code: str, message: str = 'error', operation: str = 'Operation') -> ClientError:
        return ClientError(
            {
                'Error': {'Code': code, 'Message': message},
                'ResponseMetadata': {'RequestId': 'req-123'},
            },
            operation,
        )

    return _make
