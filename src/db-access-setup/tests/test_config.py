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

"""Tests for config module."""

import pytest
from awslabs.db_access_setup.config import SetupConfig
from pathlib import Path
from pydantic import ValidationError


class TestSetupConfigDefaults:
    """Test default configuration values."""

    def test_defaults(self):
        """Test documented defaults."""
        config = SetupConfig()
        assert config.aws_region is None
        assert config.log_level == 'INFO'
        assert config.audit_dir == Path('.')
        assert config.peering_poll_interval == 30
        assert config.peering_max_attempts == 20
        assert config.requester_poll_interval == 10
        assert config.provisioning_poll_interval == 5
        assert config.provisioning_max_attempts == 120
        assert config.rds_connect_policy_name == 'cdx-RDSConnectPolicy'
        assert config.rds_auth_token_policy_name == 'cdx-RDSAuthTokenGenerationPolicy'
        assert config.ecs_task_role_name == 'cdx-ECSTaskRole'
        assert config.permission_set_name == 'EcsSsmAccess'
        assert config.permission_set_session_duration == 'PT8H'

    def test_provisioning_ceiling(self):
        """Test that zero attempts means no ceiling."""
        assert SetupConfig().provisioning_attempt_ceiling == 120
        assert SetupConfig(provisioning_max_attempts=0).provisioning_attempt_ceiling is None


class TestSetupConfigEnvironment:
    """Test environment variable loading."""

    def test_env_prefix(self, monkeypatch):
        """Test that DB_SETUP_ variables are read."""
        monkeypatch.setenv('DB_SETUP_AWS_REGION', 'eu-west-1')
        monkeypatch.setenv('DB_SETUP_PEERING_MAX_ATTEMPTS', '3')
        monkeypatch.setenv('DB_SETUP_ECS_TASK_ROLE_NAME', 'custom-task-role')

        config = SetupConfig()

        assert config.aws_region == 'eu-west-1'
        assert config.peering_max_attempts == 3
        assert config.ecs_task_role_name == 'custom-task-role'

    def test_explicit_values_override_env(self, monkeypatch):
        """Test that constructor arguments win over the environment."""
        monkeypatch.setenv('DB_SETUP_LOG_LEVEL', 'ERROR')
        assert SetupConfig(log_level='DEBUG').log_level == 'DEBUG'


class TestSetupConfigValidation:
    """Test configuration validation."""

    @pytest.mark.parametrize('region', ['us-east-1', 'ap-southeast-2', 'us-gov-west-1'])
    def test_valid_regions(self, region):
        """Test accepted region names."""
        assert SetupConfig(aws_region=region).aws_region == region

    def test_invalid_region(self):
        """Test rejected region name."""
        with pytest.raises(ValidationError):
            SetupConfig(aws_region='moon-base-1')

    def test_invalid_log_level(self):
        """Test rejected log level."""
        with pytest.raises(ValidationError):
            SetupConfig(log_level='TRACE')

    @pytest.mark.parametrize('duration', ['PT8H', 'PT30M', 'PT1H30M'])
    def test_valid_session_duration(self, duration):
        """Test accepted session durations."""
        assert SetupConfig(permission_set_session_duration=duration)

    @pytest.mark.parametrize('duration', ['PT', '8H', 'P1D', 'PT8S'])
    def test_invalid_session_duration(self, duration):
        """Test rejected session durations."""
        with pytest.raises(ValidationError):
            SetupConfig(permission_set_session_duration=duration)

    def test_negative_interval_rejected(self):
        """Test that poll intervals cannot be negative."""
        with pytest.raises(ValidationError):
            SetupConfig(peering_poll_interval=-1)
