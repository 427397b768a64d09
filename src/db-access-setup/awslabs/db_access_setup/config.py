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

"""Configuration management for DB access setup.

Uses Pydantic for type-safe configuration with environment variable support.
The CLI builds one SetupConfig at startup and hands it to every component.
"""

import re
from pathlib import Path
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional


ISO8601_DURATION_PATTERN = re.compile(r'^PT(\d+H)?(\d+M)?$')


class SetupConfig(BaseSettings):
    """Configuration shared by all setup commands."""

    model_config = SettingsConfigDict(
        env_prefix='DB_SETUP_', case_sensitive=False, validate_assignment=True, extra='ignore'
    )

    # AWS Configuration
    aws_region: Optional[str] = Field(
        default=None, description='AWS region; falls back to the boto3 default chain'
    )
    aws_profile: Optional[str] = Field(default=None, description='AWS credentials profile name')
    default_timeout: int = Field(
        default=60, ge=5, le=900, description='Connect/read timeout for AWS API calls (seconds)'
    )

    # Logging and audit output
    log_level: Literal['DEBUG', 'INFO', 'WARNING', 'ERROR'] = Field(
        default='INFO', description='Logging level'
    )
    audit_dir: Path = Field(
        default=Path('.'), description='Directory receiving the append-only audit files'
    )

    # Polling
    peering_poll_interval: float = Field(
        default=30, ge=0, description='Seconds between peering status checks (accepter side)'
    )
    peering_max_attempts: int = Field(
        default=20, ge=1, description='Peering status checks before giving up (accepter side)'
    )
    requester_poll_interval: float = Field(
        default=10, ge=0, description='Seconds between peering status checks (requester side)'
    )
    requester_max_attempts: int = Field(
        default=20, ge=1, description='Peering status checks before giving up (requester side)'
    )
    provisioning_poll_interval: float = Field(
        default=5, ge=0, description='Seconds between permission set provisioning checks'
    )
    provisioning_max_attempts: int = Field(
        default=120,
        ge=0,
        description='Provisioning status checks before giving up; 0 waits indefinitely',
    )

    # IAM names
    rds_connect_policy_name: str = Field(default='cdx-RDSConnectPolicy', min_length=1)
    rds_auth_token_policy_name: str = Field(
        default='cdx-RDSAuthTokenGenerationPolicy', min_length=1
    )
    default_role_name: str = Field(
        default='cdx-role_cross_accnt', description='Role offered when prompting for a role name'
    )
    ecs_task_role_name: str = Field(
        default='cdx-ECSTaskRole', description='ECS task role allowed to assume database roles'
    )
    assume_role_policy_name: str = Field(
        default='cdx-ECSRDSAssumeRolePolicy',
        description='Managed policy on the ECS task role listing assumable roles',
    )

    # IAM Identity Center
    permission_set_name: str = Field(default='EcsSsmAccess', min_length=1, max_length=32)
    permission_set_session_duration: str = Field(default='PT8H')

    @field_validator('aws_region')
    @classmethod
    def validate_region(cls, v: Optional[str]) -> Optional[str]:
        """Validate AWS region format."""
        if v is None:
            return v
        if not re.match(r'^[a-z]{2}(-gov)?-[a-z]+-\d$', v):
            raise ValueError(f'Invalid AWS region: {v}')
        return v

    @field_validator('permission_set_session_duration')
    @classmethod
    def validate_session_duration(cls, v: str) -> str:
        """Validate the ISO-8601 session duration (hours/minutes only)."""
        if v == 'PT' or not ISO8601_DURATION_PATTERN.match(v):
            raise ValueError(f'Invalid session duration: {v}. Expected e.g. PT8H or PT30M')
        return v

    @property
    def provisioning_attempt_ceiling(self) -> Optional[int]:
        """Attempt ceiling for the provisioning wait, None when unbounded."""
        return self.provisioning_max_attempts or None
