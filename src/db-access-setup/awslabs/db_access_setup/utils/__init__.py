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

"""
Utility modules for DB access setup.

Business logic layer that interacts with the EC2, IAM, SSO admin and STS APIs.
"""

from .aws_client import AWSClient
from .service_clients import EC2Client, IAMClient, SSOAdminClient, STSClient, ServiceClients
from .poller import PollOutcome, PollResult, poll_until
from .audit_log import AuditLog
from .config_loader import load_entries
from .route_table_manager import RouteTableManager
from .security_group_manager import SecurityGroupManager
from .rds_onboarding_manager import RdsOnboardingManager
from .peering_manager import PeeringManager
from .iam_role_manager import IamRoleManager
from .permission_set_manager import PermissionSetManager

__all__ = [
    'AWSClient',
    'EC2Client',
    'IAMClient',
    'SSOAdminClient',
    'STSClient',
    'ServiceClients',
    'PollOutcome',
    'PollResult',
    'poll_until',
    'AuditLog',
    'load_entries',
    'RouteTableManager',
    'SecurityGroupManager',
    'RdsOnboardingManager',
    'PeeringManager',
    'IamRoleManager',
    'PermissionSetManager',
]
