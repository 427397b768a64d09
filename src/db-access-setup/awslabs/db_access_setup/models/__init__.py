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
Data models for DB access setup.

Pydantic models for type-safe data validation and serialization.
"""

from .config_models import (
    PeeringRequest,
    PrivateRdsConfig,
    PublicRdsConfig,
    PeeringCreateRequest,
)
from .aws_models import (
    PeeringStatus,
    ProvisioningStatus,
    DatabasePort,
    RuleOutcome,
    MutationResult,
    MutationSummary,
    PeeringResult,
)
from .policy_models import (
    PolicyDocument,
    PolicyStatement,
    POLICY_VERSION,
)

__all__ = [
    # Configuration file models
    'PeeringRequest',
    'PrivateRdsConfig',
    'PublicRdsConfig',
    'PeeringCreateRequest',
    # AWS models
    'PeeringStatus',
    'ProvisioningStatus',
    'DatabasePort',
    'RuleOutcome',
    'MutationResult',
    'MutationSummary',
    'PeeringResult',
    # Policy models
    'PolicyDocument',
    'PolicyStatement',
    'POLICY_VERSION',
]
