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

"""Models for AWS resources and API responses used by the setup commands."""

from enum import Enum
from pydantic import BaseModel, Field
from typing import List


class PeeringStatus(str, Enum):
    """VPC peering connection ``Status.Code`` values."""

    INITIATING_REQUEST = 'initiating-request'
    PENDING_ACCEPTANCE = 'pending-acceptance'
    PROVISIONING = 'provisioning'
    ACTIVE = 'active'
    FAILED = 'failed'
    REJECTED = 'rejected'
    EXPIRED = 'expired'
    DELETING = 'deleting'
    DELETED = 'deleted'

    @classmethod
    def dead_states(cls) -> frozenset:
        """States from which a connection can never become active."""
        return frozenset({cls.FAILED, cls.REJECTED, cls.EXPIRED, cls.DELETING, cls.DELETED})


class ProvisioningStatus(str, Enum):
    """Permission set provisioning status."""

    IN_PROGRESS = 'IN_PROGRESS'
    SUCCEEDED = 'SUCCEEDED'
    FAILED = 'FAILED'


class DatabasePort(int, Enum):
    """Database ports opened in RDS security groups."""

    MYSQL = 3306
    POSTGRESQL = 5432

    @property
    def label(self) -> str:
        """Engine name used in log messages."""
        return {3306: 'MySQL', 5432: 'PostgreSQL'}[self.value]


class RuleOutcome(str, Enum):
    """Result of one idempotent mutation (route or ingress rule)."""

    CREATED = 'created'
    ALREADY_EXISTS = 'already_exists'
    FAILED = 'failed'


class MutationResult(BaseModel):
    """Outcome of a single route or ingress rule mutation."""

    target: str = Field(..., description='Route table id or security group id')
    source: str = Field(..., description='Destination or source CIDR')
    port: int = 0
    outcome: RuleOutcome
    error: str = ''


class MutationSummary(BaseModel):
    """Collected outcomes of a batch of idempotent mutations."""

    results: List[MutationResult] = Field(default_factory=list)

    def add(self, result: MutationResult) -> None:
        """Record a mutation result."""
        self.results.append(result)

    def count(self, outcome: RuleOutcome) -> int:
        """Count results with the given outcome."""
        return sum(1 for result in self.results if result.outcome == outcome)

    @property
    def failures(self) -> List[MutationResult]:
        """Results that failed for a reason other than a duplicate."""
        return [result for result in self.results if result.outcome == RuleOutcome.FAILED]

    def merge(self, other: 'MutationSummary') -> 'MutationSummary':
        """Append another summary's results to this one."""
        self.results.extend(other.results)
        return self


class PeeringResult(BaseModel):
    """What happened to one peering configuration entry."""

    peering_id: str
    configured: bool = False
    skip_reason: str = ''
    routes: MutationSummary = Field(default_factory=MutationSummary)
    rules: MutationSummary = Field(default_factory=MutationSummary)
