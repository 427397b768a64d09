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

"""RDS Onboarding Manager.

Opens RDS security groups to requester networks that are already peered
(private RDS) or reach the database through their NAT gateway (public RDS).
"""

from ..config import SetupConfig
from ..models.aws_models import MutationSummary
from ..models.config_models import PrivateRdsConfig, PublicRdsConfig
from .audit_log import PRIVATE_RDS_DETAILS_FILE, PUBLIC_RDS_DETAILS_FILE, AuditLog
from .security_group_manager import SecurityGroupManager, ingress_sources
from loguru import logger
from typing import Sequence


def group_list(group_ids: Sequence[str]) -> str:
    """Format security group ids for the audit files, each followed by a space."""
    return ''.join(f'{group_id} ' for group_id in group_ids)


class RdsOnboardingManager:
    """Manager for already-peered RDS onboarding."""

    def __init__(self, config: SetupConfig, security_groups: SecurityGroupManager):
        """Initialize RDS onboarding manager.

        Args:
            config: Setup configuration
            security_groups: Security group manager
        """
        self.config = config
        self.security_groups = security_groups

    def onboard_private(self, entries: Sequence[PrivateRdsConfig]) -> MutationSummary:
        """Open each entry's security groups to its requester CIDR."""
        audit = AuditLog(self.config.audit_dir, PRIVATE_RDS_DETAILS_FILE)
        summary = MutationSummary()

        for entry in entries:
            sources = ingress_sources(entry.requester_cidr)
            summary.merge(self._open_groups(entry.rds_security_groups, sources))

            audit.append_block(
                'Private RDS Security Group Updates',
                [
                    ('Requester CIDR', entry.requester_cidr),
                    ('Security Groups', group_list(entry.rds_security_groups)),
                ],
            )

        return summary

    def onboard_public(self, entries: Sequence[PublicRdsConfig]) -> MutationSummary:
        """Open each entry's security groups to its requester CIDR and NAT gateway IP."""
        audit = AuditLog(self.config.audit_dir, PUBLIC_RDS_DETAILS_FILE)
        summary = MutationSummary()

        for entry in entries:
            sources = ingress_sources(entry.requester_cidr, entry.requester_nat_gateway_ip)
            summary.merge(self._open_groups(entry.rds_security_groups, sources))

            audit.append_block(
                'Public RDS Security Group Updates',
                [
                    ('Requester CIDR', entry.requester_cidr),
                    ('Requester NAT Gateway IP', entry.requester_nat_gateway_ip),
                    ('Security Groups', group_list(entry.rds_security_groups)),
                ],
            )

        return summary

    def _open_groups(self, group_ids: Sequence[str], sources: Sequence[str]) -> MutationSummary:
        summary = MutationSummary()
        if not group_ids:
            logger.warning('Entry lists no RDS security groups; skipping')
            return summary

        for group_id in group_ids:
            summary.merge(self.security_groups.open_database_ports(group_id, sources))
        return summary
