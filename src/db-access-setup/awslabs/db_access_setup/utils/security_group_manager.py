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

"""Security Group Manager.

Opens the MySQL and PostgreSQL ports of RDS security groups to peer networks.
"""

from ..exceptions import SetupDuplicateResourceException, SetupException
from ..models.aws_models import DatabasePort, MutationResult, MutationSummary, RuleOutcome
from .service_clients import EC2Client
from loguru import logger
from typing import List, Sequence


def nat_gateway_cidr(nat_gateway_ip: str) -> str:
    """Return the single-host CIDR of a NAT gateway IP ('' when unset)."""
    nat_gateway_ip = nat_gateway_ip.strip()
    if not nat_gateway_ip:
        return ''
    if '/' in nat_gateway_ip:
        return nat_gateway_ip
    return f'{nat_gateway_ip}/32'


def ingress_sources(requester_cidr: str, nat_gateway_ip: str = '') -> List[str]:
    """Build the source list: the requester CIDR, then the NAT gateway /32."""
    sources = (requester_cidr.strip(), nat_gateway_cidr(nat_gateway_ip))
    return [source for source in sources if source]


class SecurityGroupManager:
    """Manager for database ingress rules."""

    PORTS = (DatabasePort.MYSQL, DatabasePort.POSTGRESQL)

    def __init__(self, ec2: EC2Client):
        """Initialize security group manager.

        Args:
            ec2: EC2 service client
        """
        self.ec2 = ec2

    def open_database_ports(self, group_id: str, sources: Sequence[str]) -> MutationSummary:
        """Authorize TCP 3306 and 5432 from every source.

        Each rule is attempted independently; a duplicate rule or a failed
        rule never prevents the remaining attempts.

        Args:
            group_id: Security group id
            sources: Source CIDRs

        Returns:
            Outcome of each authorization attempt
        """
        summary = MutationSummary()
        if not sources:
            logger.warning(f'No ingress sources for security group {group_id}; nothing to do')
            return summary

        logger.info(f'Updating RDS security group {group_id}...')
        for port in self.PORTS:
            for source in sources:
                summary.add(self._authorize(group_id, port, source))

        logger.info(
            f'Security group {group_id}: {summary.count(RuleOutcome.CREATED)} added, '
            f'{summary.count(RuleOutcome.ALREADY_EXISTS)} already present, '
            f'{summary.count(RuleOutcome.FAILED)} failed'
        )
        return summary

    def _authorize(self, group_id: str, port: DatabasePort, source: str) -> MutationResult:
        try:
            self.ec2.authorize_ingress(group_id, port.value, source)
        except SetupDuplicateResourceException:
            logger.info(f'{port.label} rule from {source} already exists in {group_id}')
            return MutationResult(
                target=group_id, source=source, port=port.value, outcome=RuleOutcome.ALREADY_EXISTS
            )
        except SetupException as e:
            logger.error(
                f'Failed to add {port.label} rule from {source} to {group_id}: {e.message}'
            )
            return MutationResult(
                target=group_id,
                source=source,
                port=port.value,
                outcome=RuleOutcome.FAILED,
                error=e.message,
            )

        logger.debug(f'Added {port.label} rule from {source} to {group_id}')
        return MutationResult(
            target=group_id, source=source, port=port.value, outcome=RuleOutcome.CREATED
        )
