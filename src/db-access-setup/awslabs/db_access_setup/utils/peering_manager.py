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

"""VPC Peering Manager.

Handles both ends of a VPC peering: the accepter side accepts pending
connections and opens RDS security groups, the requester side creates
connections and opens the ECS security group.
"""

import threading
from ..config import SetupConfig
from ..exceptions import (
    SetupException,
    SetupInvalidParameterException,
    SetupInvalidStateException,
    SetupPollingException,
)
from ..models.aws_models import PeeringResult, PeeringStatus
from ..models.config_models import PeeringCreateRequest, PeeringRequest
from .audit_log import ACCEPTER_DETAILS_FILE, PEERING_DETAILS_FILE, AuditLog
from .poller import PollResult, poll_until
from .route_table_manager import RouteTableManager
from .security_group_manager import SecurityGroupManager, ingress_sources
from .service_clients import EC2Client
from loguru import logger
from typing import List, Optional, Sequence


PEERING_PURPOSE_TAG = 'database-iam-jit'


class PeeringManager:
    """Manager for VPC peering connections."""

    def __init__(
        self,
        config: SetupConfig,
        ec2: EC2Client,
        routes: RouteTableManager,
        security_groups: SecurityGroupManager,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize peering manager.

        Args:
            config: Setup configuration
            ec2: EC2 service client
            routes: Route table manager
            security_groups: Security group manager
            cancel_event: Event that interrupts status polling when set
        """
        self.config = config
        self.ec2 = ec2
        self.routes = routes
        self.security_groups = security_groups
        self.cancel_event = cancel_event

    def wait_for_active(
        self, peering_id: str, interval: float, max_attempts: int
    ) -> PollResult[str]:
        """Poll a peering connection until it is active or can no longer become active."""
        logger.info(f'Waiting for VPC peering connection {peering_id} to become active...')
        dead_states = {state.value for state in PeeringStatus.dead_states()}

        return poll_until(
            check=lambda: self._peering_status(peering_id),
            is_success=lambda status: status == PeeringStatus.ACTIVE.value,
            is_failure=lambda status: status in dead_states,
            interval=interval,
            max_attempts=max_attempts,
            cancel_event=self.cancel_event,
            description=f'VPC peering connection {peering_id}',
        )

    def _peering_status(self, peering_id: str) -> str:
        try:
            return self.ec2.get_vpc_peering_status(peering_id)
        except SetupException as e:
            logger.warning(f'Could not read status of peering {peering_id}: {e.message}')
            return ''

    # Accepter side

    def accept_all(self, entries: Sequence[PeeringRequest]) -> List[PeeringResult]:
        """Accept and configure every peering entry, skipping the ones that fail."""
        results = [self.accept(entry) for entry in entries]

        configured = sum(1 for result in results if result.configured)
        logger.info(f'Configured {configured} of {len(results)} peering connection(s)')
        return results

    def accept(self, entry: PeeringRequest) -> PeeringResult:
        """Accept one peering connection, then add routes and open RDS ports.

        Failures to accept, to reach ``active`` or to find route tables for the
        accepter VPC skip the entry. No security group is opened and no audit
        block is written for a skipped entry.
        """
        peering_id = entry.requester_peering_id
        result = PeeringResult(peering_id=peering_id)

        if not peering_id:
            logger.error('Peering entry has no requester_peering_id; skipping')
            result.skip_reason = 'missing requester_peering_id'
            return result

        logger.info(f'Accepting VPC peering connection {peering_id}...')
        try:
            self.ec2.accept_vpc_peering_connection(peering_id)
        except SetupInvalidStateException as e:
            logger.warning(
                f'Failed to accept peering connection {peering_id} - '
                f'it may be in an invalid state ({e.message})'
            )
            result.skip_reason = 'not acceptable'
            return result
        except SetupException as e:
            logger.error(f'Failed to accept peering connection {peering_id}: {e.message}')
            result.skip_reason = 'accept failed'
            return result

        poll = self.wait_for_active(
            peering_id, self.config.peering_poll_interval, self.config.peering_max_attempts
        )
        if not poll.succeeded:
            logger.error(f'Peering connection {peering_id} did not become active')
            result.skip_reason = f'peering {poll.outcome.value} ({poll.last_state or "unknown"})'
            return result

        try:
            result.routes = self.routes.add_peering_routes(
                entry.accepter_vpc_id, entry.requester_cidr, peering_id
            )
        except SetupException as e:
            logger.error(f'{e.message}; skipping peering connection {peering_id}')
            result.skip_reason = 'route lookup failed'
            return result

        sources = ingress_sources(entry.requester_cidr, entry.requester_nat_gateway_ip)
        for group_id in entry.rds_security_groups:
            result.rules.merge(self.security_groups.open_database_ports(group_id, sources))

        AuditLog(self.config.audit_dir, ACCEPTER_DETAILS_FILE).append_block(
            'Accepted Peering Details',
            [
                ('Peering ID', peering_id),
                ('VPC ID', entry.accepter_vpc_id),
                ('Requester CIDR', entry.requester_cidr),
                ('Requester NAT Gateway IP', entry.requester_nat_gateway_ip),
            ],
        )

        result.configured = True
        return result

    # Requester side

    def request_all(self, entries: Sequence[PeeringCreateRequest]) -> List[PeeringResult]:
        """Create and configure every requester-side peering; the first failure aborts."""
        return [self.request(entry) for entry in entries]

    def request(self, entry: PeeringCreateRequest) -> PeeringResult:
        """Create a peering connection, wait for it, then add routes and open ECS ports.

        Raises:
            SetupInvalidParameterException: Creation returned no connection id
            SetupPollingException: The connection did not become active
            SetupResourceNotFoundException: The requester VPC has no route tables
        """
        logger.info(
            f'Creating VPC Peering connection from {entry.requester_vpc_id} '
            f'to {entry.accepter_vpc_id}...'
        )
        peering_id = self.ec2.create_vpc_peering_connection(
            vpc_id=entry.requester_vpc_id,
            peer_owner_id=entry.accepter_account_id,
            peer_vpc_id=entry.accepter_vpc_id,
            peer_region=entry.accepter_region or None,
            tags={'Name': f'{entry.peering_name}-peering', 'Purpose': PEERING_PURPOSE_TAG},
        )
        if not peering_id:
            raise SetupInvalidParameterException(
                'Failed to create VPC peering connection. Please check the parameters.',
                details={'requester_vpc_id': entry.requester_vpc_id},
            )
        logger.info(f'Created peering connection: {peering_id}')

        poll = self.wait_for_active(
            peering_id, self.config.requester_poll_interval, self.config.requester_max_attempts
        )
        if not poll.succeeded:
            raise SetupPollingException(
                f'VPC peering connection {peering_id}',
                poll.outcome.value,
                poll.last_state,
                poll.attempts,
            )

        result = PeeringResult(peering_id=peering_id)
        result.routes = self.routes.add_peering_routes(
            entry.requester_vpc_id, entry.accepter_cidr, peering_id
        )
        if entry.ecs_security_group_id:
            result.rules = self.security_groups.open_database_ports(
                entry.ecs_security_group_id, ingress_sources(entry.accepter_cidr)
            )
        else:
            logger.warning(f'No ecs_security_group_id for {entry.peering_name}; skipping rules')

        AuditLog(self.config.audit_dir, PEERING_DETAILS_FILE).append_block(
            f'Peering Details for {entry.peering_name}',
            [
                ('Peering ID', peering_id),
                ('Requester VPC', entry.requester_vpc_id),
                ('Accepter VPC', entry.accepter_vpc_id),
                ('Accepter CIDR', entry.accepter_cidr),
            ],
        )

        result.configured = True
        return result
