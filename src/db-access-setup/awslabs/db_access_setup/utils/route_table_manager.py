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

"""Route Table Manager.

Adds routes through a VPC peering connection to every route table of a VPC.
"""

from ..exceptions import (
    SetupDuplicateResourceException,
    SetupException,
    SetupResourceNotFoundException,
)
from ..models.aws_models import MutationResult, MutationSummary, RuleOutcome
from .service_clients import EC2Client
from loguru import logger


class RouteTableManager:
    """Manager for peering routes."""

    def __init__(self, ec2: EC2Client):
        """Initialize route table manager.

        Args:
            ec2: EC2 service client
        """
        self.ec2 = ec2

    def add_peering_routes(
        self, vpc_id: str, destination_cidr: str, peering_id: str
    ) -> MutationSummary:
        """Route ``destination_cidr`` via ``peering_id`` in every route table of ``vpc_id``.

        Args:
            vpc_id: VPC whose route tables are updated
            destination_cidr: CIDR of the peer VPC
            peering_id: VPC peering connection id

        Returns:
            Outcome of each create_route attempt

        Raises:
            SetupResourceNotFoundException: The VPC has no route tables
        """
        logger.info(f'Updating route tables for VPC {vpc_id}...')

        route_table_ids = self.ec2.describe_route_table_ids(vpc_id) if vpc_id else []
        logger.debug(f'Route tables found for VPC {vpc_id}: {route_table_ids}')

        if not route_table_ids:
            raise SetupResourceNotFoundException(
                f'No route tables found for VPC {vpc_id or "<empty>"}',
                details={'vpc_id': vpc_id},
            )

        summary = MutationSummary()
        for route_table_id in route_table_ids:
            logger.info(f'Adding route to route table {route_table_id}...')
            try:
                self.ec2.create_route(route_table_id, destination_cidr, peering_id)
            except SetupDuplicateResourceException:
                logger.info(f'Route to {destination_cidr} already exists in {route_table_id}')
                outcome, error = RuleOutcome.ALREADY_EXISTS, ''
            except SetupException as e:
                logger.error(f'Failed to add route to {route_table_id}: {e.message}')
                outcome, error = RuleOutcome.FAILED, e.message
            else:
                outcome, error = RuleOutcome.CREATED, ''

            summary.add(
                MutationResult(
                    target=route_table_id, source=destination_cidr, outcome=outcome, error=error
                )
            )

        return summary
