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

"""Configuration file models.

Pydantic models for the entries of the JSON files that drive the peering and
RDS onboarding commands. Entries are lenient: a missing, null or malformed
scalar becomes an empty string and a missing or malformed list becomes empty,
so that bad entries reach the skip paths instead of failing validation.
"""

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List


def _as_text(field_name: str, v: Any) -> str:
    if isinstance(v, str):
        return v
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    logger.warning(f'Ignoring {field_name}: expected a string, got {v!r}')
    return ''


class _ConfigEntry(BaseModel):
    """Common behaviour for configuration file entries."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    @field_validator('*', mode='before')
    @classmethod
    def _coerce_lenient(cls, v: Any, info) -> Any:
        is_list = cls.model_fields[info.field_name].annotation == List[str]
        if v is None:
            return [] if is_list else ''

        if is_list:
            if not isinstance(v, list):
                logger.warning(f'Ignoring {info.field_name}: expected a list, got {v!r}')
                return []
            return [_as_text(info.field_name, item) for item in v]
        return _as_text(info.field_name, v)

    @field_validator('rds_security_groups', mode='after', check_fields=False)
    @classmethod
    def _drop_blank_groups(cls, v: List[str]) -> List[str]:
        return [group.strip() for group in v if group and group.strip()]


class PeeringRequest(_ConfigEntry):
    """One entry of ``vpc_peerings`` on the accepter side."""

    requester_peering_id: str = Field(default='', description='VPC peering connection id')
    accepter_vpc_id: str = Field(default='', description='VPC id on the accepter side')
    requester_cidr: str = Field(default='', description='CIDR block of the requester VPC')
    requester_nat_gateway_ip: str = Field(
        default='', description='Public IP of the requester NAT gateway'
    )
    rds_security_groups: List[str] = Field(
        default_factory=list, description='RDS security groups to open'
    )


class PrivateRdsConfig(_ConfigEntry):
    """One entry of ``private_rds_configs``."""

    requester_cidr: str = Field(default='', description='CIDR block of the requester VPC')
    rds_security_groups: List[str] = Field(
        default_factory=list, description='RDS security groups to open'
    )


class PublicRdsConfig(_ConfigEntry):
    """One entry of ``public_rds_configs``."""

    requester_cidr: str = Field(default='', description='CIDR block of the requester VPC')
    requester_nat_gateway_ip: str = Field(
        default='', description='Public IP of the requester NAT gateway'
    )
    rds_security_groups: List[str] = Field(
        default_factory=list, description='RDS security groups to open'
    )


class PeeringCreateRequest(_ConfigEntry):
    """One entry of ``vpc_peerings`` on the requester side."""

    requester_vpc_id: str = ''
    accepter_account_id: str = ''
    accepter_vpc_id: str = ''
    accepter_region: str = ''
    peering_name: str = ''
    accepter_cidr: str = ''
    ecs_security_group_id: str = ''
