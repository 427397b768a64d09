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

"""DB access setup - command line entry point.

Each subcommand is one sequential setup procedure. The configuration and
service clients are assembled once here and passed to the managers.
"""

import argparse
import json
import re
import sys
import traceback
from . import __version__
from .config import SetupConfig
from .exceptions import SetupException, SetupUsageException
from .models.config_models import (
    PeeringCreateRequest,
    PeeringRequest,
    PrivateRdsConfig,
    PublicRdsConfig,
)
from .models.policy_models import PolicyDocument
from .utils.config_loader import load_entries
from .utils.iam_role_manager import IamRoleManager
from .utils.peering_manager import PeeringManager
from .utils.permission_set_manager import PermissionSetManager
from .utils.rds_onboarding_manager import RdsOnboardingManager
from .utils.route_table_manager import RouteTableManager
from .utils.security_group_manager import SecurityGroupManager
from .utils.service_clients import ServiceClients
from loguru import logger
from typing import Any, Callable, List, Optional


LOG_FORMAT = '[{time:YYYY-MM-DDTHH:mm:ssZZ}]: <level>{level: <8}</level> {message}'

ACCOUNT_ID_PATTERN = re.compile(r'^\d{12}$')

ClientsFactory = Callable[[SetupConfig], ServiceClients]
InputFunc = Callable[[str], str]


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f'{self.prog}: error: {message}\n')


def configure_logging(level: str) -> None:
    """Send log records to stderr at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, colorize=False)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for every subcommand."""
    parser = _ArgumentParser(
        prog='db-access-setup',
        description='Prepare AWS accounts for IAM-authenticated database access',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--region', help='AWS region (overrides DB_SETUP_AWS_REGION)')
    parser.add_argument(
        '--profile', help='AWS credentials profile (overrides DB_SETUP_AWS_PROFILE)'
    )
    parser.add_argument('--audit-dir', help='Directory for the audit files (default: current)')
    parser.add_argument(
        '--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Logging level'
    )

    subparsers = parser.add_subparsers(dest='command', required=True, parser_class=_ArgumentParser)

    accept = subparsers.add_parser(
        'accept-peering', help='Accept VPC peerings and open RDS security groups'
    )
    accept.add_argument('config_file', help='JSON file with a "vpc_peerings" list')

    request = subparsers.add_parser(
        'request-peering', help='Create VPC peerings towards database accounts'
    )
    request.add_argument('config_file', help='JSON file with a "vpc_peerings" list')

    private = subparsers.add_parser(
        'onboard-private-rds', help='Open private RDS security groups to peered VPCs'
    )
    private.add_argument('config_file', help='JSON file with a "private_rds_configs" list')

    public = subparsers.add_parser(
        'onboard-public-rds', help='Open public RDS security groups to peered VPCs'
    )
    public.add_argument('config_file', help='JSON file with a "public_rds_configs" list')

    permissions = subparsers.add_parser(
        'extend-role-permissions', help='Attach RDS IAM authentication policies to roles'
    )
    permissions.add_argument(
        'account_id', nargs='?', help='Database account id (default: caller account)'
    )
    permissions.add_argument('role_names', nargs='*', help='Roles to extend (prompted if omitted)')

    trust = subparsers.add_parser(
        'extend-trust-policy', help='Let a workload ECS task role assume a database role'
    )
    trust.add_argument('--role-name', help='Role whose trust policy is extended (prompted)')
    trust.add_argument('--account-id', help='Workload account id for ECS (prompted)')

    assume = subparsers.add_parser(
        'extend-assume-role-policy', help='Let the ECS task role assume a database account role'
    )
    assume.add_argument('--account-id', help='Database account id to connect (prompted)')
    assume.add_argument('--role-name', help='Role in the connected account (prompted)')

    provision = subparsers.add_parser(
        'provision-permission-set', help='Create and provision the ECS/SSM permission set'
    )
    provision.add_argument('instance_arn', help='IAM Identity Center instance ARN')
    provision.add_argument('account_id', help='Account the permission set is provisioned to')

    return parser


def build_config(args: argparse.Namespace) -> SetupConfig:
    """Assemble the run configuration from the environment and command line flags."""
    overrides = {
        'aws_region': args.region,
        'aws_profile': args.profile,
        'audit_dir': args.audit_dir,
        'log_level': args.log_level,
    }
    return SetupConfig(**{key: value for key, value in overrides.items() if value is not None})


def prompt_with_default(prompt: str, default: str, input_func: InputFunc = input) -> str:
    """Ask for a value, returning ``default`` on an empty answer."""
    answer = input_func(f'{prompt} [{default}]: ').strip()
    return answer or default


def prompt_required(prompt: str, input_func: InputFunc = input) -> str:
    """Ask for a value that must not be empty."""
    answer = input_func(f'{prompt}: ').strip()
    if not answer:
        raise SetupUsageException(f'A value is required for "{prompt}"')
    return answer


def validate_account_id(account_id: str) -> str:
    """Check that ``account_id`` is a 12-digit AWS account id."""
    if not ACCOUNT_ID_PATTERN.match(account_id):
        raise SetupUsageException(
            f'Invalid AWS account id: {account_id}',
            suggested_action='Account ids are 12 digits',
        )
    return account_id


def print_json(value: Any) -> None:
    """Print verification output."""
    if isinstance(value, PolicyDocument):
        value = value.to_dict()
    print(json.dumps(value, indent=4, default=str))


class CommandRunner:
    """Runs one subcommand against the configured AWS account."""

    def __init__(
        self,
        config: SetupConfig,
        clients_factory: ClientsFactory = ServiceClients.from_config,
        input_func: InputFunc = input,
    ):
        """Initialize command runner.

        Args:
            config: Setup configuration
            clients_factory: Builds the service clients from the configuration
            input_func: Reads interactive answers
        """
        self.config = config
        self.clients_factory = clients_factory
        self.input_func = input_func
        self._clients: Optional[ServiceClients] = None

    @property
    def clients(self) -> ServiceClients:
        """Service clients, created on first use."""
        if self._clients is None:
            self._clients = self.clients_factory(self.config)
        return self._clients

    def run(self, args: argparse.Namespace) -> int:
        """Dispatch to the handler of ``args.command``."""
        handler = getattr(self, '_' + args.command.replace('-', '_'))
        return handler(args)

    def _peering_manager(self) -> PeeringManager:
        return PeeringManager(
            self.config,
            self.clients.ec2,
            RouteTableManager(self.clients.ec2),
            SecurityGroupManager(self.clients.ec2),
        )

    def _accept_peering(self, args: argparse.Namespace) -> int:
        entries = load_entries(args.config_file, 'vpc_peerings', PeeringRequest)
        self._peering_manager().accept_all(entries)
        return 0

    def _request_peering(self, args: argparse.Namespace) -> int:
        entries = load_entries(args.config_file, 'vpc_peerings', PeeringCreateRequest)
        self._peering_manager().request_all(entries)
        return 0

    def _onboard_private_rds(self, args: argparse.Namespace) -> int:
        entries = load_entries(args.config_file, 'private_rds_configs', PrivateRdsConfig)
        manager = RdsOnboardingManager(self.config, SecurityGroupManager(self.clients.ec2))
        manager.onboard_private(entries)
        return 0

    def _onboard_public_rds(self, args: argparse.Namespace) -> int:
        entries = load_entries(args.config_file, 'public_rds_configs', PublicRdsConfig)
        manager = RdsOnboardingManager(self.config, SecurityGroupManager(self.clients.ec2))
        manager.onboard_public(entries)
        return 0

    def _extend_role_permissions(self, args: argparse.Namespace) -> int:
        if args.account_id:
            account_id = validate_account_id(args.account_id)
        else:
            account_id = self.clients.sts.get_caller_account_id()
            print(f'Your AWS Account ID is: {account_id}')

        role_names: List[str] = list(args.role_names) or [
            prompt_with_default('ROLE NAME', self.config.default_role_name, self.input_func)
        ]

        attached = IamRoleManager(self.config, self.clients.iam).extend_role_permissions(
            account_id, role_names
        )
        for role_name, policies in attached.items():
            print_json({'RoleName': role_name, 'AttachedPolicies': policies})
        return 0

    def _extend_trust_policy(self, args: argparse.Namespace) -> int:
        role_name = args.role_name or prompt_required('Enter the CDX Role Name', self.input_func)
        account_id = validate_account_id(
            args.account_id
            or prompt_required('Enter the AWS Account ID for ECS', self.input_func)
        )

        document = IamRoleManager(self.config, self.clients.iam).extend_trust_policy(
            role_name, account_id
        )
        print_json(document)
        return 0

    def _extend_assume_role_policy(self, args: argparse.Namespace) -> int:
        account_id = validate_account_id(
            args.account_id
            or prompt_required('Enter the AWS Account ID to connect', self.input_func)
        )
        role_name = args.role_name or prompt_required(
            'Enter the CDX Role in the connected account', self.input_func
        )

        document = IamRoleManager(self.config, self.clients.iam).extend_assume_role_policy(
            account_id, role_name
        )
        if document is not None:
            print_json(document)
        return 0

    def _provision_permission_set(self, args: argparse.Namespace) -> int:
        account_id = validate_account_id(args.account_id)
        manager = PermissionSetManager(self.config, self.clients.sso_admin)
        try:
            permission_set = manager.provision(args.instance_arn, account_id)
        except SetupException as e:
            if 'status' in e.details:
                print_json(e.details['status'])
            raise
        print_json(permission_set)
        return 0


def main(
    argv: Optional[List[str]] = None,
    clients_factory: ClientsFactory = ServiceClients.from_config,
    input_func: InputFunc = input,
) -> int:
    """Run the command line tool and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        configure_logging('ERROR')
        logger.error(f'Invalid configuration: {e}')
        return 1

    configure_logging(config.log_level)
    logger.debug(f'Running {args.command} with {config.model_dump()}')

    try:
        return CommandRunner(config, clients_factory, input_func).run(args)
    except SetupException as e:
        logger.error(e.message)
        if e.suggested_action:
            logger.error(f'Suggested action: {e.suggested_action}')
        _log_failure_location(e)
        return 1
    except KeyboardInterrupt:
        logger.warning('Interrupted')
        return 1
    except Exception as e:
        logger.error(f'Unexpected error: {e}')
        _log_failure_location(e)
        return 1


def _log_failure_location(error: BaseException) -> None:
    frames = traceback.extract_tb(error.__traceback__)
    if frames:
        frame = frames[-1]
        logger.error(
            f'An error occurred on line {frame.lineno} of {frame.filename} '
            f'({frame.name}), exit code 1'
        )


if __name__ == '__main__':
    sys.exit(main())
