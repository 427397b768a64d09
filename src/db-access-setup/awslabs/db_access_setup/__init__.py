"""
DB access setup.

Command line tool that prepares AWS accounts for IAM-authenticated database
access: VPC peering, RDS security group rules, IAM role permissions and trust
policies, and an IAM Identity Center permission set for ECS/SSM access.
"""

from .config import SetupConfig

__version__ = '0.1.0'
__all__ = ['SetupConfig', '__version__']
