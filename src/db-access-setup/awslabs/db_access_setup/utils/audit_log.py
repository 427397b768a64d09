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

"""Append-only, human-readable audit files."""

from loguru import logger
from pathlib import Path
from typing import Sequence, Tuple


ACCEPTER_DETAILS_FILE = 'accepter-details.txt'
PRIVATE_RDS_DETAILS_FILE = 'private-rds-onboard-details.txt'
PUBLIC_RDS_DETAILS_FILE = 'public-rds-onboard-details.txt'
PEERING_DETAILS_FILE = 'peering-details.txt'

BLOCK_SEPARATOR = '-' * 40


class AuditLog:
    """Writes fixed-format blocks to one audit file."""

    def __init__(self, directory: Path, filename: str):
        """Initialize audit log.

        Args:
            directory: Directory holding the audit file
            filename: Audit file name
        """
        self.path = Path(directory) / filename

    def append_block(self, title: str, fields: Sequence[Tuple[str, str]]) -> None:
        """Append a titled block of ``label: value`` lines and a separator."""
        lines = [f'{title}:']
        lines.extend(f'{label}: {value}' for label, value in fields)
        lines.append(BLOCK_SEPARATOR)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open('a', encoding='utf-8') as audit_file:
            audit_file.write('\n'.join(lines) + '\n')

        logger.debug(f'Appended "{title}" block to {self.path}')
