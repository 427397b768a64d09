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

"""Tests for audit_log module."""

from awslabs.db_access_setup.utils.audit_log import BLOCK_SEPARATOR, AuditLog


class TestAuditLog:
    """Test AuditLog."""

    def test_append_block(self, tmp_path):
        """Test the block layout."""
        AuditLog(tmp_path, 'details.txt').append_block('Title', [('A', '1'), ('B', '')])

        assert (tmp_path / 'details.txt').read_text() == f'Title:\nA: 1\nB: \n{BLOCK_SEPARATOR}\n'

    def test_blocks_are_appended(self, tmp_path):
        """Test that existing content is kept."""
        (tmp_path / 'details.txt').write_text('previous run\n')
        audit = AuditLog(tmp_path, 'details.txt')

        audit.append_block('First', [('A', '1')])
        audit.append_block('Second', [('A', '2')])

        content = (tmp_path / 'details.txt').read_text()
        assert content.startswith('previous run\nFirst:\n')
        assert content.count(BLOCK_SEPARATOR) == 2

    def test_creates_directory(self, tmp_path):
        """Test that a missing audit directory is created."""
        AuditLog(tmp_path / 'audit', 'details.txt').append_block('Title', [])

        assert (tmp_path / 'audit' / 'details.txt').exists()

    def test_separator(self):
        """Test the separator line."""
        assert BLOCK_SEPARATOR == '-' * 40
