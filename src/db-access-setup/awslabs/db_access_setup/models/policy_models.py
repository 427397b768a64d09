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

"""IAM policy document models.

Typed view over IAM policy JSON. Keys the models do not know about are kept
as extra fields and serialized back unchanged, and only keys present in the
source document are emitted, so editing one statement never rewrites the
others.
"""

import json
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional, Union
from urllib.parse import unquote


POLICY_VERSION = '2012-10-17'

StringOrList = Union[str, List[str]]


class PolicyStatement(BaseModel):
    """A single IAM policy statement."""

    model_config = ConfigDict(populate_by_name=True, extra='allow')

    sid: Optional[str] = Field(default=None, alias='Sid')
    effect: str = Field(default='Allow', alias='Effect')
    principal: Optional[Union[str, Dict[str, Any]]] = Field(default=None, alias='Principal')
    action: Optional[StringOrList] = Field(default=None, alias='Action')
    resource: Optional[StringOrList] = Field(default=None, alias='Resource')
    condition: Optional[Dict[str, Any]] = Field(default=None, alias='Condition')

    def aws_principal(self) -> Optional[StringOrList]:
        """Return the ``Principal.AWS`` value, if any."""
        if isinstance(self.principal, dict):
            return self.principal.get('AWS')
        return None

    def is_only_for(self, principal_arn: str) -> bool:
        """True when ``Principal.AWS`` is exactly the given ARN."""
        aws = self.aws_principal()
        if isinstance(aws, list):
            return aws == [principal_arn]
        return aws == principal_arn

    def resources(self) -> List[str]:
        """Return ``Resource`` as a list."""
        if self.resource is None:
            return []
        if isinstance(self.resource, str):
            return [self.resource]
        return list(self.resource)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using IAM key names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class PolicyDocument(BaseModel):
    """An IAM policy document (identity, trust or inline policy)."""

    model_config = ConfigDict(populate_by_name=True, extra='allow')

    version: str = Field(default=POLICY_VERSION, alias='Version')
    statement: List[PolicyStatement] = Field(default_factory=list, alias='Statement')

    @field_validator('statement', mode='before')
    @classmethod
    def _single_statement_to_list(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return [v]
        return v

    @classmethod
    def from_api(cls, document: Union[str, Dict[str, Any]]) -> 'PolicyDocument':
        """Parse a policy document as returned by IAM.

        boto3 usually decodes policy documents into dicts; raw responses carry
        them as URL-encoded JSON strings.
        """
        if isinstance(document, str):
            document = json.loads(unquote(document))
        return cls.model_validate(document)

    @classmethod
    def build(cls, statements: List[PolicyStatement]) -> 'PolicyDocument':
        """Create a new document with the current policy language version."""
        return cls(Version=POLICY_VERSION, Statement=statements)

    def statements_for(self, principal_arn: str) -> List[PolicyStatement]:
        """Statements whose ``Principal.AWS`` is exactly the given ARN."""
        return [stmt for stmt in self.statement if stmt.is_only_for(principal_arn)]

    def without_principal(self, principal_arn: str) -> 'PolicyDocument':
        """Return a copy without the statements dedicated to ``principal_arn``."""
        kept = [stmt for stmt in self.statement if not stmt.is_only_for(principal_arn)]
        return self.model_copy(update={'statement': kept})

    def with_statement(self, statement: PolicyStatement) -> 'PolicyDocument':
        """Return a copy with ``statement`` appended."""
        return self.model_copy(update={'statement': [*self.statement, statement]})

    def grant_assume_role(self, principal_arn: str) -> 'PolicyDocument':
        """Replace any statement for ``principal_arn`` with a fresh AssumeRole grant."""
        grant = PolicyStatement(
            Effect='Allow', Principal={'AWS': principal_arn}, Action='sts:AssumeRole'
        )
        return self.without_principal(principal_arn).with_statement(grant)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using IAM key names."""
        document = self.model_dump(by_alias=True, exclude_unset=True, exclude={'statement'})
        document.setdefault('Version', self.version)
        document['Statement'] = [stmt.to_dict() for stmt in self.statement]
        return document

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize to the JSON string IAM APIs expect."""
        return json.dumps(self.to_dict(), indent=indent)
