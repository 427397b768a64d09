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

"""Loading of the JSON files that drive the peering and onboarding commands."""

import json
from ..exceptions import SetupConfigurationException
from loguru import logger
from pathlib import Path
from pydantic import BaseModel, ValidationError
from typing import List, Type, TypeVar, Union


ModelT = TypeVar('ModelT', bound=BaseModel)


def load_entries(path: Union[str, Path], key: str, model: Type[ModelT]) -> List[ModelT]:
    """Read the list stored under ``key`` and validate each entry.

    A missing key yields an empty list. Unreadable files, invalid JSON and
    entries that are not JSON objects raise SetupConfigurationException.

    Args:
        path: Path of the JSON configuration file
        key: Top-level key holding the list of entries
        model: Model each entry is validated against

    Returns:
        Validated entries in file order
    """
    path = Path(path)
    try:
        content = json.loads(path.read_text(encoding='utf-8'))
    except OSError as e:
        raise SetupConfigurationException(
            f'Cannot read configuration file {path}: {e.strerror}',
            details={'path': str(path)},
            suggested_action='Check the path passed on the command line',
        ) from e
    except json.JSONDecodeError as e:
        raise SetupConfigurationException(
            f'Configuration file {path} is not valid JSON: {e}',
            details={'path': str(path)},
        ) from e

    if not isinstance(content, dict):
        raise SetupConfigurationException(
            f'Configuration file {path} must contain a JSON object',
            details={'path': str(path)},
        )

    raw_entries = content.get(key)
    if raw_entries is None:
        logger.warning(f'No "{key}" entries found in {path}')
        return []
    if not isinstance(raw_entries, list):
        raise SetupConfigurationException(
            f'"{key}" in {path} must be a list', details={'path': str(path), 'key': key}
        )

    entries: List[ModelT] = []
    for index, raw_entry in enumerate(raw_entries):
        try:
            entries.append(model.model_validate(raw_entry))
        except ValidationError as e:
            raise SetupConfigurationException(
                f'Entry {index} of "{key}" in {path} is invalid: {e}',
                details={'path': str(path), 'key': key, 'index': index},
            ) from e

    logger.info(f'Loaded {len(entries)} "{key}" entries from {path}')
    return entries
