# /*
# Copyright 2026 The Grove Authors.
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
# */

"""S3-compatible object store client used as a connectivity probe."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from velero_manager.errors import CollaboratorError
from velero_manager.models import StorageConfig

CONNECT_TIMEOUT_SECONDS = 10


class S3ObjectStorage:
    """List buckets on an S3-compatible endpoint such as MinIO.

    Args:
        storage: Connection parameters.
        client: Pre-built boto3 S3 client; one is created from *storage* when omitted.
    """

    def __init__(self, storage: StorageConfig, client: Any = None) -> None:
        self.storage = storage
        self._client = client or boto3.client(
            "s3",
            endpoint_url=storage.s3_url,
            aws_access_key_id=storage.access_key,
            aws_secret_access_key=storage.secret_key,
            region_name=storage.region,
            use_ssl=storage.use_ssl,
            config=Config(
                s3={"addressing_style": "path"},
                connect_timeout=CONNECT_TIMEOUT_SECONDS,
                retries={"max_attempts": 1},
            ),
        )

    def list_buckets(self) -> list[str]:
        """Return the names of every bucket visible to the credentials.

        Raises:
            CollaboratorError: If the endpoint could not be reached or refused the request.
        """
        try:
            response = self._client.list_buckets()
        except (ClientError, BotoCoreError) as err:
            raise CollaboratorError("list buckets", f"{self.storage.s3_url}: {err}") from err
        return [bucket["Name"] for bucket in response.get("Buckets", [])]


def storage_from_config(storage: StorageConfig) -> S3ObjectStorage:
    """Storage factory handed to the orchestrator."""
    return S3ObjectStorage(storage)
