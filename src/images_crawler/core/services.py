"""Storage service implementations backed by S3 and DynamoDB."""

import mimetypes
import os
from typing import Any, Dict, Optional

from botocore.exceptions import ClientError

from .error_handling import with_error_handling
from .models import ImageSet, ImageTransform
from .path_utils import clean_key
from .protocols import LoggerProtocol


def build_object_key(key_prefix: str, destination_key: str, file_name: str) -> str:
    """Object key of one uploaded file: ``[prefix/]<destination key>/<file name>``."""
    parts = [key_prefix.strip("/")] if key_prefix and key_prefix.strip("/") else []
    parts.append(destination_key)
    parts.append(file_name)
    return "/".join(parts)


class S3ImageUploader:
    """Uploads image files to an S3 bucket under their image set's key."""

    def __init__(
        self,
        s3_client: Any,
        bucket: str,
        logger: LoggerProtocol,
        key_prefix: str = "",
    ):
        if not bucket:
            raise ValueError("bucket is required")
        self._s3_client = s3_client
        self._bucket = bucket
        self._logger = logger
        self._key_prefix = key_prefix

    @property
    def bucket(self) -> str:
        return self._bucket

    def object_key(self, local_path: str, destination_key: str) -> str:
        return build_object_key(
            self._key_prefix, destination_key, os.path.basename(local_path)
        )

    @with_error_handling
    async def upload(self, local_path: str, destination_key: str) -> str:
        """Upload ``local_path`` and return the object key it was stored under."""
        if not destination_key or not destination_key.strip():
            raise ValueError("destination_key is required")
        if not os.path.isfile(local_path):
            raise FileNotFoundError(f"file {local_path} must exist")

        key = self.object_key(local_path, destination_key)
        content_type = mimetypes.guess_type(local_path)[0] or "application/octet-stream"
        self._logger.info(f"Uploading '{local_path}' to 's3://{self._bucket}/{key}'")
        await self._s3_client.upload_file(
            local_path, self._bucket, key, ExtraArgs={"ContentType": content_type}
        )
        return key

    @with_error_handling
    async def ensure_bucket(self) -> None:
        """Create the bucket if it does not exist yet."""
        try:
            await self._s3_client.head_bucket(Bucket=self._bucket)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code not in ("404", "NoSuchBucket", "NotFound"):
                raise
            self._logger.info(f"Creating bucket '{self._bucket}'")
            await self._s3_client.create_bucket(Bucket=self._bucket)


class DynamoMetadataStore:
    """Image set and transform records kept in two DynamoDB tables."""

    KEY_SCHEMA = [
        {"AttributeName": "PartitionKey", "KeyType": "HASH"},
        {"AttributeName": "RowKey", "KeyType": "RANGE"},
    ]
    ATTRIBUTE_DEFINITIONS = [
        {"AttributeName": "PartitionKey", "AttributeType": "S"},
        {"AttributeName": "RowKey", "AttributeType": "S"},
    ]

    def __init__(
        self,
        dynamodb_resource: Any,
        logger: LoggerProtocol,
        image_set_table: str = "imagesets",
        image_transform_table: str = "imagetransforms",
    ):
        if not image_set_table or not image_transform_table:
            raise ValueError("table names are required")
        self._resource = dynamodb_resource
        self._logger = logger
        self._image_set_table = image_set_table
        self._image_transform_table = image_transform_table

    async def _put(self, table_name: str, item: Dict[str, Any]) -> None:
        table = await self._resource.Table(table_name)
        await table.put_item(Item=item)

    @with_error_handling
    async def upsert_image_set(self, image_set: ImageSet) -> None:
        """Insert or replace the record for ``image_set``."""
        self._logger.debug(
            f"Upserting image set {image_set.partition_key}/{image_set.row_key}"
        )
        await self._put(self._image_set_table, image_set.to_item())

    @with_error_handling
    async def upsert_transform(self, transform: ImageTransform) -> None:
        """Insert or replace the descriptor for ``transform``."""
        self._logger.info(f"Registering transform {transform.name} v{transform.version}")
        await self._put(self._image_transform_table, transform.to_item())

    @with_error_handling
    async def get_transform(self, name: str, version: str) -> Optional[ImageTransform]:
        """Fetch a registered transform, or None."""
        table = await self._resource.Table(self._image_transform_table)
        response = await table.get_item(
            Key={"PartitionKey": clean_key(name), "RowKey": clean_key(version)}
        )
        item = response.get("Item")
        if not item:
            return None
        return ImageTransform.from_item(item)

    @with_error_handling
    async def ensure_tables(self) -> None:
        """Create both tables if they do not exist yet."""
        client = self._resource.meta.client
        for table_name in (self._image_set_table, self._image_transform_table):
            try:
                await client.create_table(
                    TableName=table_name,
                    KeySchema=self.KEY_SCHEMA,
                    AttributeDefinitions=self.ATTRIBUTE_DEFINITIONS,
                    BillingMode="PAY_PER_REQUEST",
                )
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") != "ResourceInUseException":
                    raise
                continue
            self._logger.info(f"Created table '{table_name}'")
            waiter = client.get_waiter("table_exists")
            await waiter.wait(TableName=table_name)
