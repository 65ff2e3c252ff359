from typing import AsyncIterator, Dict, Optional
from aiobotocore.session import get_session
from botocore.config import Config
from io import BytesIO
from ..models.files import ObjectProperties
from .client import StoreClient
from .errors import translate_error, is_not_found
import logging

class S3Service(object):

    def __init__(self, s3_endpoint_url: str, s3_access_key_id: str, s3_secret_access_key: str, region: str, bucket: str, path_prefix: str = "", with_checksums: bool = False, acl: Optional[str] = None):
        """Initiate the S3 service.

        Args:
            s3_endpoint_url (str): The endpoint URL of the S3 service.
            s3_access_key_id (str): The access key ID for S3 authentication.
            s3_secret_access_key (str): The secret access key for S3 authentication.
            region (str): The AWS region where the S3 bucket is located.
            bucket (str): The name of the S3 bucket.
            path_prefix (str, optional): The prefix path within the S3 bucket. Defaults to "".
            with_checksums (bool, optional): Whether to enable checksum handling. When False (default),
            checksum use is disabled for compatibility with S3-compatible services that do not support checksums.
            acl (str, optional): Canned ACL applied to written objects, e.g. "public-read". Defaults to None.
        """
        self.s3_endpoint_url = s3_endpoint_url
        self.s3_access_key_id = s3_access_key_id
        self.s3_secret_access_key = s3_secret_access_key
        self.region = region
        self.path_prefix = path_prefix.strip("/")
        self.bucket = bucket
        self.with_checksums = with_checksums
        self.acl = acl

    def to_s3_key(self, key: str) -> str:
        """Make the S3 object key of a store key, under the path prefix.

        Args:
            key (str): The store key, e.g. "/tenant/folder/file.txt"

        Returns:
            str: The S3 object key, e.g. "prefix/tenant/folder/file.txt"
        """
        relative = key.lstrip("/")
        if self.path_prefix:
            return f"{self.path_prefix}/{relative}"
        return relative

    def from_s3_key(self, s3_key: str) -> str:
        """Make the store key of an S3 object key.

        Args:
            s3_key (str): The S3 object key.

        Returns:
            str: The absolute store key.
        """
        if self.path_prefix and s3_key.startswith(f"{self.path_prefix}/"):
            s3_key = s3_key[len(self.path_prefix) + 1:]
        return f"/{s3_key}"

    def create_client(self):
        """Create an S3 client using the provided credentials and endpoint URL.

        Returns:
            Any: The S3 client, to be used as an async context manager.
        """
        settings = {
            'payload_signing_enabled': False,
            'use_accelerate_endpoint': False,
            'addressing_style': 'path'
        }
        if not self.with_checksums:
            # Completely disable checksums for S3-compatible services that don't support them
            settings['checksum_mode'] = 'DISABLED'
            settings['request_checksum_calculation'] = 'when_required'
            settings['response_checksum_validation'] = 'when_required'
        config = Config(
            s3=settings,
            signature_version='s3v4',
            disable_request_compression=True
        )

        session = get_session()
        return session.create_client(
            's3',
            region_name=self.region,
            endpoint_url=self.s3_endpoint_url,
            aws_secret_access_key=self.s3_secret_access_key,
            aws_access_key_id=self.s3_access_key_id,
            config=config)


class S3StoreClient(StoreClient):
    """
    Object store client on a S3 bucket.
    """

    def __init__(self, s3_service: S3Service):
        self.s3_service = s3_service

    async def exists(self, key: str) -> bool:
        """Check an object exists at the specified key.

        Args:
            key (str): The store key.

        Returns:
            bool: True if the object exists, False otherwise
        """
        s3_key = self.s3_service.to_s3_key(key)
        try:
            async with self.s3_service.create_client() as client:
                await client.head_object(Bucket=self.s3_service.bucket, Key=s3_key)
                return True
        except Exception as e:
            if is_not_found(e):
                return False
            raise translate_error(e, key) from e

    async def get_metadata(self, key: str) -> ObjectProperties:
        """Get the properties of an object.

        Args:
            key (str): The store key.

        Returns:
            ObjectProperties: Size, timestamps and user metadata.
        """
        s3_key = self.s3_service.to_s3_key(key)
        try:
            async with self.s3_service.create_client() as client:
                response = await client.head_object(Bucket=self.s3_service.bucket, Key=s3_key)
        except Exception as e:
            raise translate_error(e, key) from e
        # S3 does not track creation time, an overwrite creates a new object
        return ObjectProperties(
            size=response.get("ContentLength", 0),
            last_modified=response.get("LastModified"),
            creation_time=response.get("LastModified"),
            content_type=response.get("ContentType"),
            metadata=response.get("Metadata", {}))

    async def open_read(self, key: str) -> BytesIO:
        """Read the content of an object.

        Args:
            key (str): The store key.

        Returns:
            BytesIO: The object content.
        """
        s3_key = self.s3_service.to_s3_key(key)
        try:
            async with self.s3_service.create_client() as client:
                response = await client.get_object(Bucket=self.s3_service.bucket, Key=s3_key)
                # Read the content of the S3 object
                content = await response['Body'].read()
        except Exception as e:
            raise translate_error(e, key) from e
        return BytesIO(content)

    async def write(self, key: str, data: bytes, metadata: Optional[Dict[str, str]] = None):
        """Perform the data upload to S3.

        Args:
            key (str): The store key.
            data (bytes): The object content.
            metadata (Dict[str, str], optional): User metadata. Defaults to None.
        """
        s3_key = self.s3_service.to_s3_key(key)
        put_kwargs = {
            'Bucket': self.s3_service.bucket,
            'Key': s3_key,
            'Body': data,
            'Metadata': metadata or {}
        }
        if self.s3_service.acl:
            put_kwargs['ACL'] = self.s3_service.acl
        try:
            async with self.s3_service.create_client() as client:
                await client.put_object(**put_kwargs)
        except Exception as e:
            raise translate_error(e, key) from e
        logging.info(
            f"File uploaded path : {self.s3_service.s3_endpoint_url}/{self.s3_service.bucket}/{s3_key}")

    async def delete(self, key: str):
        """Delete an object from S3 storage. S3 accepts the deletion of an absent
        key, so the object is looked up first.

        Args:
            key (str): The store key.

        Raises:
            NotFoundError: When no object is stored at this key.
        """
        s3_key = self.s3_service.to_s3_key(key)
        try:
            async with self.s3_service.create_client() as client:
                await client.head_object(Bucket=self.s3_service.bucket, Key=s3_key)
                await client.delete_object(Bucket=self.s3_service.bucket, Key=s3_key)
        except Exception as e:
            raise translate_error(e, key) from e
        logging.info(
            f"File deleted path : {self.s3_service.s3_endpoint_url}/{self.s3_service.bucket}/{s3_key}")

    async def list_by_prefix(self, prefix: str, delimiter: Optional[str] = None) -> AsyncIterator[str]:
        """List keys in S3 storage, page by page.

        Args:
            prefix (str): The store key prefix.
            delimiter (str, optional): The hierarchy delimiter. Defaults to None.

        Returns:
            AsyncIterator[str]: The store keys and common prefixes.
        """
        s3_prefix = self.s3_service.to_s3_key(prefix)
        params = {'Bucket': self.s3_service.bucket, 'Prefix': s3_prefix}
        if delimiter:
            params['Delimiter'] = delimiter
        try:
            async with self.s3_service.create_client() as client:
                paginator = client.get_paginator('list_objects_v2')
                async for page in paginator.paginate(**params):
                    for obj in page.get('Contents', []):
                        yield self.s3_service.from_s3_key(obj['Key'])
                    for common_prefix in page.get('CommonPrefixes', []):
                        yield self.s3_service.from_s3_key(common_prefix['Prefix'])
        except Exception as e:
            raise translate_error(e, prefix) from e

    async def copy(self, source_key: str, destination_key: str):
        """Copy an object within the same S3 bucket. The copy is complete when
        the request returns.

        Args:
            source_key (str): The source store key.
            destination_key (str): The destination store key.
        """
        source_s3_key = self.s3_service.to_s3_key(source_key)
        destination_s3_key = self.s3_service.to_s3_key(destination_key)
        copy_kwargs = {
            'Bucket': self.s3_service.bucket,
            'CopySource': {'Bucket': self.s3_service.bucket, 'Key': source_s3_key},
            'Key': destination_s3_key
        }
        if self.s3_service.acl:
            copy_kwargs['ACL'] = self.s3_service.acl
        try:
            async with self.s3_service.create_client() as client:
                await client.copy_object(**copy_kwargs)
        except Exception as e:
            raise translate_error(e, source_key) from e
        logging.info(
            f"File copied path : {self.s3_service.s3_endpoint_url}/{self.s3_service.bucket}/{destination_s3_key}")
