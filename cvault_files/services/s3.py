from typing import List, Optional
from aiobotocore.session import get_session
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from ..models.config import S3Config, MAX_DELETE_BATCH_SIZE
from ..models.files import StoreEntry, DeleteError
from ..errors import StoreUnavailable
from ..utils.files import DEFAULT_MIME_TYPE
import logging

class S3Service(object):

    def __init__(self, config: S3Config):
        """Initiate the S3 service.

        Args:
            config (S3Config): The S3 settings: endpoint, credentials, region,
            bucket, path prefix within the bucket and checksum handling.
        """
        self.config = config
        self.s3_endpoint_url = config.s3_endpoint_url
        self.s3_access_key_id = config.s3_access_key_id
        self.s3_secret_access_key = config.s3_secret_access_key
        self.region = config.region
        self.bucket = config.bucket
        path_prefix = config.path_prefix.lstrip("/")
        self.path_prefix = path_prefix if not path_prefix or path_prefix.endswith("/") else f"{path_prefix}/"
        self.with_checksums = config.with_checksums

    def to_s3_key(self, key: str) -> str:
        """Place a key within the path prefix.

        Args:
            key (str): The key, relative to the path prefix

        Returns:
            str: The full key, ready to be used in S3 queries.
        """
        return f"{self.path_prefix}{key}"

    def from_s3_key(self, s3_key: str) -> str:
        """Remove the path prefix from a S3 key.

        Args:
            s3_key (str): The full S3 key

        Returns:
            str: The key relative to the path prefix.
        """
        if self.path_prefix and s3_key.startswith(self.path_prefix):
            return s3_key[len(self.path_prefix):]
        return s3_key

    async def list_entries(self, prefix: str) -> List[StoreEntry]:
        """List all objects under a prefix, page after page.

        Args:
            prefix (str): The key prefix

        Raises:
            StoreUnavailable: When S3 listing fails

        Returns:
            List[StoreEntry]: The objects in key order.
        """
        s3_prefix = self.to_s3_key(prefix)

        entries = []
        try:
            async with self._create_client() as client:
                paginator = client.get_paginator('list_objects_v2')
                async for page in paginator.paginate(Bucket=self.bucket, Prefix=s3_prefix):
                    for obj in page.get('Contents', []):
                        entries.append(StoreEntry(key=self.from_s3_key(obj['Key']),
                                                  size=obj.get('Size'),
                                                  last_modified=obj.get('LastModified')))
        except (BotoCoreError, ClientError) as e:
            logging.error(f"Listing failed for prefix {s3_prefix}: {e}")
            raise StoreUnavailable(str(e), step="list") from e
        return entries

    async def path_exists(self, key: str) -> bool:
        """Check if an object exists in S3 storage

        Args:
            key (str): Key of the object

        Returns:
            bool: True if object exists, False otherwise
        """
        s3_key = self.to_s3_key(key)

        try:
            async with self._create_client() as client:
                response = await client.head_object(Bucket=self.bucket, Key=s3_key)
                return response["ResponseMetadata"]["HTTPStatusCode"] == 200
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise StoreUnavailable(str(e), step="head") from e
        except BotoCoreError as e:
            raise StoreUnavailable(str(e), step="head") from e

    async def put_object(self, key: str, body: bytes = b"", content_type: Optional[str] = None) -> int:
        """Perform the data upload to S3

        Args:
            key (str): Key of the object
            body (bytes, optional): Object content. Defaults to empty, as for folder markers.
            content_type (str, optional): Object mimetype. Defaults to None.

        Raises:
            StoreUnavailable: When S3 upload fails

        Returns:
            int: The object size in bytes
        """
        s3_key = self.to_s3_key(key)
        put_kwargs = {
            'Bucket': self.bucket,
            'Key': s3_key,
            'Body': body,
        }
        if content_type:
            put_kwargs['ContentType'] = content_type

        try:
            async with self._create_client() as client:
                await client.put_object(**put_kwargs)
        except (BotoCoreError, ClientError) as e:
            logging.error(f"Upload failed for {s3_key}: {e}")
            raise StoreUnavailable(str(e), step="put") from e
        logging.info(f"File uploaded path : {self.s3_endpoint_url}/{self.bucket}/{s3_key}")
        return len(body)

    async def generate_upload_url(self, key: str, content_type: str = DEFAULT_MIME_TYPE, expires_in: int = None) -> str:
        """Make a presigned URL to upload an object directly to S3.

        Args:
            key (str): Key of the object
            content_type (str, optional): Content type the upload must declare.
            expires_in (int, optional): URL lifetime in seconds. Defaults to the configured upload expiry.

        Returns:
            str: The presigned PUT URL
        """
        params = {
            'Bucket': self.bucket,
            'Key': self.to_s3_key(key),
            'ContentType': content_type,
        }
        return await self._presign('put_object', params, expires_in or self.config.upload_url_expiry)

    async def generate_download_url(self, key: str, expires_in: int = None) -> str:
        """Make a presigned URL to download an object as an attachment.

        Args:
            key (str): Key of the object
            expires_in (int, optional): URL lifetime in seconds. Defaults to the configured download expiry.

        Returns:
            str: The presigned GET URL
        """
        params = {
            'Bucket': self.bucket,
            'Key': self.to_s3_key(key),
            'ResponseContentDisposition': 'attachment',
        }
        return await self._presign('get_object', params, expires_in or self.config.download_url_expiry)

    async def delete_object(self, key: str) -> str:
        """Delete an object from S3 storage, absent objects are not an error.

        Args:
            key (str): Key of the object

        Raises:
            StoreUnavailable: When S3 delete fails

        Returns:
            str: The deleted S3 key
        """
        s3_key = self.to_s3_key(key)

        try:
            async with self._create_client() as client:
                await client.delete_object(Bucket=self.bucket, Key=s3_key)
        except (BotoCoreError, ClientError) as e:
            logging.error(f"Delete failed for {s3_key}: {e}")
            raise StoreUnavailable(str(e), step="delete") from e
        logging.info(f"File deleted path : {self.s3_endpoint_url}/{self.bucket}/{s3_key}")
        return s3_key

    async def delete_objects(self, keys: List[str]) -> List[DeleteError]:
        """Delete several objects in a single S3 request.

        Args:
            keys (List[str]): Keys of the objects, at most 1000

        Raises:
            StoreUnavailable: When the S3 request fails as a whole

        Returns:
            List[DeleteError]: The keys that could not be deleted, empty on full success
        """
        if not keys:
            return []
        if len(keys) > MAX_DELETE_BATCH_SIZE:
            raise ValueError(f"Cannot delete more than {MAX_DELETE_BATCH_SIZE} objects at once")
        objects = [{'Key': self.to_s3_key(key)} for key in keys]

        try:
            async with self._create_client() as client:
                response = await client.delete_objects(
                    Bucket=self.bucket,
                    Delete={'Objects': objects, 'Quiet': True})
        except (BotoCoreError, ClientError) as e:
            logging.error(f"Bulk delete of {len(objects)} objects failed: {e}")
            raise StoreUnavailable(str(e), step="delete") from e

        errors = [DeleteError(key=self.from_s3_key(error.get('Key', '')),
                              code=error.get('Code'),
                              message=error.get('Message'))
                  for error in response.get('Errors', [])]
        logging.info(
            f"Files deleted : {len(objects) - len(errors)}/{len(objects)} in {self.s3_endpoint_url}/{self.bucket}")
        return errors

    #
    # Private methods
    #

    async def _presign(self, client_method: str, params: dict, expires_in: int) -> str:
        try:
            async with self._create_client() as client:
                return await client.generate_presigned_url(
                    client_method, Params=params, ExpiresIn=expires_in)
        except (BotoCoreError, ClientError) as e:
            raise StoreUnavailable(str(e), step="presign") from e

    def _create_client(self):
        """Create an S3 client using the provided credentials and endpoint URL.

        Returns:
            Any: The S3 client.
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
