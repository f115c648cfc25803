import logging
import os
from typing import Optional
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

from .base import BaseStorage


logger = logging.getLogger("storage")


class CloudStorage(BaseStorage):
    """
    S3 compatible object storage (DigitalOcean Spaces, AWS S3, MinIO).

    References have the form ``s3://{bucket}/{key}``.
    """

    def __init__(self, client=None, bucket_name: Optional[str] = None):
        """
        Args:
            client: Preconfigured boto3 S3 client. Built from the BUCKET_*
                environment variables when omitted.
            bucket_name: Bucket to use (default: BUCKET_NAME)

        Raises:
            RuntimeError: If required environment variables are missing.
        """
        load_dotenv()
        self.bucket_name = bucket_name or os.getenv("BUCKET_NAME")
        if not self.bucket_name:
            raise RuntimeError("Missing BUCKET_NAME environment variable for cloud storage.")

        if client is None:
            endpoint = os.getenv("BUCKET_ENDPOINT")
            key_id = os.getenv("BUCKET_KEY_ID")
            access_key = os.getenv("BUCKET_ACCESS_KEY")
            if not endpoint or not key_id or not access_key:
                raise RuntimeError(
                    "Missing required environment variables for cloud storage client."
                    " Please ensure BUCKET_ENDPOINT, BUCKET_KEY_ID, and BUCKET_ACCESS_KEY are set."
                )
            session = boto3.session.Session()
            client = session.client(
                "s3",
                region_name=os.getenv("BUCKET_REGION", "ams3"),
                endpoint_url=endpoint,
                aws_access_key_id=key_id,
                aws_secret_access_key=access_key,
            )
        self.client = client

    def make_ref(self, key: str) -> str:
        return f"s3://{self.bucket_name}/{key.lstrip('/')}"

    def _key_from_ref(self, ref: str) -> str:
        parsed = urlparse(ref)
        if parsed.scheme != "s3" or parsed.netloc != self.bucket_name:
            raise ValueError(f"Reference does not belong to bucket {self.bucket_name}: {ref}")
        return parsed.path.lstrip("/")

    def exists(self, key: str) -> bool:
        """
        Check if an object exists in the bucket.

        Returns:
            bool: True if the object exists, False on a 404.

        Raises:
            RuntimeError: On any other storage error.
        """
        try:
            self.client.head_object(Bucket=self.bucket_name, Key=key.lstrip("/"))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise RuntimeError(f"Error checking {key} in cloud storage: {e}")
        return True

    def upload(self, data: bytes, key: str) -> str:
        key = key.lstrip("/")
        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType="audio/wav" if key.endswith(".wav") else "application/octet-stream",
            )
        except (ClientError, BotoCoreError) as e:
            raise RuntimeError(f"Error saving {key} to cloud storage: {e}")
        logger.debug(f"Uploaded {len(data)} bytes to s3://{self.bucket_name}/{key}")
        return self.make_ref(key)

    def download(self, ref: str) -> bytes:
        key = self._key_from_ref(ref)
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise RuntimeError(f"Error downloading {ref} from cloud storage: {e}")

    def delete(self, ref: str) -> None:
        key = self._key_from_ref(ref)
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise RuntimeError(f"Error deleting {ref} from cloud storage: {e}")
