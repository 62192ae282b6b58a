"""S3-compatible object storage for uploaded images."""

import logging

import boto3

from catalog.config import S3_CONFIG

logger = logging.getLogger(__name__)


class ObjectStorage:
    """
    Store image blobs in an S3-compatible bucket and hand back public URLs.

    The catalog never reads blobs back; it only records the URL it is given.
    """

    def __init__(self, config: dict | None = None):
        self.config = config or S3_CONFIG
        self._client = None

    @property
    def bucket_name(self) -> str:
        return self.config["bucket"]

    def _get_client(self):
        if self._client is None:
            kwargs = {"region_name": self.config["region"]}
            if self.config.get("endpoint_url"):
                kwargs["endpoint_url"] = self.config["endpoint_url"]
            if self.config.get("access_key_id") and self.config.get("secret_access_key"):
                kwargs["aws_access_key_id"] = self.config["access_key_id"]
                kwargs["aws_secret_access_key"] = self.config["secret_access_key"]
            else:
                logger.warning("AWS credentials not configured, falling back to the default credential chain")
            self._client = boto3.client("s3", **kwargs)
        return self._client

    def public_url(self, object_key: str) -> str:
        base = self.config.get("public_url")
        if base:
            return f"{base.rstrip('/')}/{object_key}"
        return f"https://{self.bucket_name}.s3.{self.config['region']}.amazonaws.com/{object_key}"

    def put(self, object_key: str, data: bytes, content_type: str) -> str:
        """Upload ``data`` under ``object_key`` and return its public URL."""
        self._get_client().put_object(
            Bucket=self.bucket_name,
            Key=object_key,
            Body=data,
            ContentType=content_type,
            ACL="public-read",
        )
        logger.info(f"File uploaded successfully to S3: {object_key}")
        return self.public_url(object_key)


# Singleton instance
storage = ObjectStorage()
