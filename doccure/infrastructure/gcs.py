"""
GCS bucket access for the document store.

The client is created lazily on first use so importing the app never needs
credentials.
"""

import logging
import os

from google.cloud import storage

logger = logging.getLogger("gcs-manager")


class GCSBucketManager:
    def __init__(self, bucket_name, service_account_json_path=None):
        """
        :param bucket_name: The name of the GCS bucket.
        :param service_account_json_path: Path to service account JSON key.
                                          If None, uses GOOGLE_APPLICATION_CREDENTIALS
                                          or default environment auth.
        """
        self.bucket_name = bucket_name
        self.service_account_json_path = service_account_json_path
        self._client = None
        self._bucket = None

    def _ensure_initialized(self):
        """Lazy initialization of GCS client and bucket"""
        if self._client is None:
            try:
                project_id = os.getenv("PROJECT_ID")
                if self.service_account_json_path:
                    self._client = storage.Client.from_service_account_json(
                        self.service_account_json_path,
                        project=project_id,
                    )
                else:
                    self._client = storage.Client(project=project_id)

                self._bucket = self._client.bucket(self.bucket_name)

                if not self._bucket.exists():
                    logger.warning(
                        "Bucket '%s' does not exist or you lack permission", self.bucket_name
                    )
            except Exception as e:
                logger.error("Error initializing GCS client: %s", e)
                self._client = None
                raise

    @property
    def client(self):
        self._ensure_initialized()
        return self._client

    @property
    def bucket(self):
        self._ensure_initialized()
        return self._bucket
