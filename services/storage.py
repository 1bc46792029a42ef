import logging

from firebase_admin import storage
from google.api_core import exceptions as gcs_exceptions

from services.errors import NotConfigured, ServiceError

logger = logging.getLogger(__name__)

# one hour; replaced images propagate reasonably fast
CACHE_CONTROL = "public, max-age=3600"


class ImageStore:
    """Public image objects in the app's storage bucket."""

    def __init__(self, app, bucket_name=None):
        self._app = app
        self._bucket_name = bucket_name

    def _bucket(self):
        if self._app is None:
            raise NotConfigured("Object storage not configured (FIREBASE_SERVICE_ACCOUNT missing)")
        try:
            return storage.bucket(self._bucket_name, app=self._app)
        except ValueError as exc:
            raise NotConfigured(str(exc))

    def upload(self, object_path: str, data: bytes, content_type: str) -> str:
        bucket = self._bucket()
        blob = bucket.blob(object_path)
        blob.cache_control = CACHE_CONTROL
        try:
            blob.upload_from_string(data, content_type=content_type)
            blob.make_public()
        except gcs_exceptions.GoogleAPIError as exc:
            raise ServiceError(str(exc))
        return f"https://storage.googleapis.com/{bucket.name}/{object_path}"

    def delete(self, object_path: str) -> None:
        bucket = self._bucket()
        try:
            bucket.blob(object_path).delete()
        except gcs_exceptions.NotFound:
            logger.info("storage object already gone: %s", object_path)
        except gcs_exceptions.GoogleAPIError as exc:
            raise ServiceError(str(exc))
