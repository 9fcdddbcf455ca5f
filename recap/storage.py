"""Cloud Storage helpers for audio uploads."""

import logging

from google.cloud import storage

logger = logging.getLogger(__name__)


def upload_if_missing(client: storage.Client, bucket_name: str, object_name: str, local_path: str) -> str:
    """Upload ``local_path`` to ``gs://bucket_name/object_name`` unless it exists.

    An object that is already present is reused as is, which makes re-running
    the pipeline on the same recordings cheap.

    Returns:
        The ``gs://`` URI of the object.
    """
    uri = f"gs://{bucket_name}/{object_name}"
    blob = client.bucket(bucket_name).blob(object_name)
    if blob.exists():
        logger.info("Reusing existing upload %s", uri)
        return uri
    blob.upload_from_filename(local_path)
    logger.info("Uploaded %s to %s", local_path, uri)
    return uri
