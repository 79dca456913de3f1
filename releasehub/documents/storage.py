"""
PDF storage: Azure Blob Storage when configured, local media otherwise.
"""
import logging
import time
from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import FileSystemStorage
from releasehub.core.exceptions import IntegrationFailure

logger = logging.getLogger('releasehub.documents')


class DocumentStorage:
    """
    Saves rendered PDFs and returns a URL for them.

    Blobs are keyed ``{folder}/{timestamp_ms}-{file_name}``. If Azure is not
    configured, or the upload fails, the file is written under
    ``MEDIA_ROOT/documents/releases/<release_id>/`` instead.
    """

    def __init__(self, account_name='', account_key='', container='', folder='', public_url=''):
        self.account_name = account_name
        self.account_key = account_key
        self.container = container
        self.folder = folder.strip('/')
        self.public_url = public_url.rstrip('/')

    @classmethod
    def from_settings(cls):
        return cls(
            account_name=settings.AZURE_STORAGE_ACCOUNT_NAME,
            account_key=settings.AZURE_STORAGE_ACCOUNT_KEY,
            container=settings.AZURE_STORAGE_CONTAINER,
            folder=settings.AZURE_BLOB_FOLDER,
            public_url=settings.AZURE_PUBLIC_URL,
        )

    @property
    def is_configured(self):
        return bool(self.account_name and self.account_key and self.container)

    def blob_name(self, file_name):
        key = f"{int(time.time() * 1000)}-{file_name}"
        return f"{self.folder}/{key}" if self.folder else key

    def save_pdf(self, content, file_name, release_id):
        if self.is_configured:
            try:
                return self._upload_to_azure(content, file_name)
            except Exception as e:
                logger.warning(f"Azure upload of {file_name} failed, falling back to local storage: {str(e)}")
        return self._save_locally(content, file_name, release_id)

    def _upload_to_azure(self, content, file_name):
        from azure.storage.blob import BlobServiceClient, ContentSettings

        blob_name = self.blob_name(file_name)
        connection_string = (
            f"DefaultEndpointsProtocol=https;AccountName={self.account_name};"
            f"AccountKey={self.account_key};EndpointSuffix=core.windows.net"
        )
        blob_service_client = BlobServiceClient.from_connection_string(connection_string)
        blob_client = blob_service_client.get_blob_client(container=self.container, blob=blob_name)
        blob_client.upload_blob(
            content,
            overwrite=True,
            content_settings=ContentSettings(content_type='application/pdf'),
        )
        url = f"{self.public_url}/{blob_name}" if self.public_url else blob_client.url
        logger.info(f"Uploaded {file_name} to Azure blob {blob_name}")
        return url

    def _save_locally(self, content, file_name, release_id):
        storage = FileSystemStorage()
        path = f"documents/releases/{release_id}/{file_name}"
        try:
            if storage.exists(path):
                storage.delete(path)
            saved_path = storage.save(path, ContentFile(content))
        except OSError as e:
            raise IntegrationFailure('storage', f'could not write {path}: {str(e)}')
        logger.info(f"Saved {file_name} locally at {saved_path}")
        return storage.url(saved_path)
