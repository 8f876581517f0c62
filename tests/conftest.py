import os
import tempfile

# Settings are read at import time; keep the test run independent of the shell
for _name in (
    "GCS_BUCKET_NAME", "GCS_PROJECT_ID", "GCP_PROJECT_ID", "GOOGLE_CLOUD_PROJECT",
    "GCS_KEY_FILE", "GOOGLE_APPLICATION_CREDENTIALS", "GCS_KEY_JSON", "GCS_PUBLIC_ACCESS",
    "FTP_HOST", "FTP_USER", "FTP_PASSWORD", "FTP_BASE_PATH",
):
    os.environ.pop(_name, None)
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="portfolio-media-")
os.environ["LOCAL_STORAGE_ENABLED"] = "true"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.config import BackendKind, FTPConfig, GCSConfig, LocalConfig, StorageConfig  # noqa: E402
from app.dependencies.storage import get_storage  # noqa: E402
from app.main import app  # noqa: E402
from app.storage.facade import StorageService  # noqa: E402
from app.storage.ftp import FTPStorageBackend  # noqa: E402
from app.storage.gcs import GCSHandle, GCSStorageBackend  # noqa: E402
from app.storage.local import LocalStorageBackend  # noqa: E402
from tests.fakes import FakeBucket, FakeFTPServer  # noqa: E402


@pytest.fixture
def local_config(tmp_path):
    return LocalConfig(uploads_dir=str(tmp_path / "uploads"))


@pytest.fixture
def ftp_config():
    return FTPConfig(host="ftp.example.com", user="portfolio", password="secret", base_path="/media")


@pytest.fixture
def gcs_config():
    return GCSConfig(bucket_name="portfolio-media", project_id="portfolio-project")


@pytest.fixture
def ftp_server():
    return FakeFTPServer()


@pytest.fixture
def gcs_bucket():
    return FakeBucket(name="portfolio-media")


@pytest.fixture
def local_backend(local_config):
    return LocalStorageBackend(local_config)


@pytest.fixture
def ftp_backend(ftp_config, ftp_server):
    return FTPStorageBackend(ftp_config, connection_factory=ftp_server.factory)


@pytest.fixture
def gcs_backend(gcs_config, gcs_bucket):
    return GCSStorageBackend(gcs_config, handle=GCSHandle(client=None, bucket=gcs_bucket))


@pytest.fixture
def local_storage(local_config, local_backend):
    """Facade with only the local backend configured."""
    return StorageService(
        StorageConfig(local=local_config),
        backends={BackendKind.LOCAL: local_backend},
    )


@pytest.fixture
def ftp_storage(ftp_config, local_config, ftp_backend, local_backend):
    """Facade with FTP active and a local uploads directory also present."""
    return StorageService(
        StorageConfig(ftp=ftp_config, local=local_config),
        backends={BackendKind.FTP: ftp_backend, BackendKind.LOCAL: local_backend},
    )


@pytest.fixture
def gcs_storage(gcs_config, gcs_backend):
    return StorageService(
        StorageConfig(gcs=gcs_config),
        backends={BackendKind.GCS: gcs_backend},
    )


@pytest.fixture
def use_storage():
    """Route the API's storage dependency to the given facade."""

    def _use(storage: StorageService) -> StorageService:
        app.dependency_overrides[get_storage] = lambda: storage
        return storage

    return _use


@pytest.fixture
def client(local_storage, use_storage):
    """Test client backed by a per-test local storage directory."""
    use_storage(local_storage)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
