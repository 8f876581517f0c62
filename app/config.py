from dataclasses import dataclass
from enum import Enum

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Google Cloud Storage settings
    GCS_BUCKET_NAME: str | None = None
    GCS_PROJECT_ID: str | None = Field(
        None,
        validation_alias=AliasChoices("GCS_PROJECT_ID", "GCP_PROJECT_ID", "GOOGLE_CLOUD_PROJECT"),
    )
    GCS_KEY_FILE: str | None = Field(
        None,
        validation_alias=AliasChoices("GCS_KEY_FILE", "GOOGLE_APPLICATION_CREDENTIALS"),
    )
    GCS_KEY_JSON: str | None = None
    GCS_PUBLIC_ACCESS: bool = False
    GCS_SIGNED_URL_EXPIRY_MINUTES: int = 60

    # FTP settings
    FTP_HOST: str | None = None
    FTP_USER: str | None = None
    FTP_PASSWORD: str | None = None
    FTP_PORT: int = 21
    FTP_SECURE: bool = False
    FTP_BASE_PATH: str = "/"
    FTP_BASE_URL: str | None = None
    FTP_TIMEOUT_SECONDS: int = 30

    # Local storage settings
    UPLOADS_DIR: str = "uploads"
    LOCAL_STORAGE_ENABLED: bool = True

    # Upload settings
    MAX_UPLOAD_SIZE_MB: int = 50
    MAX_FILES_PER_UPLOAD: int = 20

    # "env_file": ".env" 讀取 .env 檔案; "extra": "ignore" 忽略未定義的環境變數
    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()


class BackendKind(str, Enum):
    GCS = "gcs"
    FTP = "ftp"
    LOCAL = "local"


@dataclass(frozen=True)
class LocalConfig:
    uploads_dir: str


@dataclass(frozen=True)
class FTPConfig:
    host: str
    user: str
    password: str
    port: int = 21
    secure: bool = False
    base_path: str = "/"
    base_url: str | None = None
    timeout_seconds: int = 30


@dataclass(frozen=True)
class GCSConfig:
    bucket_name: str
    project_id: str
    key_file: str | None = None
    key_json: str | None = None
    public_access: bool = False
    signed_url_expiry_minutes: int = 60

    @property
    def public_base_url(self) -> str:
        return f"https://storage.googleapis.com/{self.bucket_name}"


@dataclass(frozen=True)
class StorageConfig:
    """
    Immutable storage configuration built once at process start.

    A bundle is None when its required fields are missing, so "configured"
    simply means "present".
    """

    gcs: GCSConfig | None = None
    ftp: FTPConfig | None = None
    local: LocalConfig | None = None

    @classmethod
    def from_settings(cls, source: Settings) -> "StorageConfig":
        gcs = None
        if source.GCS_BUCKET_NAME and source.GCS_PROJECT_ID:
            gcs = GCSConfig(
                bucket_name=source.GCS_BUCKET_NAME,
                project_id=source.GCS_PROJECT_ID,
                key_file=source.GCS_KEY_FILE or None,
                key_json=source.GCS_KEY_JSON or None,
                public_access=source.GCS_PUBLIC_ACCESS,
                signed_url_expiry_minutes=source.GCS_SIGNED_URL_EXPIRY_MINUTES,
            )

        ftp = None
        if source.FTP_HOST and source.FTP_USER and source.FTP_PASSWORD:
            ftp = FTPConfig(
                host=source.FTP_HOST,
                user=source.FTP_USER,
                password=source.FTP_PASSWORD,
                port=source.FTP_PORT,
                secure=source.FTP_SECURE,
                base_path=source.FTP_BASE_PATH or "/",
                base_url=source.FTP_BASE_URL,
                timeout_seconds=source.FTP_TIMEOUT_SECONDS,
            )

        local = None
        if source.LOCAL_STORAGE_ENABLED and source.UPLOADS_DIR:
            local = LocalConfig(uploads_dir=source.UPLOADS_DIR)

        return cls(gcs=gcs, ftp=ftp, local=local)
