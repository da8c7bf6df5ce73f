from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).parent

KB = 1024
MB = 1024 * KB


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    service_name: str = "File Metadata Microservice"

    # upload limits
    max_file_size: int = 50 * MB
    max_files: int = 1
    field_name: str = "upfile"

    cors_origins: list[str] = ["*"]
    static_dir: str = str(PACKAGE_DIR / "static")

    @property
    def max_file_size_label(self) -> str:
        size = self.max_file_size
        if size and size % MB == 0:
            return f"{size // MB}MB"
        if size and size % KB == 0:
            return f"{size // KB}KB"
        return f"{size} bytes"


settings = Settings()


def get_settings() -> Settings:
    return settings
