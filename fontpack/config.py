import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

load_dotenv()


_PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Filesystem
    tmp_dir: str = os.getenv("TMP_DIR", str(Path.cwd() / "tmp"))
    public_dir: str = os.getenv("PUBLIC_DIR", str(_PROJECT_ROOT / "public"))
    # Leftovers older than this are swept from tmp_dir at startup.
    tmp_max_age_seconds: int = int(os.getenv("TMP_MAX_AGE_SECONDS", "3600"))

    # Upstream provider
    user_agent: str = os.getenv("USER_AGENT", DEFAULT_USER_AGENT)
    fetch_timeout_seconds: float = float(os.getenv("FETCH_TIMEOUT_SECONDS", "60"))
    download_concurrency: int = int(os.getenv("DOWNLOAD_CONCURRENCY", "1"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @field_validator("download_concurrency")
    @classmethod
    def concurrency_is_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("DOWNLOAD_CONCURRENCY must be at least 1")
        return value

    @property
    def http_timeout(self) -> float | None:
        """Timeout handed to httpx; ``None`` waits indefinitely."""
        if self.fetch_timeout_seconds <= 0:
            return None
        return self.fetch_timeout_seconds


settings = Settings()
