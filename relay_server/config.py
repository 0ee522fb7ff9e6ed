from pathlib import Path
import os

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class RelaySettings(BaseSettings):
    model_config = SettingsConfigDict(
        # Priority: environment variables > .env file
        env_prefix="RELAY_",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )

    # Listen port keeps the conventional unprefixed PORT variable.
    PORT: int = Field(default=3000, validation_alias="PORT")
    HOST: str = "0.0.0.0"
    CODE_DIGITS: int = Field(default=4, ge=1, le=9)
    SESSION_TTL_SECONDS: float = Field(default=300, gt=0)
    REAPER_INTERVAL_SECONDS: float = Field(default=60, gt=0)
    ROOM_CAPACITY: int = Field(default=2, ge=2)
    # Joiner disconnects are silent by default; set to tell the uploader with `peer-left`.
    NOTIFY_PEER_LEFT: bool = False
    # Count visitors by the first X-Forwarded-For hop (deployed behind a proxy).
    TRUST_PROXY: bool = True
    PUBLIC_DIR: Path = BASE_DIR / "public"


# Load .env before creating the settings instance so pydantic-settings sees it.
for env_path in (BASE_DIR / ".env", Path(os.getcwd()) / ".env"):
    if env_path.exists():
        load_dotenv(env_path, override=False)
        break

config = RelaySettings()
