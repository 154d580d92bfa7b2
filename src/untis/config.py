"""Client configuration loaded from environment variables.

Only the surrounding application reads this; the client itself takes plain
constructor arguments (see UntisClient.from_config).
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from src.untis.timecodec import HOUR_OFFSET

DEFAULT_BASE_URL = "https://erato.webuntis.com/WebUntis"


class UntisConfig(BaseSettings):
    """WebUntis configuration loaded from environment variables.

    For local development, create a .env file in the project root.
    """

    untis_base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="WebUntis base URL (server-specific, e.g. erato.webuntis.com)",
    )
    untis_school: str = Field(
        default="",
        description="School login name as used in ?school=",
    )
    untis_user: str = Field(
        default="",
        description="WebUntis username",
    )
    untis_pass: str = Field(
        default="",
        description="WebUntis password",
    )

    # Revalidate against the live server before changing; see timecodec.HOUR_OFFSET
    untis_hour_offset: int = Field(
        default=HOUR_OFFSET,
        description="Hours added to every parsed compact time",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: UntisConfig | None = None


def get_config() -> UntisConfig:
    """Get the client configuration singleton.

    Returns:
        UntisConfig: Client configuration instance
    """
    global _config
    if _config is None:
        _config = UntisConfig()
    return _config
