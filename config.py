from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    bot_token: str = Field(..., validation_alias=AliasChoices("BOT_TOKEN", "bot_token"))
    db_url: str = Field("sqlite:///palettes.db", validation_alias=AliasChoices("DB_URL", "db_url"))
    palette_namespace: str = Field("color-palette-studio.v1.palettes",
                                   validation_alias=AliasChoices("PALETTE_NAMESPACE", "palette_namespace"))
    max_dim: int = Field(800, validation_alias=AliasChoices("MAX_DIM", "max_dim"))  # sampler cap, px
    default_count: int = Field(6, validation_alias=AliasChoices("DEFAULT_COUNT", "default_count"))
    max_count: int = Field(20, validation_alias=AliasChoices("MAX_COUNT", "max_count"))  # swatch strip: Telegram photos allow at most 20:1
    sample_step: int = Field(6, validation_alias=AliasChoices("SAMPLE_STEP", "sample_step"))
    max_saved: int = Field(100, validation_alias=AliasChoices("MAX_SAVED", "max_saved"))
    max_active: int = Field(8, validation_alias=AliasChoices("MAX_ACTIVE", "max_active"))
    fetch_timeout: float = Field(20.0, validation_alias=AliasChoices("FETCH_TIMEOUT", "fetch_timeout"))  # seconds
