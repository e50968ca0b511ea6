from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str
    LOG_LEVEL: str = "INFO"
    MUNICIPIO_PADRAO: str = "itabuna"
    CYCLE_COUNT: int = 6
    IMPORT_BATCH_SIZE: int = 500


settings = Settings()
