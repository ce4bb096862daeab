"""
Configuration centrale de l'application via variables d'environnement.
Charger depuis un fichier .env en développement.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Stockage durable (table clé/valeur, équivalent du localStorage navigateur)
    DATABASE_URL: str = "sqlite:///./studenthub.db"

    # Clés des blobs JSON : stables pendant toute la vie de l'application
    STUDENTS_STORAGE_KEY: str = "studentHubData"
    USERS_STORAGE_KEY: str = "studentHubMockUsers"
    CURRENT_USER_STORAGE_KEY: str = "studentHubMockCurrentUser"

    # Backend d'extraction (API Generative Language)
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    EXTRACTION_TIMEOUT_SECONDS: float = 60.0

    # Upload de relevés de notes
    MAX_UPLOAD_SIZE_MB: int = 5

    # Avatar par défaut (suffixé par ?text=<initiale>)
    PLACEHOLDER_AVATAR_URL: str = "https://placehold.co/100x100.png"

    # Environnement
    ENV: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
