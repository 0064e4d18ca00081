"""
FastAPI Application Configuration
"""
import os
from dotenv import load_dotenv
from typing import List

load_dotenv()


class Settings:
    """Application Settings"""

    # Environment
    ENV = os.getenv("ENV", "development")
    DEBUG = ENV == "development"

    # API Configuration
    API_TITLE = "Captain's Log API"
    API_VERSION = "1.0.0"
    API_DESCRIPTION = "Trip planning and voyage log mirrored from a Trello board"

    # Security (session tokens issued by the Trello login flow)
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRATION_HOURS = 24 * 7

    # CORS Configuration
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5000").split(",")
    ]
    CORS_ALLOW_CREDENTIALS = True
    CORS_ALLOW_METHODS = ["*"]
    CORS_ALLOW_HEADERS = ["*"]

    # Server Configuration
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "5000"))
    WORKERS = int(os.getenv("WORKERS", "4"))

    # Trello Configuration
    TRELLO_API_URL = os.getenv("TRELLO_API_URL", "https://api.trello.com/1")
    TRELLO_BOARD_ID = os.getenv("TRELLO_BOARD_ID", "")
    TRELLO_KEY = os.getenv("TRELLO_KEY", "")
    TRELLO_TOKEN = os.getenv("TRELLO_TOKEN", "")
    TRIPS_LIST_NAME = os.getenv("TRIPS_LIST_NAME", "Trips")
    COMMENT_PAGE_SIZE = int(os.getenv("COMMENT_PAGE_SIZE", "1000"))
    REQUEST_TIMEOUT = 10  # seconds

    # Voyage Configuration
    DEFAULT_SPEED_KNOTS = float(os.getenv("DEFAULT_SPEED_KNOTS", "5"))
    DIESEL_TANK_LITRES = float(os.getenv("DIESEL_TANK_LITRES", "100"))
    POSITION_REFRESH_SECONDS = 60

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    def missing_trello_config(self) -> List[str]:
        """Names of required Trello settings that are not set"""
        required = {
            "TRELLO_BOARD_ID": self.TRELLO_BOARD_ID,
            "TRELLO_KEY": self.TRELLO_KEY,
            "TRELLO_TOKEN": self.TRELLO_TOKEN,
        }
        return [name for name, value in required.items() if not value]


# Create settings instance
settings = Settings()
