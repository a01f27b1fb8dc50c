import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application settings."""
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///./madeinmy.db')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # passlib schemes, first one is used for new hashes
    PASSWORD_SCHEMES = [
        scheme.strip()
        for scheme in os.getenv('PASSWORD_SCHEMES', 'bcrypt').split(',')
        if scheme.strip()
    ]
    SESSION_COOKIE_NAME = os.getenv('SESSION_COOKIE_NAME', 'session_token')

    PAGE_SIZE = 12
    TRENDING_WINDOW_DAYS = 7
    HOME_LIST_LIMIT = 6
    TOP_LOCATIONS_LIMIT = 5
    COMMENT_MAX_LENGTH = 2000
