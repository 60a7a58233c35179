from dataclasses import dataclass
import os

from dotenv import load_dotenv

DEFAULT_API_URL = 'http://localhost:8000/api'


@dataclass
class Config:
    database_url: str = None
    secret_key: str = None
    google_client_id: str = None
    google_client_secret: str = None
    oauth_redirect_uri: str = None
    db_pool_min: int = 1
    db_pool_max: int = 20
    api_url: str = DEFAULT_API_URL
    request_timeout: float = 10.0
    log_level: str = 'INFO'

    @property
    def auth_enabled(self):
        return bool(self.google_client_id and self.google_client_secret)

    @classmethod
    def from_env(cls, dotenv=True):
        # Load environment variables
        if dotenv:
            load_dotenv()

        return cls(
            database_url=os.environ.get('DATABASE_URL'),
            secret_key=os.environ.get('SECRET_KEY'),
            google_client_id=os.environ.get('GOOGLE_CLIENT_ID'),
            google_client_secret=os.environ.get('GOOGLE_CLIENT_SECRET'),
            oauth_redirect_uri=os.environ.get('OAUTH_REDIRECT_URI'),
            db_pool_min=int(os.environ.get('DB_POOL_MIN', 1)),
            db_pool_max=int(os.environ.get('DB_POOL_MAX', 20)),
            api_url=os.environ.get('TASKBOARD_API_URL', DEFAULT_API_URL),
            request_timeout=float(os.environ.get('TASKBOARD_TIMEOUT', 10)),
            log_level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
        )
