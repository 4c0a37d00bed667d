# yogaschool/core/config.py
"""Application configuration using Pydantic."""
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    database_url: str = 'sqlite+aiosqlite:///./yoga_school.db'
    redis_url: str = 'redis://localhost:6379/0'

    app_name: str = 'YogaSchool'
    app_version: str = '1.0.0'
    environment: str = 'development'
    log_level: str = 'info'
    allowed_origins: List[str] = [
        'http://localhost:5173',
        'http://localhost:5174',
        'http://127.0.0.1:5173',
        'http://127.0.0.1:5174',
    ]

    cache_enabled: bool = True
    cache_ttl_seconds: int = 300
    create_tables_on_startup: bool = True

    upload_dir: str = 'uploads'
    chat_upload_max_bytes: int = 10 * 1024 * 1024

    # Forwarding into rooms the forwarder does not belong to is allowed unless this is set
    forward_requires_membership: bool = False
    deleted_message_placeholder: str = 'This message was deleted'

    model_config = {
        'env_file': '.env',
        'extra': 'ignore'
    }

settings = Settings()
