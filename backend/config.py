"""
Runtime configuration for the classroom service.
Values come from the environment (optionally a .env file).
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

STORAGE_BACKENDS = ('memory', 'local', 'sql')


def get_database_uri():
    """Get database URI with PostgreSQL support"""
    db_url = os.environ.get('DATABASE_URL')

    if db_url:
        if db_url.startswith('postgres://'):
            db_url = db_url.replace('postgres://', 'postgresql://', 1)
        return db_url

    return 'sqlite:///classroom_roster.db'


def load_config(overrides=None):
    """
    Build the config mapping used by create_app.
    Explicit overrides win over the environment.
    """
    config = {
        'SECRET_KEY': os.environ.get('SECRET_KEY', 'classroom-dev-key-change-in-production'),
        'CLASSROOM_STORAGE': os.environ.get('CLASSROOM_STORAGE', 'local').lower(),
        'CLASSROOM_DATA_DIR': os.environ.get('CLASSROOM_DATA_DIR', 'classroom_data'),
        'SQLALCHEMY_DATABASE_URI': get_database_uri(),
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SQLALCHEMY_ENGINE_OPTIONS': {
            'pool_recycle': 300,
            'pool_pre_ping': True,
        },
        'STORE_TIMEOUT': float(os.environ.get('STORE_TIMEOUT', 10)),
        'TOKEN_TTL_HOURS': int(os.environ.get('TOKEN_TTL_HOURS', 24)),
        'LOG_LEVEL': os.environ.get('LOG_LEVEL', 'INFO').upper(),
        'MAX_CONTENT_LENGTH': 16 * 1024 * 1024,  # 16MB
    }

    if overrides:
        config.update(overrides)

    if config['CLASSROOM_STORAGE'] not in STORAGE_BACKENDS:
        raise ValueError(
            f"CLASSROOM_STORAGE must be one of: {', '.join(STORAGE_BACKENDS)}"
        )

    return config
