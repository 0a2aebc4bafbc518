"""
Application Configuration

Centralizes all Flask and application configuration settings.
"""

import os

# Base directory of the application
BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _database_url():
    url = os.environ.get('DATABASE_URL', 'sqlite:///household.db')
    # Hosted Postgres providers still hand out the old scheme
    return url.replace('postgres://', 'postgresql://', 1)


class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-only-change-in-production')

    # SQLAlchemy settings
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Grocery aggregation
    # 'concat' joins per-unit totals ("1 cup + 200 g"), 'first' keeps the first unit's total
    GROCERY_MIXED_UNIT_POLICY = os.environ.get('GROCERY_MIXED_UNIT_POLICY', 'concat')
    GROCERY_SORT_CASEFOLD = False

    # Recipe import
    RECIPE_IMPORT_TIMEOUT = 10


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_LEVEL = 'WARNING'


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """Get configuration based on environment."""
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
