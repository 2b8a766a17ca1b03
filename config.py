"""
Application Configuration

Centralizes all Flask and application configuration settings.
"""

import os

# Base directory of the application
BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-only-change-in-production')
    JSON_SORT_KEYS = False

    # SQLAlchemy settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///cmv_control.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Display currency
    CURRENCY = os.environ.get('CURRENCY', 'BRL')

    # CMV classification bounds (percent, inclusive); the settings table overrides these
    CMV_EXCELLENT_MAX = os.environ.get('CMV_EXCELLENT_MAX', '25')
    CMV_GOOD_MAX = os.environ.get('CMV_GOOD_MAX', '35')

    # Monthly CMV target for reports
    CMV_MONTHLY_TARGET = os.environ.get('CMV_MONTHLY_TARGET', '30')

    # Inactive products still price existing recipes unless this is set
    STRICT_INACTIVE_PRODUCTS = env_bool('STRICT_INACTIVE_PRODUCTS', False)


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_LEVEL = 'WARNING'
    CMV_EXCELLENT_MAX = '25'
    CMV_GOOD_MAX = '35'
    CMV_MONTHLY_TARGET = '30'
    STRICT_INACTIVE_PRODUCTS = False


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
