"""
Configuration settings for the Comporto tracker

This file centralizes all configuration values to eliminate hardcoded constants
and improve maintainability. Load values from environment variables with fallbacks.
"""

import os
from datetime import timedelta

class Config:
    """Base configuration class with all application settings"""

    # Flask Application Settings
    SECRET_KEY = os.environ.get('SESSION_SECRET') or 'dev-secret-key-please-change-in-production'
    FLASK_DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() == 'true'

    # Database Configuration
    DATABASE_URL = os.environ.get('DATABASE_URL')
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL environment variable is required for the database connection")
    DATABASE_POOL_RECYCLE = int(os.environ.get('DATABASE_POOL_RECYCLE', '300'))  # 5 minutes
    DATABASE_POOL_PRE_PING = os.environ.get('DATABASE_POOL_PRE_PING', 'True').lower() == 'true'

    # Storage backend per CCNL/dipendenti/assenze: 'database' o 'memory'
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'database').lower()

    # Server Configuration
    SERVER_HOST = os.environ.get('SERVER_HOST', '0.0.0.0')
    SERVER_PORT = int(os.environ.get('SERVER_PORT', '5000'))

    # Security Settings
    SESSION_TIMEOUT = timedelta(hours=int(os.environ.get('SESSION_TIMEOUT_HOURS', '8')))

    # Application Limits and Constraints
    MAX_UPLOAD_SIZE = int(os.environ.get('MAX_UPLOAD_SIZE', '16777216'))  # 16MB

    # Import / Export
    IMPORT_ALLOWED_EXTENSIONS = ['xlsx', 'csv']
    EXPORT_PLACEHOLDER = os.environ.get('EXPORT_PLACEHOLDER', '-')
    EXPORT_TITLE = os.environ.get('EXPORT_TITLE', 'Report Comporto Dipendenti')

    # Date and Time Formatting
    DEFAULT_DATE_FORMAT = os.environ.get('DEFAULT_DATE_FORMAT', '%d/%m/%Y')

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.environ.get('LOG_FORMAT', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

class DevelopmentConfig(Config):
    """Development environment configuration"""
    FLASK_DEBUG = True

class ProductionConfig(Config):
    """Production environment configuration"""
    FLASK_DEBUG = False

class TestingConfig(Config):
    """Testing environment configuration"""
    TESTING = True
    WTF_CSRF_ENABLED = False

# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

def get_config():
    """Get the current configuration based on environment"""
    env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
