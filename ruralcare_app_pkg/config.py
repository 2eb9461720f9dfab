# ruralcare_app_pkg/config.py
import os


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration settings."""
    # Application Security
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you_REALLY_should_set_a_secret_key_in_env'
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'you_REALLY_should_set_a_JWT_secret_key_in_env'
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRATION_DAYS = int(os.environ.get('JWT_EXPIRATION_DAYS', 7))

    # Database
    # Default to SQLite if DATABASE_URL is not set in the environment
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///ruralcare.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Store lifecycle: apply pending migrations, then seed empty tables
    AUTO_MIGRATE = _env_flag('AUTO_MIGRATE', True)
    SEED_DEFAULTS = _env_flag('SEED_DEFAULTS', True)

    # Frontend URL (allowed origin for the socket channel)
    FRONTEND_URL = os.environ.get('FRONTEND_URL') or 'http://localhost:5173'


class DevelopmentConfig(Config):
    """Development-specific configuration."""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or os.environ.get('DATABASE_URL') or 'sqlite:///ruralcare_dev.db'


class TestingConfig(Config):
    """Testing-specific configuration."""
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite:///ruralcare_test.db'
    # Tests seed exactly what they need
    SEED_DEFAULTS = False


class ProductionConfig(Config):
    """Production-specific configuration."""
    DEBUG = False
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///ruralcare.db'

    @classmethod
    def validate(cls):
        if cls.SECRET_KEY == 'you_REALLY_should_set_a_secret_key_in_env':
            raise ValueError("SECRET_KEY not set via environment variable for production")
        if cls.JWT_SECRET_KEY == 'you_REALLY_should_set_a_JWT_secret_key_in_env':
            raise ValueError("JWT_SECRET_KEY not set via environment variable for production")


def get_config(config_name=None):
    """Helper function to get the correct config class based on FLASK_ENV."""
    env = (config_name or os.environ.get('FLASK_ENV', 'development')).lower()
    if env == 'production':
        ProductionConfig.validate()
        return ProductionConfig
    elif env == 'testing':
        return TestingConfig
    return DevelopmentConfig
