"""
Docextract Configuration
Supports AWS Parameter Store for production settings
"""
import os
from functools import lru_cache

try:
    import boto3
except ImportError:
    boto3 = None


def get_parameter(name: str, default: str = "") -> str:
    """Get parameter from AWS Parameter Store or environment"""
    # Environment variable takes precedence
    env_key = name.upper().replace("-", "_").replace("/", "_")
    if env_key in os.environ:
        return os.environ[env_key]

    # Try AWS Parameter Store in production
    if boto3 and os.environ.get("USE_PARAMETER_STORE"):
        try:
            ssm = boto3.client("ssm", region_name=os.environ.get("AWS_REGION", "us-west-2"))
            path = os.environ.get("PARAMETER_STORE_PATH", "/docextract/prod/")
            response = ssm.get_parameter(Name=f"{path}{name}", WithDecryption=True)
            return response["Parameter"]["Value"]
        except Exception:
            pass

    return default


class Config:
    """Base configuration"""
    # Flask
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-in-production")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Uploads (Flask answers 413 above this)
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", str(10 * 1024 * 1024)))

    # Extraction
    EXTRACT_MIN_CHARS = int(os.environ.get("EXTRACT_MIN_CHARS", "10"))
    EXTRACT_TMP_DIR = os.environ.get("EXTRACT_TMP_DIR", "")
    EXTRACT_TIMEOUT_SECONDS = float(os.environ.get("EXTRACT_TIMEOUT_SECONDS", "25"))

    # CORS for the browser upload form
    CORS_ALLOW_ORIGIN = os.environ.get("CORS_ALLOW_ORIGIN", "*")

    # App Version
    APP_VERSION = os.environ.get("APP_VERSION", "2025.11")
    BUILD_TIME = os.environ.get("BUILD_TIME", "")
    GIT_COMMIT = os.environ.get("GIT_COMMIT", "")


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    # Override with Parameter Store in production
    SECRET_KEY = get_parameter("secret-key", Config.SECRET_KEY)
    EXTRACT_MIN_CHARS = int(get_parameter("extract-min-chars", str(Config.EXTRACT_MIN_CHARS)))
    EXTRACT_TMP_DIR = get_parameter("extract-tmp-dir", Config.EXTRACT_TMP_DIR)
    CORS_ALLOW_ORIGIN = get_parameter("cors-allow-origin", Config.CORS_ALLOW_ORIGIN)


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    EXTRACT_MIN_CHARS = 10
    EXTRACT_TIMEOUT_SECONDS = 0


# Config dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


@lru_cache()
def get_config(env: str = None):
    """Get configuration by environment name"""
    env = env or os.environ.get("FLASK_ENV", "development")
    return config.get(env, config['default'])
