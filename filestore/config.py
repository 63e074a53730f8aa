# filestore/config.py
import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import logging

# Load variables from .env file located in the project root directory
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path)
else:
    load_dotenv() # Fallback

class Settings(BaseSettings):
    """Loads configuration settings from environment variables and .env file."""

    # --- File Service Endpoint ---
    FILE_SERVICE_URL: str = "http://localhost:8080"
    FILE_ENDPOINT_PATH: str = "file" # Joined onto FILE_SERVICE_URL, e.g. {base}/file

    # --- Transport ---
    HTTP_TIMEOUT: float = 30.0 # Seconds, passed straight to httpx

    # --- Diagnostics ---
    DEBUG_RESPONSES: bool = False # Pretty-print raw response bodies to the log sink

    class Config:
        env_file = '.env'
        env_file_encoding = 'utf-8'
        extra = 'ignore'

# Instantiate settings once for import
settings = Settings()

# --- Logging Setup ---
log_level_str = os.getenv("LOG_LEVEL", "INFO").upper(); log_level = getattr(logging, log_level_str, logging.INFO)
logging.basicConfig(level=log_level, format='%(asctime)s - %(name)s - [%(levelname)s] - %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
logger = logging.getLogger("FileStore_Core")
logging.getLogger("httpx").setLevel(logging.WARNING); logging.getLogger("httpcore").setLevel(logging.WARNING)

# --- Configuration Validation Checks ---
logger.debug(f"FileStore Settings loaded. Log Level: {log_level_str}")
if not settings.FILE_SERVICE_URL.lower().startswith(("http://", "https://")):
    logger.warning(f"FILE_SERVICE_URL does not look like an http(s) URL: {settings.FILE_SERVICE_URL!r}. Requests will fail.")
else:
    logger.debug(f"File service endpoint: {settings.FILE_SERVICE_URL.rstrip('/')}/{settings.FILE_ENDPOINT_PATH.strip('/')}")
if settings.HTTP_TIMEOUT <= 0:
    logger.warning(f"Invalid HTTP_TIMEOUT: {settings.HTTP_TIMEOUT}. httpx will reject it.")
if settings.DEBUG_RESPONSES:
    logger.info("DEBUG_RESPONSES enabled: raw file service responses will be logged.")
