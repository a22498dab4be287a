"""
config.py - Defaults for where the vault lives and how it behaves
"""
import os

DEFAULT_VAULT_DIR = os.path.expanduser("~/.pocketvault")
DEFAULT_STORE_FILE = "vault.json"

MIN_MASTER_PASSWORD_LENGTH = 8
DEFAULT_AUTO_LOCK_MINUTES = 5

# Store keys, shared with any other front end that reads the same store
VAULT_DATA_KEY = "vault_data"
VALIDATION_KEY = "master_password_validation"
BIOMETRIC_ENABLED_KEY = "biometric_enabled"
AUTO_LOCK_TIMEOUT_KEY = "auto_lock_timeout"
APP_SETTINGS_KEY = "app_settings"

ALL_KEYS = (
    VAULT_DATA_KEY,
    VALIDATION_KEY,
    BIOMETRIC_ENABLED_KEY,
    AUTO_LOCK_TIMEOUT_KEY,
    APP_SETTINGS_KEY,
)


def vault_dir() -> str:
    """POCKETVAULT_HOME if set, otherwise ~/.pocketvault"""
    return os.path.expanduser(os.environ.get("POCKETVAULT_HOME", DEFAULT_VAULT_DIR))


def default_store_path() -> str:
    return os.path.join(vault_dir(), DEFAULT_STORE_FILE)
