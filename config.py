import os
import yaml
from pathlib import Path
from dotenv import load_dotenv

from digest.digest_config import DigestSettings, build_settings

load_dotenv()

# Telegram configuration
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
TELEGRAM_CHAT_ID = os.getenv("TELEGRAM_CHAT_ID", "")

# Digest cycle period
ALERT_INTERVAL_MINUTES = os.getenv("ALERT_INTERVAL_MINUTES", "10")

# Network scope (DexScreener chainId)
DIGEST_CHAIN = os.getenv("DIGEST_CHAIN", "solana")

# Optional YAML overrides for digest/digest_config.py
DIGEST_CONFIG_FILE = os.getenv("DIGEST_CONFIG_FILE", "digest.yaml")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def resolve_config_path(path=None) -> Path:
    """Relative paths are resolved against this directory."""
    config_path = Path(path or DIGEST_CONFIG_FILE)
    if not config_path.is_absolute():
        config_path = Path(__file__).parent / config_path
    return config_path


def load_digest_overrides(path=None) -> dict:
    """
    Load digest overrides from YAML (same shape as DIGEST_CONFIG).

    A missing or empty file means no overrides.

    Raises:
        ValueError: if the file is not a YAML mapping
    """
    config_path = resolve_config_path(path)
    if not config_path.exists():
        return {}
    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping, got {type(data).__name__}")
    return data


def get_alert_interval_seconds(value=None) -> float:
    """ALERT_INTERVAL_MINUTES as seconds. Raises ValueError if not a positive number."""
    raw = ALERT_INTERVAL_MINUTES if value is None else value
    try:
        minutes = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"ALERT_INTERVAL_MINUTES must be a number, got {raw!r}")
    if minutes <= 0:
        raise ValueError(f"ALERT_INTERVAL_MINUTES must be positive, got {raw!r}")
    return minutes * 60


def get_settings(path=None, chain=None) -> DigestSettings:
    """
    Build DigestSettings from defaults, the YAML file and DIGEST_CHAIN.

    Raises:
        ValueError: on invalid thresholds, limits or YAML content
    """
    overrides = load_digest_overrides(path)
    overrides["chain"] = chain or DIGEST_CHAIN
    return build_settings(overrides)


def has_telegram_credentials() -> bool:
    return bool(TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID)
