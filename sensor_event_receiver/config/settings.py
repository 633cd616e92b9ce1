"""Application configuration settings."""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Config:
    """アプリケーション設定"""
    # Serial communication settings
    SERIAL_PORT: str = os.environ.get("SERIAL_PORT", "/dev/ttyACM0")
    BAUD_RATE: int = int(os.environ.get("BAUD_RATE", "9600"))
    RECONNECT_DELAY: float = float(os.environ.get("RECONNECT_DELAY", "5.0"))

    # Trigger rule: レコードの id がこの値ならジャンプイベントを発行
    TRIGGER_ID: int = int(os.environ.get("TRIGGER_ID", "2"))

    # Bounded log settings (raw / record 各チャネルの保持件数)
    LOG_CAPACITY: int = int(os.environ.get("LOG_CAPACITY", "100"))

    # Stall watchdog settings
    FRAME_TIMEOUT: float = float(os.environ.get("FRAME_TIMEOUT", "2.0"))  # フレーム途中で無通信が続いたらリセット
    WATCHDOG_INTERVAL: float = float(os.environ.get("WATCHDOG_INTERVAL", "1.0"))

    # Test environment detection
    IS_TEST_ENV: bool = os.environ.get("PYTEST_CURRENT_TEST") is not None

    # Debug settings
    DEBUG_FRAME_PARSING: bool = os.environ.get("DEBUG_FRAME_PARSING", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL


# Global configuration instance
config = Config()
