"""
Logging setup for the API process.

Root logger writes to the console and to logs/monetizepro.log, rotated at
midnight. With LOG_MASK_SECRETS on, both handlers pass records through
SecretMaskingFilter so access tokens, passwords and emails never reach disk.
"""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Pattern

import config

LOG_FORMAT = '%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class SecretMaskingFilter(logging.Filter):
    """Rewrites record message and string args, never drops a record."""

    PATTERNS: list[tuple[Pattern, str]] = [
        # Session tokens (token=..., "access_token": "...")
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-:]{20,})(["\']?)', re.IGNORECASE),
         r'\1[REDACTED_TOKEN]\3'),
        (re.compile(r'(Bearer\s+)([A-Za-z0-9_\-\.]+)', re.IGNORECASE), r'\1[REDACTED_BEARER_TOKEN]'),
        (re.compile(r'(password(?:_hash)?["\']?\s*[:=]\s*["\']?)([^\s"\']+)(["\']?)', re.IGNORECASE),
         r'\1[REDACTED_PASSWORD]\3'),
        (re.compile(r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b'), '[REDACTED_EMAIL]'),
    ]

    @classmethod
    def mask(cls, text: str) -> str:
        for pattern, replacement in cls.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = self.mask(str(record.msg))
        if record.args:
            record.args = tuple(self.mask(arg) if isinstance(arg, str) else arg for arg in record.args)
        return True


def _handlers(log_dir: Path, retention_days: int) -> list[logging.Handler]:
    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_dir / "monetizepro.log",
        when="midnight",
        backupCount=retention_days,
        encoding="utf-8"
    )
    return [file_handler, logging.StreamHandler()]


def setup_logging(log_dir: Path = Path("logs")):
    """
    Configure the root logger once at startup (run.py).

    Level, retention and masking come from config.LOG_LEVEL,
    config.LOG_RETENTION_DAYS and config.LOG_MASK_SECRETS.
    """
    log_dir.mkdir(exist_ok=True)
    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    for handler in _handlers(log_dir, config.LOG_RETENTION_DAYS):
        handler.setFormatter(formatter)
        handler.setLevel(level)
        if config.LOG_MASK_SECRETS:
            handler.addFilter(SecretMaskingFilter())
        root_logger.addHandler(handler)

    logging.info(f"Logging initialized: level={config.LOG_LEVEL}, retention={config.LOG_RETENTION_DAYS} days, "
                 f"masking={'on' if config.LOG_MASK_SECRETS else 'off'}")
