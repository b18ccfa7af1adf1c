import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime

SEPARATOR = "=" * 60
REDACTED = "********"
# shorter secrets would mask ordinary words in every line
MIN_SECRET_LENGTH = 6


@dataclass(frozen=True)
class MaintenanceLogConfig:
    log_root: str
    log_subdir: str
    variant_name: str

    @property
    def log_dir(self):
        return os.path.join(self.log_root, self.log_subdir)


class RedactSecrets(logging.Filter):
    """Replace registered secrets in every record before it is emitted."""

    def __init__(self, secrets=()):
        super().__init__()
        self.secrets = []
        for secret in secrets:
            self.add(secret)

    def add(self, secret):
        if secret and len(secret) >= MIN_SECRET_LENGTH and secret not in self.secrets:
            self.secrets.append(secret)

    def filter(self, record):
        message = record.getMessage()
        for secret in self.secrets:
            message = message.replace(secret, REDACTED)
        record.msg = message
        record.args = None
        return True


class MaintenanceLog:
    """Timestamped run log written to stdout and an hourly file.

    The file name is fixed when the log is created, so a run that crosses an
    hour boundary keeps writing to the file it started in.
    """

    def __init__(self, config, secrets=(), now=None):
        self.config = config
        started = now or datetime.now()
        os.makedirs(config.log_dir, exist_ok=True)
        self.path = os.path.join(
            config.log_dir,
            f"{config.variant_name}_{started.strftime('%Y-%m-%d')}_{started.strftime('%H')}.log",
        )

        self.redactor = RedactSecrets(secrets)
        self.logger = logging.getLogger(f"scom.maintenance.{config.variant_name}")
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False
        self.close()

        formatter = logging.Formatter("%(asctime)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        for handler in (logging.StreamHandler(sys.stdout), logging.FileHandler(self.path, mode="a", encoding="utf-8")):
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
        self.logger.addFilter(self.redactor)

    def add_secret(self, secret):
        self.redactor.add(secret)

    def log(self, message):
        self.logger.info(message)

    def separator(self):
        self.log(SEPARATOR)

    def close(self):
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        for log_filter in list(self.logger.filters):
            self.logger.removeFilter(log_filter)
