#!/usr/bin/env python3

import argparse
import sys
from datetime import timedelta

from scom_maintenance.config import SCOM_LOG_ROOT, SCOM_LOG_SUBDIR, SCOM_SDK_MODULE
from scom_maintenance.maintenance_log import MaintenanceLog, MaintenanceLogConfig
from scom_maintenance.stages import (
    Credential,
    add_connection_arguments,
    local_fqdn,
    read_secret,
    run,
    start_maintenance,
    utc_now,
)


def positive_minutes(value):
    minutes = int(value)
    if minutes <= 0:
        raise argparse.ArgumentTypeError(f"duration must be a positive number of minutes, got {value}")
    return minutes


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Put this host in SCOM maintenance mode")
    add_connection_arguments(parser)
    parser.add_argument("--duration", type=positive_minutes, required=True, help="Maintenance duration in minutes")
    parser.add_argument("--comment", required=True, help="Maintenance comment")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    secret = read_secret(args.password)
    started_at = utc_now()
    end_time = started_at + timedelta(minutes=args.duration)

    log = MaintenanceLog(MaintenanceLogConfig(SCOM_LOG_ROOT, SCOM_LOG_SUBDIR, "Enable"), secrets=[secret])
    try:
        return run(
            log,
            SCOM_SDK_MODULE,
            args.server,
            Credential(args.username, secret),
            args.fqdn or local_fqdn(),
            lambda sdk, target: start_maintenance(sdk, target, end_time, args.comment),
        )
    finally:
        log.close()


if __name__ == "__main__":
    sys.exit(main())
