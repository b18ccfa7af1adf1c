#!/usr/bin/env python3

import argparse
import sys

from scom_maintenance.config import SCOM_LOG_ROOT, SCOM_LOG_SUBDIR, SCOM_SDK_MODULE
from scom_maintenance.maintenance_log import MaintenanceLog, MaintenanceLogConfig
from scom_maintenance.stages import (
    Credential,
    add_connection_arguments,
    local_fqdn,
    read_secret,
    run,
    stop_maintenance,
    utc_now,
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Take this host out of SCOM maintenance mode")
    add_connection_arguments(parser)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    secret = read_secret(args.password)

    log = MaintenanceLog(MaintenanceLogConfig(SCOM_LOG_ROOT, SCOM_LOG_SUBDIR, "Disable"), secrets=[secret])
    try:
        return run(
            log,
            SCOM_SDK_MODULE,
            args.server,
            Credential(args.username, secret),
            args.fqdn or local_fqdn(),
            lambda sdk, target: stop_maintenance(sdk, target, utc_now()),
        )
    finally:
        log.close()


if __name__ == "__main__":
    sys.exit(main())
