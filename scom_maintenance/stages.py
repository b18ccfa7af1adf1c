"""Shared steps for the SCOM maintenance mode scripts.

Every step returns a StageResult instead of raising, and run() turns the
first failed step into the process exit code:

    0  maintenance mode toggled
    1  SDK module failed to load
    2  connection to the management server failed
    3  monitored object lookup failed
    4  maintenance mode toggle failed
"""

import getpass
import importlib
import socket
from collections import namedtuple
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from scom_maintenance.config import SCOM_PASSWORD

WINDOWS_COMPUTER_CLASS_ID = "ea99500d-8d52-fc52-b5a5-10dcd1e9d2bd"
MAINTENANCE_REASON = "PlannedOperatingSystemReconfiguration"

SDK_CALLS = (
    "open_connection",
    "list_instances_of_class",
    "start_maintenance",
    "stop_maintenance",
    "close_connection",
)

EXIT_SUCCESS = 0

StageResult = namedtuple("StageResult", ["value", "error"])


@dataclass(frozen=True)
class Credential:
    account: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class StageError:
    detail: str
    stage = "unknown"
    exit_code = 99

    def __str__(self):
        return f"{self.stage}: {self.detail}"


class ModuleLoadError(StageError):
    stage = "load module"
    exit_code = 1


class ScomConnectionError(StageError):
    stage = "connect"
    exit_code = 2


class ResolutionError(StageError):
    stage = "resolve target"
    exit_code = 3


class OperationError(StageError):
    stage = "toggle maintenance"
    exit_code = 4


def ok(value=None):
    return StageResult(value, None)


def failed(error):
    return StageResult(None, error)


def describe(exc):
    """Human readable detail for an SDK failure."""
    return str(exc) or type(exc).__name__


class Lookup(Enum):
    FOUND = "found"
    NOT_FOUND = "not found"
    AMBIGUOUS = "ambiguous"


def find_target(instances, fqdn):
    """Match instances by display name, returning (Lookup, matches)."""
    wanted = fqdn.casefold()
    matches = [i for i in instances if (i.display_name or "").casefold() == wanted]
    if not matches:
        return Lookup.NOT_FOUND, matches
    if len(matches) > 1:
        return Lookup.AMBIGUOUS, matches
    return Lookup.FOUND, matches


def load_module(name):
    try:
        module = importlib.import_module(name)
    except Exception as e:
        return failed(ModuleLoadError(f"Could not import {name}: {describe(e)}"))

    missing = [call for call in SDK_CALLS if not callable(getattr(module, call, None))]
    if missing:
        return failed(ModuleLoadError(f"{name} is missing {', '.join(missing)}"))
    return ok(module)


def connect(sdk, server, credential):
    try:
        return ok(sdk.open_connection(server, credential))
    except Exception as e:
        return failed(ScomConnectionError(f"Could not connect to {server} as {credential.account}: {describe(e)}"))


def resolve(sdk, connection, fqdn):
    try:
        instances = sdk.list_instances_of_class(connection, WINDOWS_COMPUTER_CLASS_ID)
    except Exception as e:
        return failed(ResolutionError(f"Could not list Windows computers: {describe(e)}"))

    try:
        lookup, matches = find_target(instances, fqdn)
    except (TypeError, AttributeError) as e:
        return failed(ResolutionError(f"Unexpected Windows computer list: {describe(e)}"))
    if lookup is Lookup.NOT_FOUND:
        return failed(ResolutionError(f"No monitored object named {fqdn}"))
    if lookup is Lookup.AMBIGUOUS:
        names = ", ".join(str(getattr(m, "id", m)) for m in matches)
        return failed(ResolutionError(f"{len(matches)} monitored objects named {fqdn}: {names}"))
    return ok(matches[0])


def start_maintenance(sdk, monitored_object, end_time, comment):
    try:
        sdk.start_maintenance(monitored_object, end_time, comment, MAINTENANCE_REASON)
    except Exception as e:
        return failed(OperationError(f"Could not start maintenance mode: {describe(e)}"))
    return ok(f"Maintenance mode started until {end_time.isoformat()} ({comment})")


def stop_maintenance(sdk, monitored_object, now_utc):
    try:
        sdk.stop_maintenance(monitored_object, now_utc)
    except Exception as e:
        return failed(OperationError(f"Could not stop maintenance mode: {describe(e)}"))
    return ok(f"Maintenance mode stopped at {now_utc.isoformat()}")


def utc_now():
    return datetime.now(timezone.utc)


def local_fqdn():
    return socket.getfqdn()


def add_connection_arguments(parser):
    parser.add_argument("--server", required=True, help="SCOM management server (host name or URL)")
    parser.add_argument("--username", required=True, help="Account name, e.g. DOMAIN\\user")
    parser.add_argument(
        "--password",
        help="Account password (default: $SCOM_PASSWORD, otherwise prompt)",
    )
    parser.add_argument("--fqdn", default=None, help="Host to put in maintenance (default: this host)")


def read_secret(password=None, env_password=None, prompt=getpass.getpass):
    if password:
        return password
    if env_password is None:
        env_password = SCOM_PASSWORD
    if env_password:
        return env_password
    return prompt("SCOM password: ")


def run(log, sdk_module, server, credential, fqdn, toggle):
    """Load the SDK, connect, resolve fqdn and apply toggle(sdk, object).

    The connection is closed on every path after it was opened.
    """
    log.add_secret(credential.secret)
    log.separator()
    log.log(f"ℹ {log.config.variant_name} maintenance mode for {fqdn} on {server}")
    exit_code = _run(log, sdk_module, server, credential, fqdn, toggle)
    log.log(f"Exit code {exit_code}")
    log.separator()
    return exit_code


def _fail(log, error):
    log.log(f"✗ {error}")
    return error.exit_code


def _run(log, sdk_module, server, credential, fqdn, toggle):
    sdk, error = load_module(sdk_module)
    if error:
        return _fail(log, error)
    log.log(f"✓ Loaded SDK module {sdk_module}")

    connection, error = connect(sdk, server, credential)
    if error:
        return _fail(log, error)
    log.log(f"✓ Connected to {server} as {credential.account}")

    try:
        target, error = resolve(sdk, connection, fqdn)
        if error:
            return _fail(log, error)
        log.log(f"✓ Found monitored object {target.display_name} ({getattr(target, 'id', '?')})")

        message, error = toggle(sdk, target)
        if error:
            return _fail(log, error)
        log.log(f"✓ {message}")
        return EXIT_SUCCESS
    finally:
        try:
            sdk.close_connection(connection)
            log.log(f"ℹ Closed connection to {server}")
        except Exception as e:
            log.log(f"⚠ Warning: Could not close connection to {server}: {describe(e)}")
