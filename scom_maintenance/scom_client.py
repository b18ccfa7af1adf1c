# SCOM web console REST API, see
# https://learn.microsoft.com/en-us/rest/operationsmanager/
#
# authenticate and data/state follow the "Authentication" and "Data - Get
# State" operations of that reference. The maintenance mode paths and their
# payload fields (ids, endTime, comments, reason) are not covered by it and
# must be checked against the management server version in use.

import base64
from dataclasses import dataclass, field
from urllib.parse import unquote

import requests

from scom_maintenance.config import SCOM_VERIFY_TLS

AUTHENTICATE_PATH = "/OperationsManager/authenticate"
STATE_PATH = "/OperationsManager/data/state"
START_MAINTENANCE_PATH = "/OperationsManager/data/maintenanceMode"
STOP_MAINTENANCE_PATH = "/OperationsManager/data/maintenanceMode/stop"
CSRF_HEADER = "SCOM-CSRF-TOKEN"


class ScomApiError(Exception):
    def __init__(self, action, status_code, detail):
        self.action = action
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Failed to {action}: HTTP {status_code} ({detail})")


@dataclass
class ScomConnection:
    base_url: str
    session: requests.Session = field(repr=False)


@dataclass(frozen=True)
class MonitoredObject:
    id: str
    display_name: str
    path: str = ""
    connection: ScomConnection = field(default=None, repr=False, compare=False)


def base_url(server):
    server = server.rstrip("/")
    if server.startswith(("http://", "https://")):
        return server
    return f"https://{server}"


def encode_credential(credential):
    raw = f"(Network):{credential.account}:{credential.secret}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def error_detail(response):
    try:
        return response.json()
    except ValueError:
        return response.text


def check_response(response, action):
    if response.status_code not in (200, 201, 204):
        raise ScomApiError(action, response.status_code, error_detail(response))
    return response


def open_connection(server, credential, verify=SCOM_VERIFY_TLS):
    """Authenticate to the management server and return a connection."""
    url = base_url(server)
    session = requests.Session()
    session.verify = verify
    session.headers.update({"Content-Type": "application/json"})

    try:
        response = session.post(f"{url}{AUTHENTICATE_PATH}", json=encode_credential(credential))
        check_response(response, "authenticate")
    except Exception:
        session.close()
        raise

    csrf_token = session.cookies.get(CSRF_HEADER)
    if csrf_token:
        session.headers[CSRF_HEADER] = unquote(csrf_token)

    return ScomConnection(base_url=url, session=session)


def list_instances_of_class(connection, class_id):
    """List every instance of a class visible through the connection."""
    data = {
        "classId": class_id,
        "criteria": "",
        "displayColumns": ["id", "displayname", "path"],
    }
    response = connection.session.post(f"{connection.base_url}{STATE_PATH}", json=data)
    check_response(response, "list class instances")

    instances = []
    for row in response.json().get("rows", []):
        instances.append(
            MonitoredObject(
                id=row["id"],
                display_name=row.get("displayname", ""),
                path=row.get("path") or "",
                connection=connection,
            )
        )
    return instances


def start_maintenance(monitored_object, end_time, comment, reason):
    connection = monitored_object.connection
    data = {
        "ids": [monitored_object.id],
        "endTime": end_time.isoformat(),
        "comments": comment,
        "reason": reason,
    }
    response = connection.session.post(f"{connection.base_url}{START_MAINTENANCE_PATH}", json=data)
    check_response(response, "start maintenance mode")


def stop_maintenance(monitored_object, now_utc):
    connection = monitored_object.connection
    data = {
        "ids": [monitored_object.id],
        "endTime": now_utc.isoformat(),
    }
    response = connection.session.post(f"{connection.base_url}{STOP_MAINTENANCE_PATH}", json=data)
    check_response(response, "stop maintenance mode")


def close_connection(connection):
    connection.session.close()
