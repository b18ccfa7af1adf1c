"""In-memory stand-in for the SCOM SDK, loaded by module name in tests."""

from dataclasses import dataclass

calls = []
instances = []
failures = {}


@dataclass(frozen=True)
class Instance:
    id: str
    display_name: str


def reset(names=()):
    calls.clear()
    failures.clear()
    instances[:] = [Instance(id=f"id-{i}", display_name=name) for i, name in enumerate(names)]


def _call(name, *args):
    calls.append((name, args))
    if name in failures:
        raise failures[name]


def open_connection(server, credential):
    _call("open_connection", server, credential)
    return {"server": server}


def list_instances_of_class(connection, class_id):
    _call("list_instances_of_class", connection, class_id)
    return list(instances)


def start_maintenance(monitored_object, end_time, comment, reason):
    _call("start_maintenance", monitored_object, end_time, comment, reason)


def stop_maintenance(monitored_object, now_utc):
    _call("stop_maintenance", monitored_object, now_utc)


def close_connection(connection):
    _call("close_connection", connection)


def called(name):
    return [args for call, args in calls if call == name]
