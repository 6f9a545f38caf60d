"""junos-rpc: NETCONF RPC client library for JUNOS devices.

Opens a NETCONF/SSH session through PyEZ, gathers routing engine facts
(hostname, model, version per RE) and wraps a fixed set of RPCs:
operational commands, configuration load/diff/commit/rollback, rescue
config, reboot, commit history and file listing.

Usage::

    from junos_rpc import connect

    with connect("rt1.example.jp", "admin", "secret") as session:
        print(session.hostname, session.platform)
        session.lock()
        session.load_config(["set system host-name rt1"], syntax="set")
        session.commit_check()
        session.commit()
        session.unlock()
"""

__version__ = "0.1.0"

from junos_rpc.exception import (  # noqa: E402
    CommitError,
    EmptyResultError,
    Fault,
    JunosRpcError,
    NoSuchFileError,
    ParseError,
    RpcFaultError,
    TransportError,
    VersionParseError,
)
from junos_rpc.facts import (  # noqa: E402
    ChassisInfo,
    EngineFacts,
    compare_version,
    format_facts,
)
from junos_rpc.session import (  # noqa: E402
    CommitHistoryEntry,
    FileEntry,
    FileList,
    Session,
    connect,
    resolve,
)
from junos_rpc.source import Literal, LocalFile, RemoteURL  # noqa: E402
from junos_rpc.transport import DeviceTransport, Reply  # noqa: E402

__all__ = [
    "ChassisInfo",
    "CommitError",
    "CommitHistoryEntry",
    "DeviceTransport",
    "EmptyResultError",
    "EngineFacts",
    "Fault",
    "FileEntry",
    "FileList",
    "JunosRpcError",
    "Literal",
    "LocalFile",
    "NoSuchFileError",
    "ParseError",
    "RemoteURL",
    "Reply",
    "RpcFaultError",
    "Session",
    "TransportError",
    "VersionParseError",
    "compare_version",
    "connect",
    "format_facts",
    "resolve",
]
