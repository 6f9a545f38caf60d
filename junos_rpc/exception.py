"""Exception hierarchy and the Fault record.

Exception tree::

    JunosRpcError
    ├── TransportError
    ├── RpcFaultError
    │   └── CommitError
    ├── ParseError
    │   └── VersionParseError
    └── EmptyResultError
        └── NoSuchFileError
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Fault:
    """One <rpc-error> returned by the device."""

    path: str = ""
    element: str = ""
    message: str = ""


def _trim(text: str) -> str:
    return text.strip("[]\r\n")


def format_commit_fault(fault: Fault) -> str:
    """Render a commit error the way the CLI shows it.

    ex. ``[edit interfaces]\\n    ge-0/0/0\\nError: syntax error``
    """
    return "[%s]\n    %s\nError: %s" % (
        _trim(fault.path),
        _trim(fault.element),
        _trim(fault.message),
    )


class JunosRpcError(Exception):
    """Base class for all junos-rpc errors."""


class TransportError(JunosRpcError):
    """NETCONF session could not be opened, or broke during an RPC."""


class RpcFaultError(JunosRpcError):
    """The device answered with one or more <rpc-error> records.

    :ivar faults: every fault in the order the device returned them
    :ivar message: message of the first fault
    """

    def __init__(self, faults: list[Fault]):
        self.faults = list(faults)
        self.message = self.faults[0].message if self.faults else ""
        super().__init__(self._format())

    def _format(self) -> str:
        return "\n".join(f.message.strip() for f in self.faults)


class CommitError(RpcFaultError):
    """commit-results carried structured errors (path, element, message)."""

    def _format(self) -> str:
        return "\n".join(format_commit_fault(f) for f in self.faults)


class ParseError(JunosRpcError):
    """Reply could not be parsed into the expected shape."""


class VersionParseError(ParseError):
    """Package comment has no bracketed version token."""


class EmptyResultError(JunosRpcError):
    """The device returned no data where some was expected."""


class NoSuchFileError(EmptyResultError):
    """file-list reported that the requested path does not exist."""
