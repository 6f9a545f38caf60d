#
#   Copyright ©︎2022-2025 AIKAWA Shigechika
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Session: facts resolution at connect time and the RPC gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger

from lxml import etree

from junos_rpc.exception import (
    CommitError,
    EmptyResultError,
    NoSuchFileError,
    ParseError,
    RpcFaultError,
)
from junos_rpc.facts import (
    MULTI_RE,
    MULTI_RE_ITEM,
    EngineFacts,
    compare_version,
    format_facts,
    lowest_version,
    parse_chassis_inventory,
    parse_software_information,
)
from junos_rpc.source import LocalFile, RemoteURL, as_source
from junos_rpc.templates import (
    LOAD_INLINE,
    LOAD_URL,
    RPC,
    build_payload,
    config_filter,
    escape,
)
from junos_rpc.transport import (
    NETCONF_PORT,
    DeviceTransport,
    faults_from_element,
    parse_reply,
)

logger = getLogger(__name__)

NO_OUTPUT = "No output available. Please check the syntax of your command."
FORMATS = ("text", "xml")
RESCUE_ACTIONS = ("save", "delete")


@dataclass(frozen=True)
class CommitHistoryEntry:
    sequence: int
    user: str
    method: str
    timestamp: str
    seconds: int | None = None


@dataclass(frozen=True)
class FileEntry:
    name: str
    permissions: str
    owner: str
    group: str
    size: int
    date: str
    seconds: int | None = None


@dataclass(frozen=True)
class FileList:
    path: str
    total: int
    files: list[FileEntry] = field(default_factory=list)


def _int(text, what: str) -> int:
    try:
        return int(text.strip())
    except (AttributeError, ValueError) as e:
        raise ParseError(f"{what}: not an integer: {text!r}") from e


def _element_text(elem) -> str:
    return etree.tostring(elem, encoding="unicode", method="text", with_tail=False)


def _check_xml(body: str):
    try:
        etree.fromstring(f"<configuration>{body}</configuration>")
    except etree.XMLSyntaxError as e:
        raise ValueError(f"malformed xml configuration: {e}") from e


def _check_format(format: str):
    if format not in FORMATS:
        raise ValueError(f"format must be one of {FORMATS}: {format!r}")


def _check_generation(value, what: str):
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{what} must be a non-negative integer: {value!r}")


class Session:
    """NETCONF session to one JUNOS device.

    Created by :func:`connect` (or :func:`resolve`). Calls are synchronous
    and the object is not thread-safe; use one session per thread.
    """

    def __init__(self, transport, hostname: str, platform: list[EngineFacts]):
        self.transport = transport
        self.hostname = hostname
        self.platform = list(platform)

    @property
    def routing_engines(self) -> int:
        return len(self.platform)

    def __repr__(self):
        return (
            f"Session(hostname={self.hostname!r}, "
            f"routing_engines={self.routing_engines}, platform={self.platform!r})"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Close the NETCONF session."""
        logger.debug(f"close: {self.hostname}")
        self.transport.close()

    # --- helpers ---

    def _exec(self, payload: str):
        reply = self.transport.execute(payload)
        if reply.faults:
            logger.debug(f"{self.hostname}: {reply.faults=}")
            raise RpcFaultError(reply.faults)
        return reply

    @staticmethod
    def _text(data: str) -> str:
        """Unwrap <output>/<configuration-text> and return its text.

        A multi-RE reply gives one block per engine, headed by its name.
        """
        root = parse_reply(data)
        if root.tag != MULTI_RE:
            return _element_text(root)
        blocks = []
        for item in root.findall(MULTI_RE_ITEM):
            name = (item.findtext("re-name") or "").strip()
            body = "".join(_element_text(e) for e in item if e.tag != "re-name")
            blocks.append(f"{name}:\n{'-' * 74}\n{body}")
        return "\n".join(blocks)

    def _info_output(self, payload: str, tag: str) -> str:
        reply = self._exec(payload)
        if not reply.data:
            return ""
        root = parse_reply(reply.data)
        if root.tag != tag:
            raise ParseError(f"unexpected reply <{root.tag}>, expected <{tag}>")
        return root.findtext("configuration-information/configuration-output") or ""

    def _commit(self, payload: str):
        reply = self.transport.execute(payload)
        faults = reply.faults
        if not faults and reply.data:
            faults = faults_from_element(parse_reply(reply.data))
        if faults:
            logger.debug(f"{self.hostname}: commit failed: {faults}")
            raise CommitError(faults)

    # --- facts ---

    def print_facts(self):
        print(format_facts(self))

    def hardware(self):
        """Chassis serial number and description per routing engine."""
        reply = self._exec(build_payload(RPC.CHASSIS_INVENTORY))
        return parse_chassis_inventory(reply.data)

    @property
    def running_version(self) -> str | None:
        """Oldest version across the routing engines."""
        return lowest_version(self.platform)

    def compare_version(self, target: str) -> int | None:
        """Compare the running version with ``target``.

        With several routing engines the oldest one counts, so a chassis
        upgraded on one engine only still compares as older.

        :return: 1, 0 or -1 as running is newer, equal or older
        """
        running = self.running_version
        ret = compare_version(running, target)
        logger.debug(f"{self.hostname}: compare_version {running=} {target=} {ret=}")
        return ret

    # --- operational ---

    def run_command(self, command: str, format: str = "text") -> str:
        """Run an operational mode command such as ``show`` or ``request``.

        :param format: ``"text"`` returns the CLI output, ``"xml"`` the raw
            reply XML
        :raises EmptyResultError: the device returned nothing
        """
        _check_format(format)
        reply = self._exec(build_payload(RPC.COMMAND, format, escape(command)))
        if not reply.data:
            raise EmptyResultError(NO_OUTPUT)
        if format == "text":
            return self._text(reply.data)
        return reply.data

    def reboot(self):
        """request system reboot (no confirmation)"""
        logger.info(f"{self.hostname}: request system reboot")
        self._exec(build_payload(RPC.REBOOT))

    def commit_history(self) -> list[CommitHistoryEntry]:
        """show system commit

        :return: entries in device order, newest first
        """
        reply = self._exec(build_payload(RPC.COMMIT_HISTORY))
        if not reply.data:
            raise EmptyResultError("could not load commit history")
        root = parse_reply(reply.data)
        entries = []
        for elem in root.iter("commit-history"):
            dt = elem.find("date-time")
            seconds = None
            if dt is not None and dt.get("seconds") is not None:
                seconds = _int(dt.get("seconds"), "date-time/@seconds")
            entries.append(
                CommitHistoryEntry(
                    sequence=_int(elem.findtext("sequence-number"), "sequence-number"),
                    user=(elem.findtext("user") or "").strip(),
                    method=(elem.findtext("client") or "").strip(),
                    timestamp=(dt.text or "").strip() if dt is not None else "",
                    seconds=seconds,
                )
            )
        return entries

    def files(self, path: str) -> FileList:
        """file list detail <path>

        :raises NoSuchFileError: path does not exist on the device
        """
        directory = path.rstrip("/") + "/"
        reply = self._exec(build_payload(RPC.FILE_LIST, escape(directory)))
        if not reply.data:
            raise EmptyResultError(NO_OUTPUT)
        root = parse_reply(reply.data)

        # 存在しないパスは <output> にエラーメッセージが入る
        if root.find(".//output") is not None:
            raise NoSuchFileError(f"{path}: No such file or directory")

        d = root.find("directory")
        if d is None:
            d = root
        entries = []
        for info in d.findall("file-information"):
            perm = info.find("file-permissions")
            date = info.find("file-date")
            seconds = None
            if date is not None and date.get("seconds") is not None:
                seconds = _int(date.get("seconds"), "file-date/@seconds")
            entries.append(
                FileEntry(
                    name=(info.findtext("file-name") or "").strip(),
                    permissions=(perm.get("format") or "") if perm is not None else "",
                    owner=(info.findtext("file-owner") or "").strip(),
                    group=(info.findtext("file-group") or "").strip(),
                    size=_int(info.findtext("file-size") or "0", "file-size"),
                    date=(date.get("format") or "") if date is not None else "",
                    seconds=seconds,
                )
            )
        total = d.findtext("total-files")
        return FileList(
            path=(d.findtext("directory-name") or directory).strip(),
            total=_int(total, "total-files") if total is not None else len(entries),
            files=entries,
        )

    # --- configuration ---

    def get_config(self, section="full", format: str = "text") -> str:
        """show configuration [section]

        ``section`` is a ``>`` separated path, ex. ``"system>login"`` or
        ``"protocols>ospf>area"``. ``"full"`` returns everything.
        """
        _check_format(format)
        payload = build_payload(RPC.GET_CONFIGURATION, format, config_filter(section))
        reply = self._exec(payload)
        if not reply.data:
            return ""
        if format == "text":
            return self._text(reply.data)
        return reply.data

    def load_config(self, source, syntax: str = "set", commit: bool = False):
        """Load configuration into the candidate.

        :param source: :class:`LocalFile`, :class:`RemoteURL` or
            :class:`Literal`; a ``str`` or list of ``str`` is Literal
        :param syntax: ``"set"``, ``"text"`` or ``"xml"``
        :param commit: commit right after a successful load
        """
        if syntax not in LOAD_INLINE:
            raise ValueError(f"syntax must be one of {tuple(LOAD_INLINE)}: {syntax!r}")
        src = as_source(source)
        if isinstance(src, RemoteURL):
            payload = build_payload(LOAD_URL[syntax], escape(src.url))
        else:
            body = src.read() if isinstance(src, LocalFile) else src.text
            if syntax == "xml":
                _check_xml(body)
            else:
                body = escape(body)
            payload = build_payload(LOAD_INLINE[syntax], body)

        self._exec(payload)
        logger.info(f"{self.hostname}: load configuration ({syntax}) successful")
        if commit:
            self.commit()

    def lock(self):
        self._exec(build_payload(RPC.LOCK))

    def unlock(self):
        self._exec(build_payload(RPC.UNLOCK))

    def commit(self):
        self._commit(build_payload(RPC.COMMIT))
        logger.info(f"{self.hostname}: commit complete")

    def commit_check(self):
        self._commit(build_payload(RPC.COMMIT_CHECK))

    def commit_at(self, time: str):
        """commit at <time>, ex. ``"2025-01-02 03:04:00"`` or ``"03:04"``"""
        self._commit(build_payload(RPC.COMMIT_AT, escape(time)))
        logger.info(f"{self.hostname}: commit scheduled at {time}")

    def commit_confirm(self, delay: int):
        """commit confirmed <delay>: rolled back unless confirmed in time"""
        if isinstance(delay, bool) or not isinstance(delay, int) or delay <= 0:
            raise ValueError(f"delay must be a positive integer: {delay!r}")
        self._commit(build_payload(RPC.COMMIT_CONFIRM, delay))
        logger.info(f"{self.hostname}: commit confirmed {delay}")

    def config_diff(self, rollback: int) -> str:
        """show system rollback 0 compare <rollback>"""
        _check_generation(rollback, "rollback")
        return self._info_output(
            build_payload(RPC.GET_ROLLBACK_COMPARE, rollback), "rollback-information"
        )

    def get_rollback(self, rollback: int) -> str:
        """show system rollback <rollback>"""
        _check_generation(rollback, "rollback")
        return self._info_output(
            build_payload(RPC.GET_ROLLBACK, rollback), "rollback-information"
        )

    def get_rescue(self) -> str:
        """show system configuration rescue"""
        return self._info_output(build_payload(RPC.GET_RESCUE), "rescue-information")

    def rollback_config(self, option):
        """Load rollback <option> (or ``"rescue"``) and commit it."""
        if option == "rescue":
            payload = build_payload(RPC.LOAD_RESCUE)
        else:
            _check_generation(option, "rollback")
            payload = build_payload(RPC.LOAD_ROLLBACK, option)
        self._exec(payload)
        logger.info(f"{self.hostname}: rollback {option} loaded")
        self.commit()

    def rescue(self, action: str):
        """request system configuration rescue save|delete"""
        if action not in RESCUE_ACTIONS:
            raise ValueError(f"rescue action must be one of {RESCUE_ACTIONS}: {action!r}")
        if action == "delete":
            self._exec(build_payload(RPC.RESCUE_DELETE))
        else:
            self._exec(build_payload(RPC.RESCUE_SAVE))
        logger.info(f"{self.hostname}: rescue config {action} successful")


def resolve(transport) -> Session:
    """Gather software information over ``transport`` and build a Session.

    :raises RpcFaultError: the device rejected get-software-information
    :raises ParseError: unknown reply shape or no version token
    """
    reply = transport.execute(build_payload(RPC.SOFTWARE_INFORMATION))
    if reply.faults:
        raise RpcFaultError(reply.faults)
    hostname, platform = parse_software_information(reply.data)
    session = Session(transport, hostname, platform)
    logger.debug(f"resolve: {session!r}")
    return session


def connect(
    host,
    user=None,
    password=None,
    port=NETCONF_PORT,
    ssh_private_key_file=None,
    **kwargs,
) -> Session:
    """Open a NETCONF session to ``host`` and gather its facts.

    :raises TransportError: connection or authentication failure
    """
    transport = DeviceTransport.open(
        host,
        user=user,
        password=password,
        port=port,
        ssh_private_key_file=ssh_private_key_file,
        **kwargs,
    )
    try:
        return resolve(transport)
    except Exception:
        try:
            transport.close()
        except Exception as e:
            logger.debug(f"connect: close after failure: {e}")
        raise
