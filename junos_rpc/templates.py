"""RPC payload templates.

Each member's value is the XML sent to the device, with ``%s`` / ``%d``
placeholders filled by :func:`build_payload`.
"""

import re
from enum import Enum
from logging import getLogger
from xml.sax.saxutils import escape as _sax_escape

logger = getLogger(__name__)

# section path element, ex. "system", "routing-options"
ELEMENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")


class RPC(Enum):
    COMMAND = '<command format="%s">%s</command>'
    COMMIT = "<commit-configuration/>"
    COMMIT_AT = "<commit-configuration><at-time>%s</at-time></commit-configuration>"
    COMMIT_CHECK = "<commit-configuration><check/></commit-configuration>"
    COMMIT_CONFIRM = (
        "<commit-configuration><confirmed/>"
        "<confirm-timeout>%d</confirm-timeout></commit-configuration>"
    )
    CHASSIS_INVENTORY = "<get-chassis-inventory/>"
    GET_CONFIGURATION = (
        '<get-configuration format="%s"><configuration>%s</configuration></get-configuration>'
    )
    LOAD_SET = (
        '<load-configuration action="set" format="text">'
        "<configuration-set>%s</configuration-set></load-configuration>"
    )
    LOAD_TEXT = (
        '<load-configuration format="text">'
        "<configuration-text>%s</configuration-text></load-configuration>"
    )
    LOAD_XML = (
        '<load-configuration format="xml">'
        "<configuration>%s</configuration></load-configuration>"
    )
    LOAD_URL_SET = '<load-configuration action="set" format="text" url="%s"/>'
    LOAD_URL_TEXT = '<load-configuration format="text" url="%s"/>'
    LOAD_URL_XML = '<load-configuration format="xml" url="%s"/>'
    LOAD_RESCUE = '<load-configuration rescue="rescue"/>'
    LOAD_ROLLBACK = '<load-configuration rollback="%d"/>'
    GET_RESCUE = "<get-rescue-information><format>text</format></get-rescue-information>"
    GET_ROLLBACK = (
        "<get-rollback-information><rollback>%d</rollback>"
        "<format>text</format></get-rollback-information>"
    )
    GET_ROLLBACK_COMPARE = (
        "<get-rollback-information><rollback>0</rollback><compare>%d</compare>"
        "<format>text</format></get-rollback-information>"
    )
    LOCK = "<lock><target><candidate/></target></lock>"
    UNLOCK = "<unlock><target><candidate/></target></unlock>"
    RESCUE_SAVE = "<request-save-rescue-configuration/>"
    RESCUE_DELETE = "<request-delete-rescue-configuration/>"
    SOFTWARE_INFORMATION = "<get-software-information/>"
    REBOOT = "<request-reboot/>"
    COMMIT_HISTORY = "<get-commit-information/>"
    FILE_LIST = "<file-list><detail/><path>%s</path></file-list>"


# load-configuration の syntax 別テンプレート
LOAD_INLINE = {
    "set": RPC.LOAD_SET,
    "text": RPC.LOAD_TEXT,
    "xml": RPC.LOAD_XML,
}
LOAD_URL = {
    "set": RPC.LOAD_URL_SET,
    "text": RPC.LOAD_URL_TEXT,
    "xml": RPC.LOAD_URL_XML,
}


def build_payload(rpc: RPC, *args) -> str:
    """Fill the template of ``rpc`` with ``args``.

    >>> build_payload(RPC.COMMIT_CONFIRM, 5)
    '<commit-configuration><confirmed/><confirm-timeout>5</confirm-timeout></commit-configuration>'
    """
    if not args:
        return rpc.value
    payload = rpc.value % args
    logger.debug(f"build_payload: {rpc.name} {payload=}")
    return payload


def escape(value) -> str:
    """XML-escape text for element content or a double-quoted attribute."""
    return _sax_escape(str(value), {'"': "&quot;"})


def config_filter(section) -> str:
    """Build the <configuration> filter body for a ``>`` separated section path.

    ``"system>login"`` -> ``<system><login/></system>``.
    ``None``, ``""`` and ``"full"`` select the whole configuration.

    :raises ValueError: an empty or non element name in the path
    """
    if section is None or section in ("", "full"):
        return ""
    secs = [s.strip() for s in section.split(">")]
    if "" in secs:
        raise ValueError(f"empty element in section path: {section!r}")
    for s in secs:
        if not ELEMENT_RE.match(s):
            raise ValueError(f"invalid element {s!r} in section path: {section!r}")
    body = "".join(f"<{s}>" for s in secs[:-1])
    body += f"<{secs[-1]}/>"
    body += "".join(f"</{s}>" for s in reversed(secs[:-1]))
    return body
