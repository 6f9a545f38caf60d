"""Routing engine facts: software-information / chassis-inventory parsing.

Devices with a single routing engine answer with the bare fragment::

    <software-information>
      <host-name>rt1</host-name>
      <product-model>mx204</product-model>
      <package-information>
        <name>junos</name>
        <comment>JUNOS Software Release [20.4R3.8]</comment>
      </package-information>
    </software-information>

Dual RE chassis, Virtual Chassis and SRX clusters wrap one fragment per
engine::

    <multi-routing-engine-results>
      <multi-routing-engine-item>
        <re-name>re0</re-name>
        <software-information>...</software-information>
      </multi-routing-engine-item>
      ...
    </multi-routing-engine-results>
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger

from looseversion import LooseVersion

from junos_rpc.exception import ParseError, VersionParseError
from junos_rpc.transport import parse_reply

logger = getLogger(__name__)

MULTI_RE = "multi-routing-engine-results"
MULTI_RE_ITEM = "multi-routing-engine-item"

# JUNOS Software Release [20.4R3.8] -> 20.4R3.8
VERSION_RE = re.compile(r"^.*\[(.*)\]")


@dataclass(frozen=True)
class EngineFacts:
    model: str
    version: str
    name: str | None = None


@dataclass(frozen=True)
class ChassisInfo:
    serial: str
    description: str
    name: str | None = None


def engine_fragments(root, tag: str) -> list:
    """Split a reply into per-engine fragments by its structure.

    :returns: list of ``(re_name, element)``; ``re_name`` is None for a
        single engine reply
    :raises ParseError: the reply is neither ``<tag>`` nor the multi-RE
        wrapper, or the wrapper holds no ``<tag>``
    """
    if root.tag == MULTI_RE:
        frags = []
        for item in root.findall(MULTI_RE_ITEM):
            frag = item.find(tag)
            if frag is None:
                continue
            name = item.findtext("re-name")
            frags.append((name.strip() if name else None, frag))
        if not frags:
            raise ParseError(f"<{MULTI_RE}> has no <{tag}>")
        return frags
    if root.tag == tag:
        return [(None, root)]
    raise ParseError(f"unexpected reply <{root.tag}>, expected <{tag}> or <{MULTI_RE}>")


def extract_version(comment: str | None) -> str:
    """Take the bracketed token out of a package comment.

    :raises VersionParseError: comment missing or without ``[...]``
    """
    if comment is None:
        raise VersionParseError("package-information/comment not found")
    m = VERSION_RE.match(comment.strip())
    if m is None:
        raise VersionParseError(f"version not found in comment: {comment!r}")
    return m.group(1)


def _engine_facts(name, info) -> EngineFacts:
    model = (info.findtext("product-model") or "").strip().upper()
    pkg = info.find("package-information")
    comment = pkg.findtext("comment") if pkg is not None else None
    return EngineFacts(model=model, version=extract_version(comment), name=name)


def parse_software_information(data: str):
    """Parse a get-software-information reply.

    :returns: ``(hostname, [EngineFacts, ...])`` in device order; the
        hostname is taken from the first engine
    """
    root = parse_reply(data)
    frags = engine_fragments(root, "software-information")
    hostname = (frags[0][1].findtext("host-name") or "").strip()
    platform = [_engine_facts(name, info) for name, info in frags]
    logger.debug(f"parse_software_information: {hostname=} {platform=}")
    return hostname, platform


def parse_chassis_inventory(data: str) -> list[ChassisInfo]:
    root = parse_reply(data)
    result = []
    for name, inv in engine_fragments(root, "chassis-inventory"):
        result.append(
            ChassisInfo(
                serial=(inv.findtext("chassis/serial-number") or "").strip(),
                description=(inv.findtext("chassis/description") or "").strip(),
                name=name,
            )
        )
    return result


def _label(model: str) -> str:
    if model.startswith("EX"):
        return "fpc"
    if model.startswith("SRX"):
        return "node"
    return "re"


def format_facts(session) -> str:
    """Facts report, one block per routing engine."""
    lines = [f"Routing Engines/FPC's: {session.routing_engines}", ""]
    for i, p in enumerate(session.platform):
        lines.append(f"{_label(p.model)}{i}")
        lines.append("-" * 74)
        lines.append(f"Hostname: {session.hostname}")
        lines.append(f"Model: {p.model}")
        lines.append(f"Version: {p.version}")
        lines.append("")
    return "\n".join(lines)


def version_key(version: str) -> LooseVersion:
    """Sort key for a Junos version string.

    ``-S`` service releases sort after their base release, so
    ``22.4R3-S6`` > ``22.4R3`` and ``18.4R3-S10`` > ``18.4R3-S9``.
    """
    return LooseVersion(version.strip().replace("-S", "00"))


def compare_version(left: str | None, right: str | None) -> int | None:
    """Order two versions.

    :return: 1, 0 or -1 as ``left`` is newer, equal or older;
        None if either side is missing
    """
    if left is None or right is None:
        return None
    lk, rk = version_key(left), version_key(right)
    return (lk > rk) - (lk < rk)


def lowest_version(platform: list[EngineFacts]) -> str | None:
    """Oldest version running across the routing engines."""
    versions = [p.version for p in platform if p.version]
    if not versions:
        return None
    return min(versions, key=version_key)
