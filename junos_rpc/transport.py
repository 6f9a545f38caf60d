"""NETCONF transport adapter over PyEZ ``Device``.

The rest of the package only needs ``execute(payload) -> Reply`` and
``close()``. Anything with that surface can stand in for
:class:`DeviceTransport` (tests use a fake).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from logging import getLogger

from jnpr.junos import Device
from jnpr.junos.exception import ConnectError, RpcError, RpcTimeoutError
from lxml import etree
from ncclient.operations.errors import TimeoutExpiredError

from junos_rpc.exception import Fault, ParseError, TransportError

logger = getLogger(__name__)

NETCONF_PORT = 830


@dataclass(frozen=True)
class Reply:
    """RPC reply: serialized XML payload and any faults."""

    data: str = ""
    faults: list[Fault] = field(default_factory=list)


def parse_reply(data: str):
    """Parse reply data into an element.

    :raises ParseError: empty or malformed XML
    """
    if not data or not data.strip():
        raise ParseError("empty reply")
    try:
        return etree.fromstring(data)
    except (etree.XMLSyntaxError, ValueError) as e:
        raise ParseError(f"malformed reply: {e}") from e


def faults_from_element(elem) -> list[Fault]:
    """Collect every <rpc-error> at or below ``elem``."""
    if elem.tag == "rpc-error":
        errors = [elem]
    else:
        errors = elem.findall(".//rpc-error")
    return [
        Fault(
            path=e.findtext("error-path") or "",
            element=e.findtext("error-info/bad-element") or "",
            message=e.findtext("error-message") or "",
        )
        for e in errors
    ]


def faults_from_rpc_error(err: RpcError) -> list[Fault]:
    """Convert a PyEZ RpcError into Fault records, keeping all of them."""
    from_errs = []
    for e in getattr(err, "errs", None) or []:
        if isinstance(e, dict):
            from_errs.append(
                Fault(
                    path=e.get("edit_path") or "",
                    element=e.get("bad_element") or "",
                    message=e.get("message") or "",
                )
            )
    rsp = getattr(err, "rsp", None)
    from_rsp = faults_from_element(rsp) if etree.iselement(rsp) else []
    # PyEZ のバージョンによって errs と rsp のどちらに全件入るかが違う
    faults = max(from_errs, from_rsp, key=len)
    return faults or [Fault(message=str(err))]


class DeviceTransport:
    """``execute``/``close`` over an opened ``jnpr.junos.Device``."""

    def __init__(self, dev: Device):
        self.dev = dev

    @classmethod
    def open(
        cls,
        host,
        user=None,
        password=None,
        port=NETCONF_PORT,
        ssh_private_key_file=None,
        **kwargs,
    ) -> "DeviceTransport":
        """Open a NETCONF session.

        Extra keyword arguments go to ``Device`` as is (``huge_tree``,
        ``timeout``, ...).

        :raises TransportError: on any ``ConnectError``
        """
        if ssh_private_key_file:
            kwargs["ssh_private_key_file"] = os.path.expanduser(ssh_private_key_file)
        dev = Device(host=host, user=user, passwd=password, port=int(port), **kwargs)
        try:
            # facts は junos_rpc.facts で自前に集めるので PyEZ 側は不要
            dev.open(gather_facts=False)
        except ConnectError as e:
            logger.debug(f"open: {host}: {e!r}")
            raise TransportError(f"{host}: {e}") from e
        logger.info(f"open: connected to {host}:{port}")
        return cls(dev)

    def execute(self, payload: str) -> Reply:
        logger.debug(f"execute: {payload}")
        try:
            rsp = self.dev.execute(payload)
        except etree.XMLSyntaxError as e:
            # PyEZ parses the payload before sending it
            raise ValueError(f"malformed payload: {e}") from e
        except RpcTimeoutError as e:
            raise TransportError(f"RPC timeout: {e}") from e
        except TimeoutExpiredError as e:
            raise TransportError(f"NETCONF timeout: {e}") from e
        except ConnectError as e:
            raise TransportError(str(e)) from e
        except RpcError as e:
            faults = faults_from_rpc_error(e)
            logger.debug(f"execute: {len(faults)} fault(s): {faults}")
            return Reply(faults=faults)

        # 子要素のない <rpc-reply> は True が返る
        if rsp is True or rsp is None:
            return Reply()
        data = etree.tostring(rsp, encoding="unicode")
        logger.debug(f"execute: reply {len(data)} bytes")
        return Reply(data=data)

    def close(self):
        self.dev.close()
        logger.info("close: disconnected")
