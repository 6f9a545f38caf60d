import configparser

import pytest

from junos_rpc.exception import Fault
from junos_rpc.facts import EngineFacts
from junos_rpc.session import Session
from junos_rpc.transport import Reply


class FakeTransport:
    """execute() に渡された payload を記録し、用意した Reply を順に返す"""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.payloads = []
        self.closed = False

    def execute(self, payload):
        self.payloads.append(payload)
        if not self.replies:
            return Reply()
        reply = self.replies.pop(0)
        if isinstance(reply, str):
            return Reply(data=reply)
        return reply

    def close(self):
        self.closed = True


SOFTWARE_INFORMATION_SINGLE = (
    "<software-information>"
    "<host-name>r1</host-name>"
    "<product-model>mx960</product-model>"
    "<product-name>mx960</product-name>"
    "<package-information>"
    "<name>junos</name>"
    "<comment>JUNOS Software Release [20.4R3.8]</comment>"
    "</package-information>"
    "</software-information>"
)

SOFTWARE_INFORMATION_MULTI = (
    "<multi-routing-engine-results>"
    "<multi-routing-engine-item>"
    "<re-name>fpc0</re-name>"
    "<software-information>"
    "<host-name>sw1</host-name>"
    "<product-model>ex4300-48t</product-model>"
    "<package-information>"
    "<name>junos</name>"
    "<comment>JUNOS EX  Software Suite [21.4R3-S5.4]</comment>"
    "</package-information>"
    "</software-information>"
    "</multi-routing-engine-item>"
    "<multi-routing-engine-item>"
    "<re-name>fpc1</re-name>"
    "<software-information>"
    "<host-name>sw1</host-name>"
    "<product-model>ex4300-32f</product-model>"
    "<package-information>"
    "<name>junos</name>"
    "<comment>JUNOS EX  Software Suite [21.4R3-S4.9]</comment>"
    "</package-information>"
    "</software-information>"
    "</multi-routing-engine-item>"
    "</multi-routing-engine-results>"
)


@pytest.fixture
def fake_transport():
    """空の FakeTransport（テスト内で replies を積む）"""
    return FakeTransport()


@pytest.fixture
def session(fake_transport):
    """MX960 1台構成の Session"""
    return Session(
        fake_transport,
        "r1",
        [EngineFacts(model="MX960", version="20.4R3.8")],
    )


@pytest.fixture
def fault_reply():
    """rpc-error 1件の Reply"""
    return Reply(faults=[Fault(message="syntax error")])


@pytest.fixture
def mock_config():
    """テスト用のインベントリ"""
    cfg = configparser.ConfigParser(allow_no_value=True)
    cfg.read_dict(
        {
            "DEFAULT": {
                "id": "testuser",
                "pw": "testpass",
                "sshkey": "~/.ssh/id_ed25519",
                "port": "830",
            },
            "test-host": {"host": "192.0.2.1"},
        }
    )
    return cfg
