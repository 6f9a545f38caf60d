"""commit 系のテスト: commit / commit check / commit at / commit confirmed"""

import pytest

from junos_rpc.exception import CommitError, Fault, ParseError, RpcFaultError, format_commit_fault
from junos_rpc.transport import Reply


COMMIT_SUCCESS = (
    "<commit-results>"
    "<routing-engine><name>re0</name><commit-success/></routing-engine>"
    "</commit-results>"
)

COMMIT_ERROR = (
    "<commit-results>"
    "<rpc-error>"
    "<error-type>application</error-type>"
    "<error-severity>error</error-severity>"
    "<error-path>\n[edit interfaces]\n</error-path>"
    "<error-info><bad-element>\nge-0/0/0\n</bad-element></error-info>"
    "<error-message>\nsyntax error\n</error-message>"
    "</rpc-error>"
    "<rpc-error>"
    "<error-severity>error</error-severity>"
    "<error-message>configuration check-out failed</error-message>"
    "</rpc-error>"
    "</commit-results>"
)


class TestCommit:
    """commit() のテスト"""

    def test_success(self, session, fake_transport):
        fake_transport.replies.append(COMMIT_SUCCESS)
        session.commit()
        assert fake_transport.payloads == ["<commit-configuration/>"]

    def test_ok_reply(self, session, fake_transport):
        """<ok/> や空の reply も成功"""
        fake_transport.replies.append("<ok/>")
        session.commit()
        session.commit()

    def test_commit_results_error(self, session, fake_transport):
        """commit-results 内の rpc-error は CommitError、path と message は trim される"""
        fake_transport.replies.append(COMMIT_ERROR)
        with pytest.raises(CommitError) as excinfo:
            session.commit()
        text = str(excinfo.value)
        assert "[edit interfaces]\n    ge-0/0/0\nError: syntax error" in text
        assert "edit interfaces" in text
        assert "syntax error" in text
        assert len(excinfo.value.faults) == 2
        assert excinfo.value.message == "\nsyntax error\n"

    def test_reply_faults(self, session, fake_transport):
        """transport 側の faults も CommitError（RpcFaultError でも捕まえられる）"""
        fake_transport.replies.append(
            Reply(faults=[Fault(path="[edit system]", element="host-name", message="invalid")])
        )
        with pytest.raises(RpcFaultError) as excinfo:
            session.commit()
        assert isinstance(excinfo.value, CommitError)

    def test_malformed(self, session, fake_transport):
        fake_transport.replies.append("<commit-results>")
        with pytest.raises(ParseError):
            session.commit()


class TestCommitCheck:
    """commit_check() のテスト"""

    def test_payload(self, session, fake_transport):
        fake_transport.replies.append(COMMIT_SUCCESS)
        session.commit_check()
        assert fake_transport.payloads == [
            "<commit-configuration><check/></commit-configuration>"
        ]

    def test_idempotent(self, session, fake_transport):
        """変更なしで2回実行しても同じ結果"""
        fake_transport.replies.extend([COMMIT_SUCCESS, COMMIT_SUCCESS])
        assert session.commit_check() is None
        assert session.commit_check() is None
        assert fake_transport.payloads[0] == fake_transport.payloads[1]

    def test_error(self, session, fake_transport):
        fake_transport.replies.append(COMMIT_ERROR)
        with pytest.raises(CommitError):
            session.commit_check()


class TestCommitAt:
    """commit_at() のテスト"""

    def test_payload(self, session, fake_transport):
        session.commit_at("2025-01-02 03:04:00")
        assert fake_transport.payloads == [
            "<commit-configuration><at-time>2025-01-02 03:04:00</at-time>"
            "</commit-configuration>"
        ]

    def test_error(self, session, fake_transport):
        fake_transport.replies.append(COMMIT_ERROR)
        with pytest.raises(CommitError):
            session.commit_at("03:04")


class TestCommitConfirm:
    """commit_confirm() のテスト"""

    def test_payload(self, session, fake_transport):
        session.commit_confirm(5)
        assert fake_transport.payloads == [
            "<commit-configuration><confirmed/>"
            "<confirm-timeout>5</confirm-timeout></commit-configuration>"
        ]

    @pytest.mark.parametrize("delay", [0, -1, "5", 1.5, True])
    def test_invalid_delay(self, session, fake_transport, delay):
        with pytest.raises(ValueError):
            session.commit_confirm(delay)
        assert fake_transport.payloads == []


class TestFormatCommitFault:
    """format_commit_fault() のテスト"""

    def test_trim(self):
        fault = Fault(path="[edit interfaces]", element="\nge-0/0/0\r\n", message="\nsyntax error\n")
        assert format_commit_fault(fault) == (
            "[edit interfaces]\n    ge-0/0/0\nError: syntax error"
        )

    def test_empty_fields(self):
        assert format_commit_fault(Fault(message="failed")) == "[]\n    \nError: failed"
