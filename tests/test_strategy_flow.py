# tests/test_strategy_flow.py
"""
测试 SGE 握手策略的流程控制 (Flow Control) [Asyncio Edition]。
覆盖 src/eaccess_core/protocols/sge/strategy.py
"""

import logging
from unittest.mock import AsyncMock, MagicMock, call

import pytest

from eaccess_core.exceptions import AuthError, NetworkError, ParseError, StateError
from eaccess_core.protocols.sge import strategy
from eaccess_core.protocols.sge.fields import Environment, PaymentStatus
from eaccess_core.protocols.sge.packets import Auth
from eaccess_core.state import SessionState, SessionStatus
from eaccess_core.utils import hash_password


@pytest.fixture
def strategy_instance(valid_config):
    """返回一个配置好的 Strategy 实例，NetClient 已 Mock 为异步"""
    state = SessionState()
    net = MagicMock()
    net.send = AsyncMock()
    net.read_line = AsyncMock()

    proto = strategy.ProtocolSGE(valid_config, state, net)
    return proto, net, state


@pytest.fixture
def authenticated(strategy_instance):
    proto, net, state = strategy_instance
    state.status = SessionStatus.AUTHENTICATED
    return proto, net, state


# --- Login Flow ---


@pytest.mark.asyncio
async def test_login_success_flow(strategy_instance, hash_key_line, auth_ok_line):
    """测试完整的认证成功路径 (K -> A)"""
    proto, net, state = strategy_instance
    net.read_line.side_effect = [hash_key_line, auth_ok_line]

    assert await proto.login() is True

    key = hash_key_line.rstrip("\n")
    assert state.status == SessionStatus.AUTHENTICATED
    assert state.hash_key == key
    assert state.account == "TESTACCOUNT"
    assert net.send.call_args_list == [
        call(b"K\n"),
        call(Auth.encode("testaccount", hash_password("secret", key))),
    ]


@pytest.mark.asyncio
async def test_login_rejected(strategy_instance, hash_key_line):
    """不符合成功语法的 A 答复转化为 AuthError，并保留原始答复"""
    proto, net, state = strategy_instance
    net.read_line.side_effect = [hash_key_line, "A\t\tNORECORD\n"]

    with pytest.raises(AuthError) as exc_info:
        await proto.login()

    assert exc_info.value.reply == "A\t\tNORECORD"
    assert isinstance(exc_info.value.__cause__, ParseError)
    assert not state.is_authenticated


@pytest.mark.asyncio
async def test_login_bad_hash_key(strategy_instance):
    proto, net, _ = strategy_instance
    net.read_line.return_value = "\n"

    with pytest.raises(ParseError):
        await proto.login()
    assert net.send.await_count == 1


@pytest.mark.asyncio
async def test_login_network_error(strategy_instance):
    proto, net, _ = strategy_instance
    net.read_line.side_effect = NetworkError("接收超时 (1.0s)")

    with pytest.raises(NetworkError):
        await proto.login()


@pytest.mark.asyncio
async def test_login_warns_on_truncated_password(strategy_instance, auth_ok_line, caplog):
    """密码比 Hash Key 长时给出警告，且只发送 Key 长度的混淆结果"""
    proto, net, _ = strategy_instance
    net.read_line.side_effect = ["abc\n", auth_ok_line]

    with caplog.at_level(logging.WARNING):
        await proto.login()

    assert "截断" in caplog.text
    sent = net.send.call_args_list[1].args[0]
    assert sent == b"A\ttestaccount\t" + hash_password("sec", "abc") + b"\n"


# --- Instance / Character Flow ---


@pytest.mark.asyncio
async def test_list_instances_requires_auth(strategy_instance):
    proto, net, _ = strategy_instance
    with pytest.raises(StateError):
        await proto.list_instances()
    net.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_instances(authenticated, instances_line):
    proto, net, state = authenticated
    net.read_line.return_value = instances_line

    instances = await proto.list_instances()

    net.send.assert_awaited_once_with(b"M\n")
    assert instances.find("GS3") == ("GS3", "GemStone IV")
    assert state.instances == instances.instances


@pytest.mark.asyncio
async def test_list_instances_unparseable(authenticated):
    proto, net, _ = authenticated
    net.read_line.return_value = "X\tgarbage\n"

    with pytest.raises(ParseError):
        await proto.list_instances()


@pytest.mark.asyncio
async def test_list_characters_sends_g_before_c(
    authenticated, general_info_line, characters_line
):
    proto, net, state = authenticated
    net.read_line.side_effect = [general_info_line, characters_line]

    characters = await proto.list_characters("GS3")

    assert net.send.call_args_list == [call(b"G\tGS3\n"), call(b"C\n")]
    assert characters.num_characters == 2
    assert state.node == "GS3"
    assert state.characters == (("W_TEST_001", "Bob"), ("W_TEST_002", "Alice"))
    assert state.status == SessionStatus.INSTANCE_SELECTED


@pytest.mark.asyncio
async def test_node_queries(authenticated):
    proto, net, _ = authenticated
    net.read_line.side_effect = [
        "N\tPRODUCTION|STORM\n",
        "F\tNEED_BILL\n",
        "P\ta\tb\tc\td\te\tf\n",
    ]

    node = await proto.node_info("GS3")
    payment = await proto.payment_status("GS3")
    unknown = await proto.unknown_fields("GS3")

    assert node.environment is Environment.PRODUCTION
    assert payment.status is PaymentStatus.NEED_BILL
    assert unknown.p5 == "f"
    assert net.send.call_args_list == [
        call(b"N\tGS3\n"),
        call(b"F\tGS3\n"),
        call(b"P\tGS3\n"),
    ]


# --- Launch Flow ---


@pytest.mark.asyncio
async def test_launch_requires_instance(authenticated):
    """未发送 G 请求时不允许请求启动信息"""
    proto, net, _ = authenticated
    with pytest.raises(StateError):
        await proto.launch("W_TEST_001")
    net.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_launch(authenticated, launch_line):
    proto, net, state = authenticated
    state.status = SessionStatus.INSTANCE_SELECTED
    net.read_line.return_value = launch_line

    info = await proto.launch("W_TEST_001")

    net.send.assert_awaited_once_with(b"L\tW_TEST_001\tSTORM\n")
    assert info.endpoint == ("storm.gs4.game.play.net", 10024)
    assert state.launch == info
    assert state.status == SessionStatus.LAUNCH_READY


@pytest.mark.asyncio
async def test_launch_problem_reply(authenticated):
    proto, net, state = authenticated
    state.status = SessionStatus.INSTANCE_SELECTED
    net.read_line.return_value = "L\tPROBLEM\n"

    with pytest.raises(ParseError):
        await proto.launch("W_TEST_001")
    assert state.launch is None
