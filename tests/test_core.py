# tests/test_core.py
import asyncio
from dataclasses import replace
from unittest.mock import AsyncMock, call, patch

import pytest

from eaccess_core import AuthError, EAccessCore, NetworkError, ProtocolError
from eaccess_core.state import SessionStatus


@pytest.fixture
def mock_net():
    """替换 Core 内部创建的 LineClient"""
    with patch("eaccess_core.core.LineClient") as nc:
        net = nc.return_value
        net.connected = False
        net.connect = AsyncMock()
        net.send = AsyncMock()
        net.read_line = AsyncMock()
        net.close = AsyncMock()
        yield net


@pytest.fixture
def handshake_lines(
    hash_key_line,
    auth_ok_line,
    instances_line,
    general_info_line,
    characters_line,
    launch_line,
):
    return [
        hash_key_line,
        auth_ok_line,
        instances_line,
        general_info_line,
        characters_line,
        launch_line,
    ]


@pytest.mark.asyncio
async def test_core_handshake(valid_config, mock_net, handshake_lines):
    """测试完整握手: K -> A -> M -> G -> C -> L"""
    mock_net.read_line.side_effect = handshake_lines
    events = []

    core = EAccessCore(valid_config, status_callback=lambda s, m: events.append(s))
    info = await core.handshake()

    mock_net.connect.assert_awaited_once()
    assert info.endpoint == ("storm.gs4.game.play.net", 10024)
    assert info.key == "0123456789abcdef0123456789abcdef"

    sent = [c.args[0] for c in mock_net.send.call_args_list]
    assert sent[0] == b"K\n"
    assert sent[1].startswith(b"A\ttestaccount\t")
    assert sent[2:] == [b"M\n", b"G\tGS3\n", b"C\n", b"L\tW_TEST_001\tSTORM\n"]

    assert events == [
        SessionStatus.IDLE,
        SessionStatus.CONNECTING,
        SessionStatus.AUTHENTICATED,
        SessionStatus.INSTANCE_SELECTED,
        SessionStatus.LAUNCH_READY,
    ]
    assert core.state.status == SessionStatus.LAUNCH_READY
    assert core.state.launch == info


@pytest.mark.asyncio
async def test_core_handshake_selects_character_by_name(
    valid_config, mock_net, handshake_lines
):
    mock_net.read_line.side_effect = handshake_lines
    core = EAccessCore(replace(valid_config, game="GS3", character="alice"))

    await core.handshake()

    assert mock_net.send.call_args_list[-1] == call(b"L\tW_TEST_002\tSTORM\n")


@pytest.mark.asyncio
async def test_core_handshake_unknown_game(valid_config, mock_net, handshake_lines):
    mock_net.read_line.side_effect = handshake_lines
    core = EAccessCore(replace(valid_config, game="Modus Operandi"))

    with pytest.raises(ProtocolError, match="找不到实例"):
        await core.handshake()

    assert core.state.status == SessionStatus.ERROR
    assert "Modus Operandi" in core.state.last_error


@pytest.mark.asyncio
async def test_core_handshake_unknown_character(valid_config, mock_net, handshake_lines):
    mock_net.read_line.side_effect = handshake_lines
    core = EAccessCore(replace(valid_config, character="Carol"))

    with pytest.raises(ProtocolError, match="找不到角色"):
        await core.handshake()
    assert core.state.status == SessionStatus.ERROR


@pytest.mark.asyncio
async def test_core_handshake_no_characters(valid_config, mock_net, handshake_lines):
    mock_net.read_line.side_effect = handshake_lines[:4] + ["C\t0\t5\t0\t0\n"]
    core = EAccessCore(valid_config)

    with pytest.raises(ProtocolError, match="没有任何角色"):
        await core.handshake()


@pytest.mark.asyncio
async def test_core_login_rejected(valid_config, mock_net, hash_key_line):
    mock_net.read_line.side_effect = [hash_key_line, "A\t\tPASSWORD\n"]
    core = EAccessCore(valid_config)

    with pytest.raises(AuthError):
        await core.login()

    assert core.state.status == SessionStatus.ERROR
    assert core.state.last_error


@pytest.mark.asyncio
async def test_core_login_connect_error(valid_config, mock_net):
    mock_net.connect.side_effect = NetworkError("连接失败")
    core = EAccessCore(valid_config)

    with pytest.raises(NetworkError):
        await core.login()
    assert core.state.status == SessionStatus.ERROR


@pytest.mark.asyncio
async def test_core_login_skips_when_authenticated(valid_config, mock_net):
    core = EAccessCore(valid_config)
    core._state.status = SessionStatus.AUTHENTICATED

    assert await core.login() is True
    mock_net.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_core_interaction_error_sets_error_state(
    valid_config, mock_net, hash_key_line, auth_ok_line
):
    mock_net.read_line.side_effect = [hash_key_line, auth_ok_line, "M\t\n"]
    core = EAccessCore(valid_config)
    await core.login()

    with pytest.raises(ProtocolError):
        await core.list_instances()
    assert core.state.status == SessionStatus.ERROR


def test_core_state_is_a_copy(valid_config, mock_net):
    core = EAccessCore(valid_config)
    snapshot = core.state
    snapshot.node = "GS3"
    assert core.state.node == ""


@pytest.mark.asyncio
async def test_core_async_listener(valid_config, mock_net):
    received = []

    async def listener(status, msg):
        received.append(status)

    core = EAccessCore(valid_config)
    core.add_listener(listener)
    core.add_listener(listener)

    core._update_status(SessionStatus.CONNECTING, "test")
    await asyncio.sleep(0)

    assert received == [SessionStatus.CONNECTING]

    core.remove_listener(listener)
    core._update_status(SessionStatus.CLOSED, "test")
    await asyncio.sleep(0)
    assert received == [SessionStatus.CONNECTING]


def test_core_listener_error_is_logged(valid_config, mock_net, caplog):
    def broken(status, msg):
        raise RuntimeError("boom")

    core = EAccessCore(valid_config)
    core.add_listener(broken)
    core._update_status(SessionStatus.CONNECTING, "test")

    assert core.state.status == SessionStatus.CONNECTING
    assert "boom" in caplog.text


@pytest.mark.asyncio
async def test_core_context_manager_stops(valid_config, mock_net):
    async with EAccessCore(valid_config) as core:
        pass

    mock_net.close.assert_awaited_once()
    assert core.state.status == SessionStatus.CLOSED
