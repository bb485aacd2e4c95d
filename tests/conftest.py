# tests/conftest.py
import sys
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from eaccess_core.config import EAccessConfig


@pytest.fixture
def valid_config():
    """
    [Fixture] 返回一个最小可用的 EAccessConfig 对象。
    """
    return EAccessConfig(
        account="testaccount",
        password="secret",
        host="127.0.0.1",
        port=7900,
        game="GemStone IV",
        character="",
        client_protocol="STORM",
        timeout=1.0,
    )


@pytest.fixture
def hash_key_line() -> str:
    return "abcdefghijklmnopqrstuvwxyzABCDEF\n"


@pytest.fixture
def auth_ok_line() -> str:
    return "A\tTESTACCOUNT\tKEY\t0123456789abcdef\tTest User\n"


@pytest.fixture
def instances_line() -> str:
    return "M\tGS3\tGemStone IV\tDR\tDragonRealms\n"


@pytest.fixture
def general_info_line() -> str:
    return (
        "G\tGemStone IV\tFREE_TO_PLAY\t0\t\t"
        "ROOT=sgc/gs\tMKTG=info/default\tMAIN=main/default\n"
    )


@pytest.fixture
def characters_line() -> str:
    return "C\t2\t2\t0\t0\tW_TEST_001\tBob\tW_TEST_002\tAlice\n"


@pytest.fixture
def launch_line() -> str:
    return (
        "L\tOK\tUPPORT=5535\tGAME=STORM\tGAMECODE=GS3\t"
        "FULLGAMENAME=GemStone IV\tGAMEFILE=STORMFRONT.EXE\t"
        "GAMEHOST=storm.gs4.game.play.net\tGAMEPORT=10024\t"
        "KEY=0123456789abcdef0123456789abcdef\n"
    )


@pytest.fixture
def clean_env(monkeypatch):
    """
    [Fixture] 清空所有 EACCESS_ 环境变量，测试结束后恢复原值。

    先 setenv 再 delenv，确保测试中 (例如 load_dotenv) 新写入的变量也会被撤销。
    """
    from eaccess_core.config import ENV_MAP

    for suffix in ENV_MAP.values():
        monkeypatch.setenv(f"EACCESS_{suffix}", "")
        monkeypatch.delenv(f"EACCESS_{suffix}")
    return monkeypatch
