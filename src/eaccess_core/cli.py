# src/eaccess_core/cli.py
"""
eAccess 命令行入口

读取 .env / TOML / 环境变量 / 命令行参数组成配置，执行一次完整握手，
打印连接游戏服务器所需的主机、端口与会话 Key。
"""

import argparse
import asyncio
import getpass
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from . import __version__
from .config import (
    EAccessConfig,
    create_config_from_dict,
    read_env_values,
    read_toml_values,
)
from .core import EAccessCore
from .exceptions import AuthError, ConfigError, EAccessError
from .protocols.sge.packets import LaunchInfo
from .state import SessionStatus

logger = logging.getLogger("EAccessCLI")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eaccess-core",
        description="SGE (eAccess) 登录握手客户端",
    )
    parser.add_argument("-c", "--config", type=Path, help="TOML 配置文件路径")
    parser.add_argument("-p", "--profile", default="default", help="TOML 配置预设名")
    parser.add_argument("--env-file", type=Path, help=".env 文件路径 (默认查找当前目录)")
    parser.add_argument("-a", "--account", help="账号名")
    parser.add_argument("-g", "--game", help="实例节点代码或显示名")
    parser.add_argument("--character", help="角色 ID 或角色名")
    parser.add_argument("--host", help="eAccess 服务器主机名")
    parser.add_argument("--port", type=int, help="eAccess 服务器端口")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="输出更多日志")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        datefmt="%H:%M:%S",
    )


def load_cli_config(args: argparse.Namespace) -> EAccessConfig:
    """
    为 CLI 工具组装配置。

    优先级: 命令行参数 > 环境变量 (含 .env) > TOML 文件。
    缺少账号或密码时交互式提示输入。
    """
    env_path = args.env_file or Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
        logger.debug(f"已加载配置文件: {env_path}")
    elif args.env_file:
        raise ConfigError(f".env 文件未找到: {env_path}")

    raw: dict[str, Any] = {}
    if args.config:
        raw.update(read_toml_values(args.config, args.profile))
    raw.update(read_env_values())

    overrides = {
        "account": args.account,
        "game": args.game,
        "character": args.character,
        "host": args.host,
        "port": args.port,
    }
    raw.update({k: v for k, v in overrides.items() if v is not None})

    if not raw.get("account"):
        raw["account"] = input("Account name: ").strip()
    if not raw.get("password"):
        raw["password"] = getpass.getpass("Password: ")

    return create_config_from_dict(raw)


def on_status_change(status: SessionStatus, msg: str) -> None:
    logger.info(f"状态变更: {status.name} | {msg}")


async def run(config: EAccessConfig) -> LaunchInfo:
    """执行一次完整握手并返回启动信息。"""
    async with EAccessCore(config, status_callback=on_status_change) as core:
        return await core.handshake()


def print_launch_info(info: LaunchInfo) -> None:
    print(f"游戏:     {info.full_game_name} ({info.game_code})")
    print(f"服务器:   {info.game_host}:{info.game_port}")
    print(f"会话 Key: {info.key}")


def main(argv: list[str] | None = None) -> int:
    """
    程序主入口点。

    Returns:
        int: 进程退出码，成功为 0。
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_cli_config(args)
        logger.debug(f"配置加载完成: {config!r}")
        info = asyncio.run(run(config))
    except ConfigError as ce:
        logger.error(f"配置错误: {ce}")
        return 1
    except AuthError as ae:
        logger.error(f"认证被拒绝: {ae}")
        return 1
    except EAccessError as e:
        logger.error(f"握手失败: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("收到用户中断信号 (Ctrl+C)，退出。")
        return 1

    print_launch_info(info)
    return 0


if __name__ == "__main__":
    sys.exit(main())
