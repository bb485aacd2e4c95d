# src/eaccess_core/protocols/sge/constants.py
"""
SGE (eAccess) 协议常量表 (Constants)

仅定义协议的结构性常量（如报文标签、分隔符、字段标签）。
不包含任何默认策略值（如默认游戏、默认角色），这些应由 Config 注入。
"""


# =========================================================================
# 报文标签 (Message Tags)
# =========================================================================
class Tag:
    """报文首字段的标签定义 (请求与响应共用)"""

    HASH_KEY = "K"  # 获取 Hash Key
    AUTH = "A"  # 账号认证
    INSTANCES = "M"  # 实例 (游戏) 列表
    NODE_INFO = "N"  # 实例环境信息
    PAYMENT = "F"  # 付费状态
    GENERAL_INFO = "G"  # 实例综合信息 (含链接)
    UNKNOWN = "P"  # 含义未知的 6 字段报文
    CHARACTERS = "C"  # 角色列表
    LAUNCH = "L"  # 启动信息


# =========================================================================
# 分隔符 (Delimiters)
# =========================================================================
TAB = "\t"  # 主字段分隔符
NEWLINE = "\n"  # 行结束符
PIPE = "|"  # N 报文子字段分隔符
EQUALS = "="  # G 报文键值分隔符

END_OF_FIELD = TAB + NEWLINE  # 字段以 Tab 或换行结束

# =========================================================================
# 固定文本 (Literals)
# =========================================================================
AUTH_KEY_LABEL = "KEY\t"
GENERAL_INFO_SEPARATOR = "0\t\t"
LAUNCH_OK = "OK\t"

# L 报文各字段的标签前缀 (顺序固定)
LAUNCH_UPPORT = "UPPORT="
LAUNCH_GAME = "GAME="
LAUNCH_GAMECODE = "GAMECODE="
LAUNCH_FULLGAMENAME = "FULLGAMENAME="
LAUNCH_GAMEFILE = "GAMEFILE="
LAUNCH_GAMEHOST = "GAMEHOST="
LAUNCH_GAMEPORT = "GAMEPORT="
LAUNCH_KEY = "KEY="

# 数值字段上限 (无符号 64 位)
UINT64_MAX = 2**64 - 1

# =========================================================================
# 服务端点 (Endpoint)
# =========================================================================
DEFAULT_HOST = "eaccess.play.net"
DEFAULT_PORT = 7900
