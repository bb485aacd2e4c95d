# src/eaccess_core/protocols/sge/__init__.py
"""
SGE (eAccess) 协议族

- constants: 报文标签与分隔符。
- grammar: 语法原语 (单行游标)。
- fields: 开放枚举字段。
- packets: 九种报文的解析与请求构建。
- strategy: 握手流程编排 (唯一涉及 I/O 的部分)。
"""

from .strategy import ProtocolSGE

__all__ = ["ProtocolSGE"]
