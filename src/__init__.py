"""Support Relay - realtime support chat between anonymous clients and admins."""

__version__ = "0.1.0"
__author__ = "Support Relay Team"

# 导出主要模块
from . import chat
from . import transport
from . import utils
from . import config

__all__ = [
    "chat",
    "transport",
    "utils",
    "config",
]
