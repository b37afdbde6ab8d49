#!/usr/bin/env python3
"""
Support Relay 启动脚本
开发模式下启动中继服务 (自动重载)
"""

if __name__ == "__main__":
    import uvicorn
    from support_relay.config import config
    from support_relay.utils.logger import setup_logging

    setup_logging(log_dir=config.log.log_dir, log_level=config.log.log_level)

    print("=" * 60)
    print("启动 Support Relay 服务")
    print("=" * 60)
    print(f"WebSocket: ws://{config.server.host}:{config.server.port}/ws")
    print(f"会话列表: http://{config.server.host}:{config.server.port}/sessions")
    print(f"会话超时: {config.chat.ttl_minutes} 分钟")
    print("=" * 60)
    print("\n按 Ctrl+C 停止服务\n")

    uvicorn.run(
        "support_relay.app:app",
        host=config.server.host,
        port=config.server.port,
        reload=True  # 开发模式，代码修改自动重载
    )
