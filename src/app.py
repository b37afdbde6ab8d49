"""FastAPI application: WebSocket event channel plus HTTP polling routes."""

import json
from contextlib import asynccontextmanager
from typing import Any, Optional, Union

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Config, config
from .chat import (
    ChatNotFoundError,
    ExpirySweeper,
    InvalidPayloadError,
    MessageRouter,
    SessionStore,
    summarize,
    to_wire,
)
from .transport import Connection, ConnectionHub
from .utils.logger import setup_logging, get_logger

logger = get_logger(__name__)


def create_app(cfg: Optional[Config] = None, store: Optional[SessionStore] = None) -> FastAPI:
    """
    Build the relay application.

    Args:
        cfg: Configuration, defaults to the global config
        store: Session store to use, a fresh one is created if omitted

    Returns:
        FastAPI application
    """
    cfg = cfg or config

    # 定义生命周期管理
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        session_store = store if store is not None else SessionStore()
        hub = ConnectionHub()
        router = MessageRouter(session_store, hub)
        sweeper = ExpirySweeper(
            session_store,
            hub,
            idle_timeout_minutes=cfg.chat.ttl_minutes,
            interval_seconds=cfg.chat.sweep_interval_seconds,
        )
        app.state.store = session_store
        app.state.hub = hub
        app.state.router = router
        app.state.sweeper = sweeper

        logger.info(f"启动 {cfg.app.title} v{cfg.app.version}")
        sweeper.start()
        yield
        logger.info("开始关闭应用...")
        await sweeper.stop()
        session_store.clear()
        logger.info("应用已关闭")

    app = FastAPI(title=cfg.app.title, version=cfg.app.version, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors.allow_origins,
        allow_credentials=cfg.cors.allow_credentials,
        allow_methods=cfg.cors.allow_methods,
        allow_headers=cfg.cors.allow_headers,
    )

    @app.exception_handler(ChatNotFoundError)
    async def chat_not_found_handler(request: Request, exc: ChatNotFoundError):
        return JSONResponse(status_code=404, content={"detail": "no chat", "chatId": exc.chat_id})

    @app.get("/")
    async def root():
        return {"message": "Support relay is running", "version": cfg.app.version}

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "sessions": len(app.state.store),
            "connections": len(app.state.hub),
            "roles": app.state.hub.role_counts(),
            "rooms": len(app.state.hub.room_sizes()),
        }

    async def list_sessions(request: Request):
        """List summaries of all open chats."""
        return [to_wire(summarize(s)) for s in request.app.state.store.list_all()]

    async def get_session(session_id: str, request: Request):
        """Full record of one chat."""
        session = request.app.state.store.get(session_id)
        if session is None:
            raise ChatNotFoundError(session_id)
        return to_wire(session)

    app.add_api_route("/sessions", list_sessions, methods=["GET"])
    app.add_api_route("/sessions/{session_id}", get_session, methods=["GET"])
    # 兼容旧客户端的路径
    app.add_api_route("/chats", list_sessions, methods=["GET"], include_in_schema=False)
    app.add_api_route("/chat/{session_id}", get_session, methods=["GET"], include_in_schema=False)

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await websocket.accept()
        hub: ConnectionHub = websocket.app.state.hub
        router: MessageRouter = websocket.app.state.router
        connection = hub.register(websocket)

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                # 文本帧与二进制帧都按 JSON 处理
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes") or b""
                await handle_frame(router, hub, connection, raw)
        except WebSocketDisconnect:
            logger.info(f"客户端 {connection.id} 断开连接")
        except Exception as e:
            logger.error(f"[{connection.id}] WebSocket 错误: {e}", exc_info=True)
            await websocket.close(code=1011)
        finally:
            router.disconnect(connection)
            hub.unregister(connection)

    return app


async def handle_frame(router: MessageRouter, hub: ConnectionHub, connection: Connection, raw: Union[str, bytes]) -> None:
    """
    Decode one inbound frame and dispatch it.

    Malformed frames and invalid payloads are answered with an ``error``
    event to the sender; nothing here propagates into the receive loop.

    Args:
        router: Message router
        hub: Connection hub, used to answer the sender
        connection: Sending connection
        raw: Raw frame, text or UTF-8 encoded bytes
    """
    try:
        frame: Any = json.loads(raw)
    except ValueError as e:
        # JSONDecodeError 或二进制帧的 UnicodeDecodeError
        logger.warning(f"[{connection.id}] 无法解析的消息: {e}")
        await hub.emit(connection, "error", {"message": "frame must be valid JSON"})
        return

    if not isinstance(frame, dict) or not isinstance(frame.get("type"), str):
        await hub.emit(connection, "error", {"message": "frame must be an object with a 'type'"})
        return

    event = frame["type"]
    try:
        await router.dispatch(connection, event, frame.get("data"))
    except InvalidPayloadError as e:
        logger.warning(f"[{connection.id}] {e}")
        await hub.emit(connection, "error", {"message": str(e), "event": event})
    except Exception as e:
        logger.error(f"[{connection.id}] 处理事件 {event} 出错: {e}", exc_info=True)
        await hub.emit(connection, "error", {"message": f"failed to handle '{event}'", "event": event})


app = create_app(config)


def main() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    import uvicorn

    setup_logging(
        log_dir=config.log.log_dir,
        log_level=config.log.log_level,
        max_bytes=config.log.max_bytes,
        backup_count=config.log.backup_count,
    )
    logger.info(f"服务地址: ws://{config.server.host}:{config.server.port}/ws")
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
