"""Configuration management for the support relay."""

import os
from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(
        default="0.0.0.0",
        description="Server host"
    )
    port: int = Field(
        default=4000,
        description="Server port"
    )

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create config from environment variables."""
        return cls(
            host=os.getenv("SERVER_HOST", cls.model_fields["host"].default),
            port=int(os.getenv("PORT", str(cls.model_fields["port"].default))),
        )


class ChatConfig(BaseModel):
    """Chat session lifecycle configuration."""

    ttl_minutes: float = Field(
        default=10,
        gt=0,
        description="Idle minutes after which a chat is evicted"
    )
    sweep_interval_seconds: float = Field(
        default=60,
        gt=0,
        description="Seconds between expiry sweeps"
    )
    # 未接入任何逻辑，仅保留配置项
    admin_visible_retention_minutes: int = Field(
        default=1440,
        description="Unused: declared for admin-side history retention"
    )

    @classmethod
    def from_env(cls) -> "ChatConfig":
        """Create config from environment variables."""
        return cls(
            ttl_minutes=float(os.getenv(
                "CHAT_TTL_MINUTES", str(cls.model_fields["ttl_minutes"].default)
            )),
            sweep_interval_seconds=float(os.getenv(
                "CHAT_SWEEP_INTERVAL_SECONDS",
                str(cls.model_fields["sweep_interval_seconds"].default),
            )),
            admin_visible_retention_minutes=int(os.getenv(
                "ADMIN_VISIBLE_RETENTION_MINUTES",
                str(cls.model_fields["admin_visible_retention_minutes"].default),
            )),
        )


class CORSConfig(BaseModel):
    """CORS configuration."""

    allow_origins: list[str] = Field(
        default=["*"],
        description="Allowed origins for CORS"
    )
    allow_credentials: bool = Field(
        default=True,
        description="Allow credentials"
    )
    allow_methods: list[str] = Field(
        default=["*"],
        description="Allowed HTTP methods"
    )
    allow_headers: list[str] = Field(
        default=["*"],
        description="Allowed HTTP headers"
    )


class LogConfig(BaseModel):
    """Logging configuration."""

    log_dir: str = Field(
        default="logs",
        description="Directory for log files"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    max_bytes: int = Field(
        default=10 * 1024 * 1024,  # 10MB
        description="Maximum size of a single log file in bytes"
    )
    backup_count: int = Field(
        default=5,
        description="Number of backup log files to keep"
    )

    @classmethod
    def from_env(cls) -> "LogConfig":
        """Create config from environment variables."""
        return cls(
            log_dir=os.getenv("LOG_DIR", cls.model_fields["log_dir"].default),
            log_level=os.getenv("LOG_LEVEL", cls.model_fields["log_level"].default),
            max_bytes=int(os.getenv("LOG_MAX_BYTES", str(cls.model_fields["max_bytes"].default))),
            backup_count=int(os.getenv("LOG_BACKUP_COUNT", str(cls.model_fields["backup_count"].default))),
        )


class AppConfig(BaseModel):
    """Application configuration."""

    title: str = Field(
        default="Support Relay",
        description="Application title"
    )
    version: str = Field(
        default="0.1.0",
        description="Application version"
    )


class Config(BaseModel):
    """Global configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    cors: CORSConfig = Field(default_factory=CORSConfig)
    app: AppConfig = Field(default_factory=AppConfig)
    log: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            server=ServerConfig.from_env(),
            chat=ChatConfig.from_env(),
            log=LogConfig.from_env(),
        )


# 全局配置实例
config = Config.load()
