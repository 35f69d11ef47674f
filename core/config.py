"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from pydantic import model_validator


class RedisSettings(BaseModel):
    url: Optional[str] = None
    max_connections: int = 10
    namespace: str = "order-engine"


class EmailSettings(BaseModel):
    # console: 仅打印日志；http: 调用 ESP HTTP API；celery: 交给 Celery 任务异步投递
    backend: str = "console"
    sender: str = "Shop <orders@example.com>"
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout: float = 5.0
    max_retries: int = 2


class SideEffectSettings(BaseModel):
    queue_max_size: int = 10_000
    max_attempts: int = 3
    backoff_base: float = 0.2
    backoff_max: float = 5.0


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = Field(default="Order Lifecycle Engine")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=True)
    ENVIRONMENT: str = Field(default="development")

    # 前端地址：用于构造支付成功/取消回跳链接以及邮件中的链接
    FRONTEND_URL: str = Field(default="http://localhost:5173")
    # 对外暴露的 API 地址：用于构造网关回调（notify）地址
    PUBLIC_API_URL: str = Field(default="http://localhost:8000")

    redis: RedisSettings = Field(default_factory=RedisSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    side_effects: SideEffectSettings = Field(default_factory=SideEffectSettings)

    # 安全配置（认证由外部身份服务签发，这里只负责校验）
    SECRET_KEY: Optional[str] = Field(
        default=None,
        description="JWT签名密钥，生产环境必须设置"
    )
    ALGORITHM: str = Field(default="HS256")

    # CORS配置
    CORS_ORIGINS: list = Field(
        default=["http://localhost:5173", "http://localhost:8000"],
    )

    # 分页配置
    DEFAULT_PAGE_SIZE: int = Field(default=50)
    MAX_PAGE_SIZE: int = Field(default=200)

    # 日志配置：未设置时 DEBUG 环境输出彩色控制台日志，其余输出 JSON
    LOG_LEVEL: Optional[str] = Field(default=None)
    LOG_JSON: Optional[bool] = Field(default=None)

    # 日志/请求体记录配置
    LOG_REQUEST_BODY_ENABLE_BY_DEFAULT: bool = Field(default=True)
    LOG_REQUEST_BODY_MAX_BYTES: int = Field(default=2048)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    @model_validator(mode="after")
    def _validate_secret_key(self):
        # 管理端接口依赖 JWT 校验，所有环境均要求显式配置 SECRET_KEY
        if not self.SECRET_KEY:
            raise ValueError(
                "SECRET_KEY 未配置。请在环境变量或 .env 中设置 SECRET_KEY"
            )
        return self

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """允许 JSON 字符串或逗号分隔字符串两种格式。"""
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                import json
                try:
                    arr = json.loads(s)
                    if isinstance(arr, list):
                        return arr
                except ValueError:
                    pass
            if "," in s:
                return [item.strip() for item in s.split(",") if item.strip()]
            return [s]
        return v

    @property
    def is_eager_environment(self) -> bool:
        return self.ENVIRONMENT.lower() in {"development", "dev", "test", "testing"}


settings = Settings()
