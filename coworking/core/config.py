"""
@description 配置管理模块
@responsibility 加载和验证 config.yaml，支持环境变量覆盖
"""

import os
import sys
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator


class DatabaseConfig(BaseModel):
    """数据库配置"""

    url: str = Field(
        default="sqlite+aiosqlite:///./db/coworking.db", description="数据库连接串"
    )
    echo: bool = Field(default=False, description="是否输出 SQL 日志")


class CacheConfig(BaseModel):
    """实体缓存配置"""

    capacity: int = Field(default=100, description="每类实体缓存的最大条目数")

    @field_validator("capacity")
    @classmethod
    def _check_capacity(cls, value: int) -> int:
        if value < 1:
            raise ValueError("缓存容量必须大于等于 1")
        return value


class BookingConfig(BaseModel):
    """预订规则配置"""

    office_min_days: int = Field(default=7, description="办公室最少预订天数（含首尾）")

    @field_validator("office_min_days")
    @classmethod
    def _check_office_min_days(cls, value: int) -> int:
        if value < 1:
            raise ValueError("办公室最少预订天数必须大于等于 1")
        return value


class LoggingConfig(BaseModel):
    """日志配置"""

    level: str = Field(default="INFO", description="日志级别")
    file: str | None = Field(default=None, description="日志文件路径，为空时只输出到控制台")
    rotation: str = Field(default="10 MB", description="日志文件轮转大小")
    retention: str = Field(default="7 days", description="日志文件保留时间")


class Config(BaseModel):
    """全局配置"""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig, description="数据库配置")
    cache: CacheConfig = Field(default_factory=CacheConfig, description="缓存配置")
    booking: BookingConfig = Field(default_factory=BookingConfig, description="预订规则配置")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="日志配置")


def get_config_path() -> Path:
    """获取配置文件路径"""
    # 优先使用 CONFIG_PATH 环境变量，否则使用项目根目录的 config.yaml
    if config_path_str := os.environ.get("CONFIG_PATH"):
        return Path(config_path_str)
    return Path(__file__).parent.parent.parent / "config.yaml"


def load_config() -> Config:
    """加载配置文件并应用环境变量覆盖"""
    config_path = get_config_path()

    # 配置文件不存在时生成模板并退出
    if not config_path.exists():
        _generate_config_template(config_path)
        print(f"错误: 配置文件不存在: {config_path}")
        print(f"已生成配置模板: {config_path.parent / 'config.example.yaml'}")
        sys.exit(1)

    with open(config_path) as f:
        config_data = yaml.safe_load(f) or {}

    config = Config(**config_data)

    # 应用环境变量覆盖
    if database_url := os.environ.get("DATABASE_URL"):
        config.database.url = database_url
    if log_level := os.environ.get("LOG_LEVEL"):
        config.logging.level = log_level.upper()

    return config


def _generate_config_template(config_path: Path) -> None:
    """生成配置模板文件"""
    template_path = config_path.parent / "config.example.yaml"

    if template_path.exists():
        return

    template_content = """# 数据库配置
database:
  # SQLAlchemy 异步连接串，可通过 DATABASE_URL 环境变量覆盖
  url: "sqlite+aiosqlite:///./db/coworking.db"
  echo: false

# 实体缓存配置（coworking / user / workspace / reservation 各一个独立实例）
cache:
  # 每个缓存最多保存的条目数，超出后按 LFU 淘汰
  capacity: 100

# 预订规则
booking:
  # OFFICE 类型工作区的最少预订天数（含首尾两天）
  office_min_days: 7

# 日志配置
logging:
  # 日志级别，可通过 LOG_LEVEL 环境变量覆盖
  level: "INFO"
  # 日志文件路径，留空则只输出到控制台
  file: "./logs/coworking.log"
  rotation: "10 MB"
  retention: "7 days"
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(template_path, "w") as f:
        f.write(template_content)
