"""
配置管理模块
管理应用的所有配置信息，包括数据存储配置、服务器配置、认证配置等
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """应用配置类"""
    
    # 服务器配置
    host: str = "0.0.0.0"
    port: int = 8000
    
    # 数据存储配置（json-server 风格的 REST 服务）
    store_base_url: str = "http://localhost:3001"
    store_timeout: float = 10.0
    
    # 点赞持久化策略: membership（点赞记录表）或 counter（计数器读改写）
    like_strategy: str = "membership"
    
    # 认证配置
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 7天
    
    # 用户默认头像
    default_avatar_template: str = "https://ui-avatars.com/api/?name={username}&background=667eea&color=fff"
    
    # 日志配置
    log_level: str = "INFO"
    log_file: str = "logs/app.log"
    
    # 应用配置
    app_name: str = "Diary Service"
    app_version: str = "1.0.0"
    debug: bool = False
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """
    获取配置实例（单例模式）
    使用lru_cache确保只创建一个配置实例
    """
    return Settings()


# 导出配置实例
settings = get_settings()
