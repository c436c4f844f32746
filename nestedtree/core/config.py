"""
Unified Configuration for nestedtree
Single source of truth for store and manager settings
"""

import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv


class StoreConfig(BaseModel):
    """Storage-specific configuration"""
    database_url: str = Field(default="sqlite://", description="SQLAlchemy database URL")
    echo_sql: bool = Field(default=False, description="Log every SQL statement SQLAlchemy emits")


class TreeConfig(BaseModel):
    """Main nestedtree configuration"""
    # Core settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level, DEBUG when debug is set")
    log_dir: Optional[str] = Field(default=None, description="Directory for the log file, platform default when unset")

    # Component configs
    store: StoreConfig = Field(default_factory=StoreConfig)

    # Manager behaviour
    prefer_minimal_shift: bool = Field(
        default=True,
        description="Open gaps by shifting whichever side of the tree touches fewer nodes"
    )

    @classmethod
    def from_env(cls) -> "TreeConfig":
        """Load configuration from environment variables and .env files"""
        potential_env_paths = [
            Path.cwd() / '.env',
            Path.cwd().parent / '.env',
        ]

        for env_path in potential_env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                break

        store_config = StoreConfig(
            database_url=os.environ.get("NESTEDTREE_DATABASE_URL", "sqlite://"),
            echo_sql=os.environ.get("NESTEDTREE_ECHO_SQL", "false").lower() == "true"
        )

        return cls(
            debug=os.environ.get("NESTEDTREE_DEBUG", "false").lower() == "true",
            log_level=os.environ.get("NESTEDTREE_LOG_LEVEL", "INFO"),
            log_dir=os.environ.get("NESTEDTREE_LOG_DIR"),
            store=store_config,
            prefer_minimal_shift=os.environ.get("NESTEDTREE_PREFER_MINIMAL_SHIFT", "true").lower() == "true"
        )


# Global configuration instance
_config: Optional[TreeConfig] = None


def get_config() -> TreeConfig:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        _config = TreeConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset configuration (mainly for testing)"""
    global _config
    _config = None
