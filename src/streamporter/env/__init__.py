from streamporter.env.env import (
    DEFAULT_API_BASE,
    LoggingEnvironment,
    Settings,
    get_logging_env,
    load_env_file,
    load_settings,
)

from streamporter.env.paths import logs_dir, module_logs_dir

__all__ = [
    "DEFAULT_API_BASE",
    "LoggingEnvironment",
    "Settings",
    "get_logging_env",
    "load_env_file",
    "load_settings",
    "logs_dir",
    "module_logs_dir",
]
