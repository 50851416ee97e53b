from .resolve import get_absolute_path
from .user import DEFAULT_USER_CONFIG_PRIMARY, USER_CONFIG_DIR_ENV, get_user_config_dir

__all__ = [
    "DEFAULT_USER_CONFIG_PRIMARY",
    "USER_CONFIG_DIR_ENV",
    "get_absolute_path",
    "get_user_config_dir",
]
