"""Rules-file path handling for the sanitizer.

Path resolution follows the XDG Base Directory Specification for the
user-specific override file.
"""

import os
from pathlib import Path

import platformdirs

# Application name used for directory paths
APP_NAME = "constrained-model-sanitizer"

# Environment variable names
ENV_RULES_PATH = "CMS_RULES_PATH"

# Default filenames
RULES_FILENAME = "rules.yml"


def get_package_config_dir() -> Path:
    """Get the path to the package's bundled config directory."""
    return Path(__file__).parent / "config"


def get_user_config_dir() -> Path:
    """Get the path to the user's config directory for this application."""
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_default_rules_path() -> str:
    """Get the path to the bundled rules file."""
    return str(get_package_config_dir() / RULES_FILENAME)


def get_rules_path() -> str:
    """Get the path to the rules file, respecting XDG specification.

    Returns:
        Path to the rules file
    """
    # 1. Check environment variable
    env_path = os.environ.get(ENV_RULES_PATH)
    if env_path and Path(env_path).is_file():
        return env_path

    # 2. Check user config directory
    user_path = get_user_config_dir() / RULES_FILENAME
    if user_path.is_file():
        return str(user_path)

    # 3. Fall back to package directory
    return get_default_rules_path()
