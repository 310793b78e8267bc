import os
import sys
from pathlib import Path


def get_default_user_dir() -> str:
    """
    Resolve the per-user data directory (presets, exports).
    Nothing is created here; callers create what they write into.
    """
    env_path = os.getenv("PIX3L_USER_DIR")
    if env_path:
        return os.path.abspath(env_path)

    base_dir: Path | None = None

    # 1. Windows: roaming application data
    if sys.platform == "win32":
        appdata = os.getenv("APPDATA")
        if appdata:
            base_dir = Path(appdata)

    # 2. macOS: standard application support folder
    elif sys.platform == "darwin":
        base_dir = Path.home() / "Library" / "Application Support"

    # 3. Linux and others: XDG config home
    else:
        xdg_config = os.getenv("XDG_CONFIG_HOME")
        base_dir = Path(xdg_config) if xdg_config else Path.home() / ".config"

    if base_dir is None:
        base_dir = Path(os.path.expanduser("~"))

    return str((base_dir / "pix3l").absolute())
