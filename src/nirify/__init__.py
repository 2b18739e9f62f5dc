from .errors import NirifyError
from .health import check_config_health, repair_corrupted_configs
from .importer import ImportResult, import_from_niri_config
from .loader import LoadResult, load_settings
from .models import Settings
from .paths import ConfigPaths
from .registry import SettingsCategory
from .save_manager import SaveManager
from .storage import atomic_write, save_dirty, save_settings
from .store import SettingsStore

__version__ = "0.1.0"


__all__ = [
    "ConfigPaths",
    "ImportResult",
    "LoadResult",
    "NirifyError",
    "SaveManager",
    "Settings",
    "SettingsCategory",
    "SettingsStore",
    "atomic_write",
    "check_config_health",
    "import_from_niri_config",
    "load_settings",
    "repair_corrupted_configs",
    "save_dirty",
    "save_settings",
]
