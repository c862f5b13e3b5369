import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "simplify": False,
    "strip_vendor_suffix": True,
    "table_style": "dim",
}


class ConfigManager:
    """
    Loads and persists user settings in ~/.cxxdemangle/config.json.
    Values in the file override DEFAULT_CONFIG key by key.
    """
    def __init__(self, config_file: Optional[Path] = None):
        if config_file is not None:
            self.config_file = Path(config_file)
            self.config_dir = self.config_file.parent
        else:
            self.config_dir = Path.home() / ".cxxdemangle"
            self.config_file = self.config_dir / "config.json"
        self.config = self.load_config()

    def load_config(self) -> Dict[str, Any]:
        self.config_dir.mkdir(parents=True, exist_ok=True)

        config = DEFAULT_CONFIG.copy()
        if not self.config_file.exists():
            return config

        try:
            with open(self.config_file, "r") as f:
                user_config = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Ignoring unreadable config %s: %s", self.config_file, e)
            return config

        if isinstance(user_config, dict):
            config.update(user_config)
        else:
            log.warning("Ignoring config %s: expected a JSON object", self.config_file)
        return config

    def save_config(self):
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self.config, f, indent=4)

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        self.config[key] = value
        self.save_config()
