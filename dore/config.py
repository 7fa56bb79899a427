import logging
import os
from argparse import Namespace
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from .constants import DEFAULT_PROMPT

try:
    import tomllib
except ImportError:
    import tomli as tomllib

CONFIG_FILENAME = ".dore.toml"
CONFIG_SECTION_NAME = "dore"
CLI_FIELDS = {
    "file",
    "multiselect",
    "json_keys",
    "query",
    "prompt",
    "paged",
}
CONFIG_FIELDS = CLI_FIELDS - {"file"}
CONFIG_TYPES = {
    "multiselect": bool,
    "json_keys": list,
    "query": str,
    "prompt": str,
    "paged": bool,
}

logger = logging.getLogger(__name__)


@dataclass
class Config:
    file: Optional[Path] = None
    multiselect: bool = False
    json_keys: List[str] = field(default_factory=list)
    query: str = ""
    prompt: str = DEFAULT_PROMPT
    paged: bool = True

    @classmethod
    def create(cls, namespace: Namespace, cwd: Optional[Path] = None) -> "Config":
        instance = cls()

        config_path = find_config(cwd or Path.cwd())
        if config_path:
            logger.debug("Loading configuration from %s", config_path)
            parsed = parse_config(config_path)
            instance._update_from_mapping(parsed)
        else:
            logger.debug("No configuration file found")

        instance._update_from_namespace(namespace)
        logger.debug("Final configuration: %s", instance)
        return instance

    @property
    def ndjson(self) -> bool:
        return bool(self.json_keys)

    def _update_from_mapping(self, data: Mapping):
        for key, val in data.items():
            setattr(self, key, val)

    def _update_from_namespace(self, namespace: Namespace):
        for f in CLI_FIELDS:
            val = getattr(namespace, f, None)
            if val is not None:
                setattr(self, f, val)


def user_config_path() -> Path:
    base = os.getenv("XDG_CONFIG_HOME") or Path.home().joinpath(".config")
    return Path(base).joinpath("dore", "config.toml")


def find_config(cwd: Path) -> Optional[Path]:
    for path in (cwd, *cwd.parents):
        config_path = path.joinpath(CONFIG_FILENAME)

        if config_path.exists():
            logger.debug("Found configuration file at %s", config_path)
            return config_path

    config_path = user_config_path()
    if config_path.exists():
        logger.debug("Found user configuration file at %s", config_path)
        return config_path

    return None


def parse_config(path: Path) -> Mapping:
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except Exception as exc:
            raise SystemExit(f"Error parsing {path}\n{exc}")

    try:
        data = data[CONFIG_SECTION_NAME]
    except KeyError:
        logger.debug("No [%s] section found in %s", CONFIG_SECTION_NAME, path)
        return {}

    for key in data.keys():
        if key not in CONFIG_FIELDS:
            raise SystemExit(f"Error parsing {path}.\nUnrecognized option: {key}")
        _check_type(path, key, data[key])
    return data


def _check_type(path: Path, key: str, val) -> None:
    expected = CONFIG_TYPES[key]
    valid = isinstance(val, expected)
    if expected is list:
        valid = valid and all(isinstance(item, str) for item in val)

    if not valid:
        kind = "a list of strings" if expected is list else expected.__name__
        raise SystemExit(f"Error parsing {path}.\nOption {key} must be {kind}")
