"""
UCI options used by the time manager.

Options are declared with their UCI type (``spin`` or ``check``), hold a typed
value, and can be overridden from ``setoption`` commands or from a JSON/YAML
config file.
"""

import json
import os
from typing import Any, Dict, Iterator, Optional

import yaml


class OptionError(ValueError):
    """Raised when an option value cannot be parsed or is out of range."""


class Option:
    """A single UCI option."""

    def __init__(self, name: str, option_type: str, default: Any, min_value: Optional[int] = None, max_value: Optional[int] = None):
        if option_type not in ("spin", "check"):
            raise OptionError(f"Unsupported option type '{option_type}' for {name}")
        self.name = name
        self.type = option_type
        self.default = default
        self.min = min_value
        self.max = max_value
        self.value = default

    def parse(self, raw: Any) -> Any:
        """Convert a protocol or config value into this option's type."""
        if self.type == "check":
            if isinstance(raw, bool):
                return raw
            text = str(raw).strip().lower()
            if text in ("true", "false"):
                return text == "true"
            raise OptionError(f"Option {self.name} expects true or false, got '{raw}'")

        if isinstance(raw, bool):
            raise OptionError(f"Option {self.name} expects an integer, got '{raw}'")
        try:
            value = int(str(raw).strip())
        except ValueError:
            raise OptionError(f"Option {self.name} expects an integer, got '{raw}'") from None
        if value < self.min or value > self.max:
            raise OptionError(f"Option {self.name} must be between {self.min} and {self.max}, got {value}")
        return value

    def set(self, raw: Any):
        self.value = self.parse(raw)

    def uci_line(self) -> str:
        default = str(self.default).lower() if self.type == "check" else self.default
        line = f"option name {self.name} type {self.type} default {default}"
        if self.type == "spin":
            line += f" min {self.min} max {self.max}"
        return line


class OptionsMap:
    """
    String-keyed options lookup.

    ``options["Move Overhead"]`` returns the typed value. Unknown names raise
    ``KeyError`` so typos surface immediately.
    """

    def __init__(self):
        self._options: Dict[str, Option] = {}
        self.add(Option("Move Overhead", "spin", 10, 0, 5000))
        self.add(Option("nodestime", "spin", 0, 0, 10000))
        self.add(Option("Ponder", "check", False))

    def add(self, option: Option):
        self._options[option.name] = option

    def __getitem__(self, name: str) -> Any:
        return self._options[name].value

    def set_option(self, name: str, raw_value: Any):
        """Set an option from a ``setoption`` value or a config entry."""
        if name not in self._options:
            raise KeyError(f"No such option: {name}")
        self._options[name].set(raw_value)

    def reset(self):
        """Restore every option to its default value."""
        for option in self._options.values():
            option.value = option.default

    def to_dict(self) -> Dict[str, Any]:
        return {name: option.value for name, option in self._options.items()}

    def uci_lines(self) -> Iterator[str]:
        for option in self._options.values():
            yield option.uci_line()

    def load_config(self, config_file: str):
        """
        Load option values from a JSON or YAML file.

        The file holds a mapping of option name to value, e.g.
        ``{"Move Overhead": 30, "Ponder": true}``.
        """
        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Config file not found: {config_file}")

        with open(config_file, 'r') as f:
            if config_file.endswith((".yaml", ".yml")):
                user_config = yaml.safe_load(f) or {}
            else:
                user_config = json.load(f)

        if not isinstance(user_config, dict):
            raise OptionError(f"Config file {config_file} must contain a mapping of option names to values")

        for name, value in user_config.items():
            if name not in self._options:
                raise OptionError(f"Unknown option '{name}' in {config_file}")
            self.set_option(name, value)

    @classmethod
    def from_config(cls, config_file: str) -> 'OptionsMap':
        options = cls()
        options.load_config(config_file)
        return options
