"""Open and read the configuration file."""

from __future__ import annotations

import codecs
import contextlib
import logging
from pathlib import Path
from typing import ClassVar

import yaml

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """An error with the config file."""


class Config(dict):
    """Simple over-ride of dict that validates keys and adds a context manager."""

    _defaults: ClassVar = {
        "strict": False,
        "encoding": "utf-8",
        "encoding_errors": "replace",
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        for k, v in self._defaults.items():
            if k not in self:
                self[k] = v

        for k in self.keys():
            if k not in self._defaults:
                raise ConfigurationError(
                    f"You passed the key '{k}' to config, which is not known to ctest-tracing."
                )

        # since __setitem__ is not called in the super().__init__ call, we validate here
        for k, v in self.items():
            self._validate(k, v)

    def __setitem__(self, key, value):
        """Set an item in the config, checking that the key and value are valid."""
        if key not in self._defaults:
            raise ConfigurationError(
                f"You passed the key '{key}' to config, which is not known to ctest-tracing."
            )
        self._validate(key, value)
        super().__setitem__(key, value)

    @staticmethod
    def _validate(key, value):
        if key == "strict" and not isinstance(value, bool):
            raise ConfigurationError(f"'strict' must be a boolean, got {value!r}")

        if key == "encoding":
            try:
                codecs.lookup(value)
            except (LookupError, TypeError) as e:
                raise ConfigurationError(f"Unknown encoding {value!r}") from e

        if key == "encoding_errors":
            try:
                codecs.lookup_error(value)
            except (LookupError, TypeError) as e:
                raise ConfigurationError(
                    f"Unknown encoding error handler {value!r}"
                ) from e

    @contextlib.contextmanager
    def use(self, **kwargs):
        """Context manager for using certain configuration options for a set time."""
        backup = self.copy()
        for k, v in kwargs.items():
            self[k] = v
        try:
            yield self
        finally:
            for k in kwargs:
                self[k] = backup[k]

    def write(self, fname: str | Path):
        """Write current configuration to file to make it permanent."""
        fname = Path(fname).expanduser()
        if not fname.parent.exists():
            fname.parent.mkdir(parents=True)

        with fname.open("w") as fl:
            yaml.safe_dump(dict(self), fl)

    @classmethod
    def load(cls, file_name: str | Path):
        """Create a Config object from a config file.

        A missing file gives the default configuration.
        """
        file_name = Path(file_name).expanduser().absolute()

        if not file_name.exists():
            logger.info(f"No config file at {file_name}, using defaults.")
            return cls()

        with file_name.open() as fl:
            try:
                cfg = yaml.safe_load(fl) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Could not parse {file_name}: {e}") from e

        if not isinstance(cfg, dict):
            raise ConfigurationError(
                f"The config file {file_name} does not contain a mapping."
            )
        return cls(cfg)


# On import, load the default config
config = Config()
