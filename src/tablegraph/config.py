"""Configuration management for catalog services."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from omegaconf import DictConfig, OmegaConf

from .exceptions import ConfigurationError

__all__ = ["Config", "DEFAULTS"]

DEFAULTS: dict[str, dict[str, Any]] = {
    "sample": {
        "maxsize": 1000,
        "ttl": 86400,
        "workers": 4,
        "single_flight": True,
    },
}


class Config:
    """Store service settings using OmegaConf.

    User values are merged over :data:`DEFAULTS`. Values may interpolate
    other keys with ``${...}`` syntax, and a section can pick one of several
    named variants through ``_presets_`` and ``_use_``::

        sample:
          ttl: 3600
          _use_: small
          _presets_:
            small: {maxsize: 10}
            large: {maxsize: 100000}
    """

    def __init__(
        self,
        mapping: Mapping[str, Any] | DictConfig | str | Path | None = None,
    ) -> None:
        if isinstance(mapping, (str, Path)):
            try:
                user = OmegaConf.load(str(mapping))
            except Exception as e:
                raise ConfigurationError(f"Failed to load config from {mapping}: {e}") from e
        else:
            user = OmegaConf.create(mapping or {})
        try:
            conf = OmegaConf.merge(OmegaConf.create(DEFAULTS), user)
        except Exception as e:
            raise ConfigurationError(f"Invalid config: {e}") from e
        object.__setattr__(self, "_conf", conf)

    def __getattr__(self, name: str) -> Any:
        """Allow attribute-style access to config values."""
        if name.startswith("_"):
            raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")
        try:
            return self._conf[name]
        except (KeyError, TypeError):
            raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        """Allow attribute-style setting of config values."""
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self._conf[name] = value

    def _resolve_with_presets(self, cfg: DictConfig) -> DictConfig:
        """Resolve a section that may contain ``_presets_``.

        The base keys (everything except ``_use_`` and ``_presets_``) are
        merged with the preset named by ``_use_``; preset keys win.
        """
        if not OmegaConf.is_dict(cfg) or "_presets_" not in cfg:
            return cfg

        base = {k: v for k, v in cfg.items() if k not in ("_use_", "_presets_")}

        preset_name = cfg.get("_use_")
        if preset_name is None:
            return OmegaConf.create(base)

        presets = cfg.get("_presets_", {})
        preset = presets.get(preset_name)
        if preset is None:
            raise ConfigurationError(f"Unknown preset '{preset_name}'")

        preset_dict = OmegaConf.to_container(preset, resolve=False) if OmegaConf.is_dict(preset) else {}
        return OmegaConf.create({**base, **preset_dict})

    def section(self, name: str) -> dict[str, Any]:
        """Return section ``name`` as a plain dict with presets and interpolations resolved."""
        cfg = self._conf.get(name)
        if cfg is None:
            return {}
        # interpolations may point outside the section, resolve them in place first
        resolved = OmegaConf.create(OmegaConf.to_container(cfg, resolve=True))
        resolved = self._resolve_with_presets(resolved)
        return cast(dict[str, Any], OmegaConf.to_container(resolved, resolve=True))

    def validate(self) -> "Config":
        """Check the sample cache settings, returning ``self``."""
        sample = self.section("sample")
        for key in ("maxsize", "ttl", "workers"):
            value = sample.get(key)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                raise ConfigurationError(f"sample.{key} must be a positive number, got {value!r}")
        return self

    def to_dict(self) -> dict[str, Any]:
        return cast(dict[str, Any], OmegaConf.to_container(self._conf, resolve=True))
