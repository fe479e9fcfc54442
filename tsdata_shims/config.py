"""Rule options for the ``no-unsafe-any`` checker."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from tsdata_shims.errors import ConfigurationError

logger = logging.getLogger(__name__)

# option spellings accepted in mappings, mapped to field names
_OPTION_KEYS: Dict[str, str] = {
    "allowAnnotationFromAny": "allow_annotation_from_any",
    "allow_annotation_from_any": "allow_annotation_from_any",
}


@dataclass(frozen=True)
class RuleConfiguration:
    """
    Options fixed for the lifetime of one analysis pass.

    allow_annotation_from_any
        Accept ``const y: number = anyValue`` as an explicit, deliberate
        narrowing instead of reporting it.
    """
    allow_annotation_from_any: bool = False

    @classmethod
    def from_options(
        cls, options: Optional[Mapping[str, Any]] = None
    ) -> "RuleConfiguration":
        """
        Build from an options object, e.g. ``{"allowAnnotationFromAny": True}``.

        Unknown keys and non-boolean values raise ``ConfigurationError``.
        """
        values: Dict[str, Any] = {}
        for key, value in (options or {}).items():
            field_name = _OPTION_KEYS.get(key)
            if field_name is None:
                raise ConfigurationError(
                    f"unknown option '{key}' (expected one of "
                    f"{', '.join(sorted(_OPTION_KEYS))})"
                )
            if not isinstance(value, bool):
                raise ConfigurationError(
                    f"option '{key}' must be a boolean, got {type(value).__name__}"
                )
            values[field_name] = value
        return cls(**values)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "RuleConfiguration":
        """
        Load options from a JSON file.

        The file holds either the options object itself or
        ``{"no-unsafe-any": {...}}``.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(
                f"cannot read configuration {path}: {exc}", cause=exc
            ) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a JSON object")
        if "no-unsafe-any" in data:
            data = data["no-unsafe-any"]
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"{path}: 'no-unsafe-any' must be an object"
                )
        config = cls.from_options(data)
        logger.info("Configuration loaded from %s", path)
        return config

    def merged(self, **overrides: Any) -> "RuleConfiguration":
        """Copy with the non-None ``overrides`` applied."""
        values = self.to_options()
        for key, value in overrides.items():
            if value is not None:
                values[key] = value
        return RuleConfiguration.from_options(values)

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if self.allow_annotation_from_any:
            warnings.append(
                "allow_annotation_from_any is enabled: annotated declarations "
                "initialised from `any` are not reported"
            )
        return warnings

    def to_options(self) -> Dict[str, Any]:
        return {"allow_annotation_from_any": self.allow_annotation_from_any}


__all__ = ["RuleConfiguration"]
