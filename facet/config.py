"""
JSON configuration for the faceting CLI.

Example document (every key optional, defaults shown):

    {
      "chance": 75,
      "lines": [0, 0, 0],
      "rolls": [0, 0, 0],
      "target_lines": [7, 7, 4],
      "target_rolls": [10, 10, 10],
      "precision": 6
    }

Validation is strict: unknown keys, wrong types, triples that are not three
non-negative integers, invalid chance labels and out-of-range precision all
raise ValueError naming the offending key.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from facet.engine.chance import Chance
from facet.engine.stone import Stone, _triple
from facet.engine.target import DEFAULT_TARGET, Target

MAX_PRECISION: int = 30


@dataclass(frozen=True)
class FacetConfig:
    """Starting state, target and output precision for one solver run."""

    chance: int = Chance.default().percent
    lines: tuple[int, int, int] = (0, 0, 0)
    rolls: tuple[int, int, int] = (0, 0, 0)
    target_lines: tuple[int, int, int] = DEFAULT_TARGET.lines
    target_rolls: tuple[int, int, int] = DEFAULT_TARGET.rolls
    precision: int = 6

    def __post_init__(self) -> None:
        Chance.from_percent(self.chance)
        for name in ("lines", "rolls", "target_lines", "target_rolls"):
            try:
                object.__setattr__(self, name, _triple(getattr(self, name), name))
            except TypeError:
                raise ValueError(f"{name} must be a list of 3 integers.") from None
        if isinstance(self.precision, bool) or not isinstance(self.precision, int):
            raise ValueError(f"precision must be an integer, got {self.precision!r}.")
        if not 0 <= self.precision <= MAX_PRECISION:
            raise ValueError(f"precision must be between 0 and {MAX_PRECISION}, got {self.precision}.")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FacetConfig:
        """Build a config from a parsed JSON object.

        Raises:
            ValueError: on unknown keys or invalid values.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Config must be a JSON object, got {type(data).__name__}.")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config key(s): {', '.join(unknown)}.")
        return cls(**data)

    def merged(self, **overrides: Any) -> FacetConfig:
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def stone(self) -> Stone:
        return Stone(Chance.from_percent(self.chance), self.lines, self.rolls)

    def target(self) -> Target:
        return Target.of(self.target_lines, self.target_rolls)


def load_config(path: str | Path) -> FacetConfig:
    """Read and validate a JSON config file.

    Raises:
        ValueError: if the file is not valid JSON or fails validation.
        OSError:    if the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path}: invalid JSON ({exc.msg} at line {exc.lineno}).") from exc
    return FacetConfig.from_dict(data)
