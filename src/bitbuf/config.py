"""Tool configuration: YAML via OmegaConf, validated with pydantic."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Mapping

from omegaconf import OmegaConf
from pydantic import BaseModel, Field


class BitBufConfig(BaseModel):
    default_capacity: int = Field(default=1400, gt=0)  # bytes
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_json: bool = False
    log_file: str | None = None


def load_config(
    path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> BitBufConfig:
    """Load ``path`` (if given) over the defaults, then apply dotted ``overrides``.

    Raises:
        FileNotFoundError: ``path`` does not exist.
        pydantic.ValidationError: a value is out of range.
    """
    cfg = OmegaConf.create(BitBufConfig().model_dump())
    if path is not None:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Config not found: {p}")
        cfg = OmegaConf.merge(cfg, OmegaConf.load(p))
    for dotpath, value in (overrides or {}).items():
        if value is not None:
            OmegaConf.update(cfg, dotpath, value)
    return BitBufConfig.model_validate(OmegaConf.to_container(cfg, resolve=True))
