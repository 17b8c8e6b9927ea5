"""Load Elo system definitions from TOML files."""

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from domain.ratings.elo.calculator import K_FACTOR_MODES, EloParameters


@dataclass(frozen=True)
class EloSystemConfig:
    """One named Elo system read from ``configs/ratings/elo``."""

    name: str
    description: str | None
    file_path: Path
    parameters: EloParameters

    def as_config_json(self) -> dict[str, Any]:
        return asdict(self.parameters)


def load_elo_system_configs(config_dir: Path) -> list[EloSystemConfig]:
    """Load and validate every ``*.toml`` file in ``config_dir``.

    Files are read in name order. System names must be unique across the
    directory.
    """
    if not config_dir.exists():
        raise FileNotFoundError(f"Config directory not found: {config_dir}")
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Config path is not a directory: {config_dir}")

    config_files = sorted(config_dir.glob("*.toml"))
    if not config_files:
        raise ValueError(f"No .toml config files found in: {config_dir}")

    systems: list[EloSystemConfig] = []
    for file_path in config_files:
        with file_path.open("rb") as file:
            systems.append(_parse_elo_system_config(tomllib.load(file), file_path))

    names = [system.name for system in systems]
    if len(names) != len(set(names)):
        raise ValueError(f"Duplicate elo system names found in {config_dir}: {names}")
    return systems


def find_elo_system_config(config_dir: Path, name: str) -> EloSystemConfig:
    """Return the config named ``name`` from ``config_dir``."""
    configs = load_elo_system_configs(config_dir)
    for config in configs:
        if config.name == name:
            return config
    available = ", ".join(config.name for config in configs)
    raise KeyError(f"No elo system named {name!r} in {config_dir}. Available: {available}")


def _parse_elo_system_config(raw: dict[str, Any], file_path: Path) -> EloSystemConfig:
    system_raw = raw.get("system", {})
    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")
    description = system_raw.get("description")

    elo_raw = raw.get("elo", {})
    parameters = EloParameters(
        initial_rating=int(elo_raw.get("initial_rating", 1200)),
        k_factor=float(elo_raw.get("k_factor", 32.0)),
        scale_factor=float(elo_raw.get("scale_factor", 400.0)),
        rating_floor=int(elo_raw.get("rating_floor", 0)),
        k_factor_mode=str(elo_raw.get("k_factor_mode", "fixed")).strip().lower(),
        provisional_k_factor=float(elo_raw.get("provisional_k_factor", 40.0)),
        provisional_match_count=int(elo_raw.get("provisional_match_count", 30)),
        high_rating_k_factor=float(elo_raw.get("high_rating_k_factor", 16.0)),
        high_rating_threshold=int(elo_raw.get("high_rating_threshold", 2400)),
    )
    _validate_parameters(file_path=file_path, parameters=parameters)

    return EloSystemConfig(
        name=name,
        description=None if description is None else str(description),
        file_path=file_path,
        parameters=parameters,
    )


def _validate_parameters(*, file_path: Path, parameters: EloParameters) -> None:
    if parameters.initial_rating < parameters.rating_floor:
        raise ValueError(f"{file_path}: [elo].initial_rating must be >= rating_floor")
    if parameters.rating_floor < 0:
        raise ValueError(f"{file_path}: [elo].rating_floor must be >= 0")
    if parameters.k_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].k_factor must be > 0")
    if parameters.scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].scale_factor must be > 0")
    if parameters.k_factor_mode not in K_FACTOR_MODES:
        raise ValueError(
            f"{file_path}: [elo].k_factor_mode must be one of {', '.join(K_FACTOR_MODES)}"
        )
    if parameters.provisional_k_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].provisional_k_factor must be > 0")
    if parameters.provisional_match_count < 0:
        raise ValueError(f"{file_path}: [elo].provisional_match_count must be >= 0")
    if parameters.high_rating_k_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].high_rating_k_factor must be > 0")
