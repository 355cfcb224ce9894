"""Utility helpers for reading the reference datasets used by the engine."""

from __future__ import annotations

import json
import math
import os
import re
import time
from functools import lru_cache
from os import PathLike
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Union

import yaml

__all__ = [
    "load_data",
    "load_dataset",
    "lazy_dataset",
    "clear_dataset_cache",
    "dataset_file",
    "dataset_paths",
    "dataset_search_paths",
    "get_data_dir",
    "get_extra_dirs",
    "overlay_dir",
    "normalize_key",
    "list_dataset_entries",
    "parse_range",
    "deep_update",
    "list_dataset_files",
]

PathType = Union[str, PathLike]

# Bundled datasets live next to the package so an installed engine works
# without a checkout. ``AQUARIUM_DATA_DIR`` replaces the bundled directory,
# ``AQUARIUM_EXTRA_DATA_DIRS`` appends further directories (``os.pathsep``
# separated) and ``AQUARIUM_OVERLAY_DIR`` holds user overrides merged last.
DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"
DATA_ENV = "AQUARIUM_DATA_DIR"
OVERLAY_ENV = "AQUARIUM_OVERLAY_DIR"
EXTRA_ENV = "AQUARIUM_EXTRA_DATA_DIRS"

DATASET_SUFFIXES = {".json", ".yaml", ".yml"}
_NUMBER = re.compile(r"(?<![\d.])[-+]?\d*\.?\d+(?:e[-+]?\d+)?", re.IGNORECASE)


def load_data(path: PathType) -> Any:
    """Return the parsed contents of ``path`` supporting JSON or YAML.

    A :class:`FileNotFoundError` is raised if the file does not exist and a
    :class:`ValueError` is raised when the contents cannot be decoded. The
    error message always includes the file path.
    """

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    with open(p, "r", encoding="utf-8") as f:
        if p.suffix.lower() in {".yaml", ".yml"}:
            try:
                return yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ValueError(f"Invalid YAML in {p}: {exc}") from exc
        try:
            return json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {p}: {exc}") from exc


def deep_update(base: Dict[str, Any], other: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``other`` into ``base`` and return ``base``."""

    for key, value in other.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_update(current, value)
        else:
            base[key] = value
    return base


def _env_state() -> tuple[str | None, str | None, str | None]:
    return os.getenv(DATA_ENV), os.getenv(EXTRA_ENV), os.getenv(OVERLAY_ENV)


@lru_cache(maxsize=8)
def _resolve_paths(state: tuple[str | None, str | None, str | None]) -> tuple[tuple[Path, ...], Path | None]:
    data_env, extra_env, overlay_env = state
    base = Path(data_env).expanduser() if data_env else DEFAULT_DATA_DIR
    extras = tuple(
        Path(part).expanduser()
        for part in (extra_env or "").split(os.pathsep)
        if part and Path(part).expanduser().is_dir()
    )
    overlay = Path(overlay_env).expanduser() if overlay_env else None
    return (base, *extras), overlay


def get_data_dir() -> Path:
    """Return base dataset directory honoring ``AQUARIUM_DATA_DIR``."""

    return _resolve_paths(_env_state())[0][0]


def get_extra_dirs() -> tuple[Path, ...]:
    """Return existing directories listed in ``AQUARIUM_EXTRA_DATA_DIRS``."""

    return _resolve_paths(_env_state())[0][1:]


def overlay_dir() -> Path | None:
    """Return the user override directory from ``AQUARIUM_OVERLAY_DIR``."""

    return _resolve_paths(_env_state())[1]


def dataset_paths() -> tuple[Path, ...]:
    """Return directories merged when loading a dataset, overlay excluded.

    Every cache in this module is keyed on the environment state, so
    pointing the variables at another directory takes effect on the next
    call without clearing anything.
    """

    return _resolve_paths(_env_state())[0]


def dataset_search_paths(include_overlay: bool = False) -> tuple[Path, ...]:
    """Return dataset search paths optionally including the overlay first."""

    paths, overlay = _resolve_paths(_env_state())
    if include_overlay and overlay:
        return (overlay, *paths)
    return paths


def dataset_file(filename: str) -> Path | None:
    """Return the highest priority existing path for ``filename``."""

    return _dataset_file(filename, _env_state())


@lru_cache(maxsize=None)
def _dataset_file(filename: str, state: tuple[str | None, str | None, str | None]) -> Path | None:
    paths, overlay = _resolve_paths(state)
    for base in (*([overlay] if overlay else []), *paths):
        path = base / filename
        if path.exists():
            return path
    return None


def load_dataset(filename: str) -> Dict[str, Any]:
    """Return dataset ``filename`` merged with any extra and overlay data.

    Directories are merged in order: data dir, extra dirs, overlay. The
    returned mapping is shared between callers; treat it as read-only.
    """

    return _load_dataset(filename, _env_state())


@lru_cache(maxsize=None)
def _load_dataset(filename: str, state: tuple[str | None, str | None, str | None]) -> Dict[str, Any]:
    data: Any = {}
    paths, overlay = _resolve_paths(state)
    for base in (*paths, *([overlay] if overlay else [])):
        path = base / filename
        if not path.exists():
            continue
        extra = load_data(path)
        if isinstance(extra, dict) and isinstance(data, dict):
            deep_update(data, extra)
        else:
            data = extra
    return data


def lazy_dataset(filename: str, *, ttl: float | None = None):
    """Return a cached loader callable for dataset ``filename``.

    The loader re-reads the dataset when the resolved file or its
    modification time changes, and after ``ttl`` seconds when given.
    """

    cache: Dict[str, Any] = {}

    def _loader() -> Dict[str, Any]:
        path = dataset_file(filename)
        key = (path, path.stat().st_mtime if path else None)
        now = time.time()
        expired = ttl is not None and now - cache.get("stamp", now) > ttl
        if "data" not in cache or cache.get("key") != key or expired:
            _load_dataset.cache_clear()
            cache.update(data=load_dataset(filename), key=key, stamp=now)
        return cache["data"]

    return _loader


def clear_dataset_cache() -> None:
    """Clear cached dataset results and search paths."""

    _resolve_paths.cache_clear()
    _dataset_file.cache_clear()
    _load_dataset.cache_clear()
    _list_dataset_files.cache_clear()


def normalize_key(key: str) -> str:
    """Return ``key`` normalized for case-insensitive dataset lookups.

    Whitespace, hyphens and underscores collapse to a single underscore so
    ``"Every 2 days"``, ``"every-2-days"`` and ``"EVERY_2_DAYS"`` all match.
    """

    value = str(key).casefold().replace("-", " ").replace("_", " ")
    return "_".join(value.split())


def list_dataset_entries(dataset: Mapping[str, Any]) -> list[str]:
    """Return sorted top-level keys from a dataset mapping."""

    return sorted(str(k) for k in dataset.keys())


def parse_range(value: Iterable[float] | str) -> tuple[float, float] | None:
    """Return a ``(low, high)`` tuple or ``None`` if ``value`` is invalid.

    ``value`` may hold two numbers or be a string such as ``"1-3"`` or
    ``"0.1 to 0.5"``. Order is preserved so callers can reject reversed
    ranges.
    """

    if isinstance(value, str):
        numbers = [abs(float(m.group())) for m in _NUMBER.finditer(re.sub(r"(?i)\bto\b", " ", value))]
    else:
        try:
            numbers = [float(v) for v in list(value)[:2]]
        except (TypeError, ValueError):
            return None

    if len(numbers) < 2:
        return None
    low, high = numbers[0], numbers[1]
    if not (math.isfinite(low) and math.isfinite(high)):
        return None
    return low, high


def list_dataset_files() -> list[str]:
    """Return alphabetically sorted dataset files available in search paths."""

    return list(_list_dataset_files(_env_state()))


@lru_cache(maxsize=None)
def _list_dataset_files(state: tuple[str | None, str | None, str | None]) -> tuple[str, ...]:
    paths, overlay = _resolve_paths(state)
    files: set[str] = set()
    for base in (*([overlay] if overlay else []), *paths):
        if not base.is_dir():
            continue
        for path in base.rglob("*"):
            if path.suffix.lower() in DATASET_SUFFIXES and path.is_file():
                files.add(path.relative_to(base).as_posix())
    return tuple(sorted(files))
