"""Shared, lazily loaded assets addressed by path."""

from __future__ import annotations

import os
import weakref
from typing import Tuple, Type, TypeVar

ASSETS_DIRECTORY = os.environ.get("OTB_ASSETS_DIRECTORY", "assets")


class AssetBase:
    """An asset loaded from a path below the assets directory."""

    def __init__(self, path: str) -> None:
        self.path = path


A = TypeVar("A", bound=AssetBase)

_storage: "weakref.WeakValueDictionary[Tuple[type, str], AssetBase]" = weakref.WeakValueDictionary()


def sibling_asset(asset_path: str, ext: str) -> str:
    """The same asset path with its extension replaced by ``ext``."""
    dot = asset_path.rfind(".")
    if dot < 0:
        raise ValueError(f"asset path {asset_path!r} has no extension")
    return asset_path[:dot] + ext


def asset_file_path(asset_path: str) -> str:
    """The file-system path of an asset."""
    return f"{ASSETS_DIRECTORY}{asset_path}"


def get_asset(asset_type: Type[A], path: str) -> A:
    """The live asset of this type and path, loading it if none is held."""
    if not (isinstance(asset_type, type) and issubclass(asset_type, AssetBase)):
        raise TypeError(f"{asset_type!r} is not an asset type")
    key = (asset_type, path)
    asset = _storage.get(key)
    if asset is None:
        asset = asset_type(path)
        _storage[key] = asset
    return asset  # type: ignore[return-value]