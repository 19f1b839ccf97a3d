"""
Local cache of owned non-fungible token instances
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class TokenAsset:
    """
    A token instance with its decoded attributes.

    `rom` holds the immutable attributes and `ram` the mutable ones,
    as produced by the caller's record decoders.
    """
    token_id: str
    owner_address: str
    rom: Any
    ram: Any


class AssetCache:
    """
    Token-instance id to TokenAsset mapping.

    Single writer: resyncs must not overlap. A second resync started
    while one is running raises RuntimeError.
    """

    def __init__(self):
        self._assets: Dict[str, TokenAsset] = {}
        self._resync_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._assets)

    def __contains__(self, token_id: str) -> bool:
        return token_id in self._assets

    def __iter__(self) -> Iterator[TokenAsset]:
        return iter(list(self._assets.values()))

    def get(self, token_id: str) -> Optional[TokenAsset]:
        return self._assets.get(token_id)

    def ids(self) -> List[str]:
        return list(self._assets)

    def insert(self, asset: TokenAsset):
        """
        Add one asset.

        Raises:
            ValueError: If the id is already cached
        """
        if asset.token_id in self._assets:
            raise ValueError(f"token {asset.token_id} already cached")
        self._assets[asset.token_id] = asset
        logger.debug("cached token %s", asset.token_id)

    def remove(self, token_id: str) -> Optional[TokenAsset]:
        return self._assets.pop(token_id, None)

    def begin_resync(self):
        """Claim the writer slot for a resync"""
        if not self._resync_lock.acquire(blocking=False):
            raise RuntimeError("a cache resync is already in progress")

    def end_resync(self):
        self._resync_lock.release()

    def replace_all(self, assets: Iterable[TokenAsset]):
        """
        Swap the whole content for `assets` in one step.

        Raises:
            ValueError: If `assets` repeats an id; the cache is left unchanged
        """
        fresh: Dict[str, TokenAsset] = {}
        for asset in assets:
            if asset.token_id in fresh:
                raise ValueError(f"duplicate token id {asset.token_id}")
            fresh[asset.token_id] = asset
        self._assets = fresh
        logger.info("asset cache resynced with %d tokens", len(fresh))
