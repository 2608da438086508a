"""Persistence backends for the brand record.

The record is a single JSON document::

    {"state": {"brandDNA": {...}}, "schemaVersion": 1}
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import redis.asyncio as aioredis

from brand_dna.core.config import settings
from brand_dna.core.errors import StorageError
from brand_dna.core.metrics import STORAGE_DURATION

logger = logging.getLogger(__name__)


def encode_record(brand_dna: Dict[str, Any], schema_version: Optional[int] = None) -> str:
    version = schema_version if schema_version is not None else settings.BRAND_SCHEMA_VERSION
    return json.dumps(
        {"state": {"brandDNA": brand_dna}, "schemaVersion": version},
        ensure_ascii=False,
    )


def decode_record(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """Extract ``state.brandDNA``; absence and parse failures both yield None."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        logger.warning("Registro de marca corrompido, ignorando: %s", e)
        return None
    state = data.get("state") if isinstance(data, dict) else None
    brand = state.get("brandDNA") if isinstance(state, dict) else None
    return brand if isinstance(brand, dict) else None


class BrandStorage:
    """Async key/value slot holding the serialized brand record."""

    backend = "base"

    async def read(self) -> Optional[str]:
        start = time.perf_counter()
        try:
            return await self._read()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read brand record ({self.backend}): {e}") from e
        finally:
            STORAGE_DURATION.labels(backend=self.backend, operation="read").observe(time.perf_counter() - start)

    async def write(self, payload: str) -> None:
        start = time.perf_counter()
        try:
            await self._write(payload)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write brand record ({self.backend}): {e}") from e
        finally:
            STORAGE_DURATION.labels(backend=self.backend, operation="write").observe(time.perf_counter() - start)

    async def close(self) -> None:
        return None

    async def _read(self) -> Optional[str]:
        raise NotImplementedError

    async def _write(self, payload: str) -> None:
        raise NotImplementedError


class MemoryBrandStorage(BrandStorage):
    backend = "memory"

    def __init__(self, initial: Optional[str] = None):
        self.payload = initial

    async def _read(self) -> Optional[str]:
        return self.payload

    async def _write(self, payload: str) -> None:
        self.payload = payload


class FileBrandStorage(BrandStorage):
    backend = "file"

    def __init__(self, path: os.PathLike | str):
        self.path = Path(path)

    def _read_sync(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def _write_sync(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    async def _read(self) -> Optional[str]:
        return await asyncio.to_thread(self._read_sync)

    async def _write(self, payload: str) -> None:
        await asyncio.to_thread(self._write_sync, payload)


class RedisBrandStorage(BrandStorage):
    """Brand record stored under a single Redis key, no TTL."""

    backend = "redis"

    def __init__(self, redis_url: str, key: Optional[str] = None):
        self.key = key or settings.BRAND_STORAGE_KEY
        self.redis_client: Optional[aioredis.Redis] = aioredis.from_url(redis_url, decode_responses=True)
        logger.info("Brand storage Redis configurado: %s (key=%s)", redis_url, self.key)

    async def _read(self) -> Optional[str]:
        return await self.redis_client.get(self.key)

    async def _write(self, payload: str) -> None:
        await self.redis_client.set(self.key, payload)

    async def close(self) -> None:
        if self.redis_client:
            try:
                await self.redis_client.aclose()
                logger.info("Conexão Redis fechada")
            except Exception as e:
                logger.error("Erro ao fechar conexão Redis: %s", e)
            self.redis_client = None


def storage_from_url(url: Optional[str] = None, key: Optional[str] = None) -> BrandStorage:
    url = url or settings.BRAND_STORAGE_URL
    parsed = urlparse(url)
    if parsed.scheme == "memory":
        return MemoryBrandStorage()
    if parsed.scheme in ("redis", "rediss", "unix"):
        return RedisBrandStorage(url, key)
    if parsed.scheme == "file":
        return FileBrandStorage(parsed.netloc + parsed.path)
    if parsed.scheme in ("", None) or len(parsed.scheme) == 1:
        # plain path (a one-letter scheme is a Windows drive)
        return FileBrandStorage(url)
    raise ValueError(f"Unsupported brand storage URL: {url}")
