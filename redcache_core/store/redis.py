"""RedCache Redis Store - Redis Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import redis
from redis.exceptions import RedisError

from redcache_core.store.backend import StorageBackend, StorageConfig

logger = logging.getLogger(__name__)

# SET NX [PX] and, when the key already exists, GET in a single server-side step.
PUT_IF_ABSENT_SCRIPT = """
local written
if tonumber(ARGV[2]) > 0 then
    written = redis.call('SET', KEYS[1], ARGV[1], 'NX', 'PX', ARGV[2])
else
    written = redis.call('SET', KEYS[1], ARGV[1], 'NX')
end
if written then
    return false
end
return redis.call('GET', KEYS[1])
"""


@dataclass
class RedisConfig(StorageConfig):
    """Redis-specific configuration.

    Attributes:
        url: Connection URL; overrides host/port/db/password when set
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        ssl: Enable SSL
        ssl_ca_certs: CA certificates path
        max_connections: Connection pool size
        scripting: Use a Lua script for atomic put-if-absent
    """

    url: Optional[str] = None
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    ssl: bool = False
    ssl_ca_certs: Optional[str] = None
    max_connections: int = 10
    scripting: bool = True


class RedisStore(StorageBackend):
    """Redis storage backend.

    Thin adapter from the store command surface to redis-py. Connections
    are checked out of a pool per command and returned on every exit path
    by redis-py itself. Command failures are logged and re-raised; retrying
    is left to the caller.

    Example:
        store = RedisStore(RedisConfig(host="redis.local", port=6379))
        store.set(b"users::42", b"...", px=5000)
        value = store.get(b"users::42")
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[redis.Redis] = None,
    ):
        """Initialize Redis store.

        Args:
            config: Redis configuration
            client: Pre-built client; the store will not close its pool
        """
        super().__init__(config)
        self.config: RedisConfig = config or RedisConfig()
        self._client: Optional[redis.Redis] = client
        self._owns_client = client is None
        self._pool: Optional[redis.ConnectionPool] = None
        self._put_if_absent_script: Optional[Any] = None
        self._connect_lock = threading.Lock()

    def _create_pool(self) -> redis.ConnectionPool:
        if self.config.url:
            return redis.ConnectionPool.from_url(
                self.config.url,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                max_connections=self.config.max_connections,
            )

        pool_kwargs = dict(
            host=self.config.host,
            port=self.config.port,
            db=self.config.db,
            password=self.config.password,
            socket_timeout=self.config.socket_timeout,
            socket_connect_timeout=self.config.socket_connect_timeout,
            max_connections=self.config.max_connections,
        )
        if self.config.ssl:
            pool_kwargs.update(
                connection_class=redis.SSLConnection,
                ssl_ca_certs=self.config.ssl_ca_certs,
            )
        return redis.ConnectionPool(**pool_kwargs)

    def _ensure_connected(self) -> redis.Redis:
        """Ensure Redis connection exists.

        Only the first caller builds the pool; concurrent callers wait for it.

        Returns:
            Redis client
        """
        client = self._client
        if client is not None:
            return client

        with self._connect_lock:
            if self._client is not None:
                return self._client

            pool = None
            try:
                pool = self._create_pool()
                client = redis.Redis(connection_pool=pool)
                client.ping()
            except RedisError as e:
                logger.error(f"Failed to connect to Redis: {e}")
                self._stats.record_error(str(e))
                if pool is not None:
                    pool.disconnect()
                raise

            self._pool = pool
            self._client = client
            logger.info(f"Connected to Redis at {self._describe()}")
            return client

    def _script(self, client: redis.Redis) -> Any:
        script = self._put_if_absent_script
        if script is None:
            with self._connect_lock:
                if self._put_if_absent_script is None:
                    self._put_if_absent_script = client.register_script(PUT_IF_ABSENT_SCRIPT)
                script = self._put_if_absent_script
        return script

    def _describe(self) -> str:
        if self.config.url:
            return self.config.url.rsplit("@", 1)[-1]
        return f"{self.config.host}:{self.config.port}/{self.config.db}"

    def _call(self, command: str, *args: Any, **kwargs: Any) -> Any:
        """Run a redis-py command, recording and re-raising failures."""
        client = self._ensure_connected()
        try:
            return getattr(client, command)(*args, **kwargs)
        except RedisError as e:
            logger.error(f"Redis {command} error: {e}")
            self._stats.record_error(str(e))
            raise

    def get(self, key: bytes) -> Optional[bytes]:
        self._stats.reads += 1
        return self._call("get", key)

    def set(self, key: bytes, value: bytes, px: Optional[int] = None) -> None:
        self._call("set", key, value, px=px)
        self._stats.writes += 1

    def set_nx(self, key: bytes, value: bytes, px: Optional[int] = None) -> bool:
        written = bool(self._call("set", key, value, nx=True, px=px))
        if written:
            self._stats.writes += 1
        return written

    def pexpire(self, key: bytes, ms: int) -> bool:
        return bool(self._call("pexpire", key, ms))

    def pttl(self, key: bytes) -> int:
        return int(self._call("pttl", key))

    def delete(self, *keys: bytes) -> int:
        if not keys:
            return 0
        count = int(self._call("delete", *keys))
        self._stats.deletes += count
        return count

    def exists(self, key: bytes) -> bool:
        return self._call("exists", key) > 0

    def keys(self, pattern: bytes) -> List[bytes]:
        return list(self._call("keys", pattern))

    def scan(
        self,
        cursor: int = 0,
        match: Optional[bytes] = None,
        count: Optional[int] = None,
    ) -> Tuple[int, List[bytes]]:
        next_cursor, keys = self._call("scan", cursor=cursor, match=match, count=count)
        return int(next_cursor), list(keys)

    def put_if_absent(
        self,
        key: bytes,
        value: bytes,
        px: Optional[int] = None,
    ) -> Optional[bytes]:
        if not self.config.scripting:
            return super().put_if_absent(key, value, px)

        script = self._script(self._ensure_connected())

        try:
            existing = script(keys=[key], args=[value, px or 0])
        except RedisError as e:
            logger.error(f"Redis put_if_absent script error: {e}")
            self._stats.record_error(str(e))
            raise

        if existing is None:
            self._stats.writes += 1
        return existing

    def info(self) -> dict:
        """Get Redis server info.

        Returns:
            Server info dict
        """
        return self._call("info")

    def close(self) -> None:
        """Close Redis connection."""
        if self._pool is not None and self._owns_client:
            self._pool.disconnect()
            logger.info(f"Disconnected from Redis at {self._describe()}")
        self._pool = None
        if self._owns_client:
            self._client = None
        self._put_if_absent_script = None

    def __repr__(self) -> str:
        return f"RedisStore({self._describe()})"


__all__ = ["RedisStore", "RedisConfig", "PUT_IF_ABSENT_SCRIPT"]
