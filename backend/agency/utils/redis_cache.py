import json
import logging
import time
from typing import Any, Callable, Dict, Optional

import redis

from ..config import settings


logger = logging.getLogger(__name__)
_redis_client: Optional[redis.Redis] = None
_redis_disabled_until: float = 0.0

KEY_PREFIX = "agency"
DEFAULT_TTL_SEC = 300


def _now() -> float:
    return time.time()


def _mark_redis_disabled(reason: str, seconds: int = 60) -> None:
    global _redis_disabled_until
    _redis_disabled_until = _now() + seconds
    logger.warning("redis disabled for %ss: %s", seconds, reason)


def get_redis() -> Optional[redis.Redis]:
    global _redis_client
    if _redis_disabled_until and _redis_disabled_until > _now():
        return None
    url = settings.REDIS_URL
    if not url:
        return None
    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=0.2,
                socket_timeout=0.5,
                retry_on_timeout=False,
                health_check_interval=30,
            )
            _redis_client.ping()
        except redis.RedisError as exc:
            logger.warning("redis unavailable: %s", exc)
            _mark_redis_disabled(str(exc))
            _redis_client = None
            return None
    return _redis_client


def build_content_key(tag: str, scope: str, params: Optional[Dict[str, Any]] = None) -> str:
    items = tuple(sorted((str(k), str(v)) for k, v in (params or {}).items() if v is not None and v != ""))
    return f"{KEY_PREFIX}:{tag}:{scope}:{items}"


def redis_get_json(key: str) -> Optional[Any]:
    client = get_redis()
    if client is None:
        return None
    try:
        raw = client.get(key)
        if not raw:
            return None
        return json.loads(raw)
    except (redis.RedisError, ValueError) as exc:
        logger.warning("redis get failed: %s", exc)
        return None


def redis_set_json(key: str, value: Any, ttl_sec: int = DEFAULT_TTL_SEC) -> bool:
    client = get_redis()
    if client is None:
        return False
    try:
        client.setex(key, ttl_sec, json.dumps(value, ensure_ascii=False, default=str))
        return True
    except redis.RedisError as exc:
        logger.warning("redis set failed: %s", exc)
        return False


def redis_delete_by_pattern(pattern: str) -> int:
    client = get_redis()
    if client is None:
        return 0
    deleted = 0
    try:
        for key in client.scan_iter(match=pattern, count=200):
            deleted += int(client.delete(key))
    except redis.RedisError as exc:
        logger.warning("redis scan/delete failed: %s", exc)
    return deleted


def invalidate_tag(tag: str) -> int:
    deleted = redis_delete_by_pattern(f"{KEY_PREFIX}:{tag}:*")
    if deleted:
        logger.info("cache invalidated tag=%s keys=%s", tag, deleted)
    return deleted


def cached_json(tag: str, scope: str, params: Optional[Dict[str, Any]], producer: Callable[[], Any], ttl_sec: int = DEFAULT_TTL_SEC) -> Any:
    key = build_content_key(tag, scope, params)
    hit = redis_get_json(key)
    if hit is not None:
        return hit
    value = producer()
    redis_set_json(key, value, ttl_sec)
    return value
