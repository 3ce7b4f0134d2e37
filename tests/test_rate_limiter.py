from redis.exceptions import ConnectionError as RedisConnectionError

from events_api.infrastructure.external_services.rate_limiter import RateLimiter


class UnreachableRedis:

    async def incr(self, key):
        raise RedisConnectionError("Connection refused")

    async def ping(self):
        raise RedisConnectionError("Connection refused")


async def test_allows_up_to_the_limit(fake_redis):
    limiter = RateLimiter(fake_redis, attempts=3, window_seconds=900)

    results = [await limiter.hit("login:10.0.0.1") for _ in range(4)]

    assert [result.allowed for result in results] == [True, True, True, False]
    assert [result.remaining for result in results[:3]] == [2, 1, 0]
    assert results[-1].retry_after == 900
    assert fake_redis.expiries == {"ratelimit:login:10.0.0.1": 900}


async def test_keys_are_independent(fake_redis):
    limiter = RateLimiter(fake_redis, attempts=1, window_seconds=60)

    assert (await limiter.hit("login:a")).allowed
    assert (await limiter.hit("login:b")).allowed
    assert not (await limiter.hit("login:a")).allowed


async def test_reset(fake_redis):
    limiter = RateLimiter(fake_redis, attempts=1, window_seconds=60)
    await limiter.hit("refresh:a")
    await limiter.reset("refresh:a")

    assert (await limiter.hit("refresh:a")).allowed


async def test_missing_expiry_restarts_window(fake_redis):
    limiter = RateLimiter(fake_redis, attempts=5, window_seconds=60)
    fake_redis.counts["ratelimit:login:a"] = 2

    result = await limiter.hit("login:a")

    assert result.allowed
    assert fake_redis.expiries["ratelimit:login:a"] == 60


async def test_fails_open_when_redis_is_down():
    limiter = RateLimiter(UnreachableRedis(), attempts=1, window_seconds=60)

    for _ in range(3):
        assert (await limiter.hit("login:a")).allowed
    assert await limiter.ping() is False


async def test_close(fake_redis):
    await RateLimiter(fake_redis, attempts=1, window_seconds=60).close()
    assert fake_redis.closed
