import redis.asyncio as redis
import logging
from app.core.config import Settings

# Setup logger
logger = logging.getLogger("redis_client")


def create_redis_client(settings: Settings, socket_timeout: int = 5) -> redis.Redis:
    return redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=0,
        decode_responses=True,
        max_connections=100,
        socket_timeout=socket_timeout,
        socket_connect_timeout=5,
        health_check_interval=30
    )


async def get_redis_client(settings: Settings) -> redis.Redis:
    """Create a Redis client and verify the connection, retrying once."""
    client = create_redis_client(settings)
    try:
        pong = await client.ping()
        if pong:
            logger.info(f"✅ Redis connected successfully to {settings.REDIS_HOST}:{settings.REDIS_PORT}")
        return client
    except redis.ConnectionError as e:
        logger.error(f"❌ Redis connection failed: {e}. Attempting to reconnect...")
        await client.aclose()
        new_client = create_redis_client(settings, socket_timeout=10)
        try:
            pong = await new_client.ping()
            if pong:
                logger.info(f"✅ Redis reconnected successfully to {settings.REDIS_HOST}:{settings.REDIS_PORT}")
            return new_client
        except redis.ConnectionError as e2:
            logger.critical(f"❌ Redis reconnection failed: {e2}")
            raise e2
