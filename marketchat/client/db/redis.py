from redis import Redis

import marketchat.config.config as configs

redis_client = Redis(
    host=configs.REDIS_HOST,
    port=configs.REDIS_PORT,
    db=configs.REDIS_DB,
    decode_responses=True,
)
