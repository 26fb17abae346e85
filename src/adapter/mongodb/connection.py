import logging

from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

logger = logging.getLogger(__name__)

# PyMongo driver logs are noisy at INFO
logging.getLogger('pymongo').setLevel(logging.WARNING)

USERS_COLLECTION_NAME = 'users'


def create_mongodb_client(url: str) -> MongoClient:
    """Create a MongoDB client and verify it with a ping.

    Raises:
        ConnectionFailure, PyMongoError: server unreachable or URL invalid
    """
    client = MongoClient(
        url,
        serverSelectionTimeoutMS=5000,  # 5s timeout for server selection
        connectTimeoutMS=5000,
        socketTimeoutMS=30000,
        maxPoolSize=10,
        minPoolSize=0,
        maxIdleTimeMS=30000,
        waitQueueTimeoutMS=10000,
        retryWrites=True,
        retryReads=True,
        tz_aware=True,
    )
    try:
        client.admin.command('ping')
    except (ConnectionFailure, PyMongoError) as e:
        logger.error(f"[MONGODB] Initial connection failed: {str(e)[:200]}")
        client.close()
        raise

    logger.info("[MONGODB] Connected successfully")
    return client
