"""Storage startup: MongoDB via Beanie, or the in-memory store."""
import logging

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from tutorgroups.config import Settings, settings as default_settings
from tutorgroups.store import AggregateStore, InMemoryStore
from tutorgroups.store.mongo import DOCUMENT_MODELS, MongoStore

logger = logging.getLogger(__name__)

_client = None


async def db_startup(config: Settings = default_settings) -> AggregateStore:
    """Connect to MongoDB, initialize Beanie and return the store."""
    global _client
    if config.store_backend == "memory":
        logger.warning("STORE_BACKEND=memory: data is lost when the process exits")
        return InMemoryStore()

    _client = AsyncIOMotorClient(config.mongodb_url)
    await init_beanie(
        database=_client[config.mongodb_db_name],
        document_models=list(DOCUMENT_MODELS.values()),
    )
    return MongoStore(_client, transactions=config.mongodb_transactions)


async def db_shutdown():
    """Close MongoDB connection."""
    global _client
    if _client:
        _client.close()
        _client = None
