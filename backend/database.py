from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
import os
import logging
from pathlib import Path
from contextlib import asynccontextmanager

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

logger = logging.getLogger(__name__)

# collection -> [(keys, options)]
INDEXES = {
    "users": [
        ("user_id", {"unique": True}),
        ("email", {"unique": True}),
        ([("created_at", -1)], {}),
        ("claims.premium", {}),
    ],
    # History is always listed per user, newest first
    "generated_documents": [
        ("document_id", {"unique": True}),
        ([("user_id", 1), ("created_at", -1)], {}),
    ],
    # One record per Lemon Squeezy order event; redeliveries must not grant twice
    "webhook_events": [
        ("event_id", {"unique": True}),
    ],
}


class Database:
    client: AsyncIOMotorClient = None
    db = None

    async def connect(self):
        mongo_url = os.environ['MONGO_URL']
        db_name = os.environ['DB_NAME']
        try:
            self.client = AsyncIOMotorClient(mongo_url)
            self.db = self.client[db_name]
            await self.db.command("ping")
            logger.info(f"Connected to MongoDB: {db_name}")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

        await self.ensure_indexes()

    async def close(self):
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")

    def get_db(self):
        return self.db

    async def ensure_indexes(self):
        for collection, indexes in INDEXES.items():
            for keys, options in indexes:
                try:
                    await self.db[collection].create_index(keys, **options)
                except Exception as e:
                    # Existing index with different options
                    logger.warning(f"Index {collection}.{keys}: {e}")
        logger.info("MongoDB indexes created/verified")


# Global database instance
database = Database()


@asynccontextmanager
async def get_db_context():
    """Database handle for standalone scripts.

    Usage in scripts:
        async with get_db_context() as db:
            await db.users.find_one(...)
    """
    client = AsyncIOMotorClient(os.environ['MONGO_URL'])
    try:
        db = client[os.environ['DB_NAME']]
        await db.command("ping")
        yield db
    finally:
        client.close()
