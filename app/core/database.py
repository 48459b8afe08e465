"""

app/core/database.py

"""


from motor.motor_asyncio import AsyncIOMotorClient
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None
    db = None

db = Database()

async def connect_to_mongo():
    """Create database connection."""
    try:
        db.client = AsyncIOMotorClient(settings.MONGODB_URL)
        db.db = db.client[settings.DATABASE_NAME]

        # Create indexes for better performance
        await create_indexes()

        logger.info("Connected to MongoDB")
    except Exception as e:
        logger.error(f"Could not connect to MongoDB: {e}")
        raise

async def close_mongo_connection():
    """Close database connection."""
    if db.client:
        db.client.close()
        logger.info("Disconnected from MongoDB")

async def create_indexes():
    """Create database indexes for better performance"""
    try:
        # Song indexes
        await db.db.songs.create_index([("created_at", -1)])
        await db.db.songs.create_index([("status", 1)])
        # Duplicate lookups match titles case-insensitively
        await db.db.songs.create_index(
            [("title", 1), ("artist", 1)],
            name="songs_title_artist_ci",
            collation={"locale": "en", "strength": 2},
        )

        # Category indexes
        await db.db.categories.create_index([("name", 1)])

        # Identity / profile indexes
        await db.db.users.create_index([("email", 1)], unique=True)
        await db.db.users.create_index([("invite_token", 1)], sparse=True)
        await db.db.profiles.create_index([("email", 1)])
        await db.db.profiles.create_index([("created_at", -1)])

        logger.info("Database indexes created")
    except Exception as e:
        logger.error(f"Error creating indexes: {e}")

def get_database():
    """Get database instance"""
    return db.db
