import logging
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure

logger = logging.getLogger(__name__)

CLAIMS_COLLECTION = "verified_claims"


def create_client(mongo_uri: str) -> MongoClient:
    """
    Create a MongoDB client. The caller owns it and must close it.

    Args:
        mongo_uri (str): MongoDB connection string

    Returns:
        MongoClient: Lazily-connecting client
    """
    return MongoClient(mongo_uri, serverSelectionTimeoutMS=5000)


def ping(client: MongoClient) -> bool:
    """Check the MongoDB connection, logging the result."""
    try:
        client.admin.command("ping")
        logger.info("[Database] MongoDB connection is successful!")
        return True
    except ConnectionFailure as e:
        logger.error(f"[Database] MongoDB connection failed: {e}")
        return False


def get_claims_collection(client: MongoClient, db_name: str) -> Collection:
    """Return the collection holding verified claim records."""
    return client[db_name][CLAIMS_COLLECTION]
