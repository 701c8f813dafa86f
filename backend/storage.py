# Key-value persistence for the study state.
# Each key holds one JSON-serializable blob that is always rewritten in full.
# Storage is best effort: a failing backend is logged and reported through
# the return value of save(), and the app keeps running on its memory state.

import json
import logging
import os

from pymongo import MongoClient
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

UNKNOWN_KEY = 'unknownWords'
SRS_KEY = 'srsData'


class MemoryStorage:
    """Dict-backed storage, used for tests and when no backend is available"""

    def __init__(self, initial=None):
        self.data = {}
        for key, blob in (initial or {}).items():
            self.data[key] = json.loads(json.dumps(blob))

    def load(self, key, default=None):
        if key not in self.data:
            return default
        # hand out a copy, like reading a file would
        return json.loads(json.dumps(self.data[key]))

    def save(self, key, blob):
        self.data[key] = json.loads(json.dumps(blob))
        return True


class JsonFileStorage:
    """Stores each key as <directory>/<key>.json"""

    def __init__(self, directory):
        """
        Parameters:
            directory(str): Folder holding the JSON files, created if missing
        """
        self.directory = directory

    def _path(self, key):
        return os.path.join(self.directory, f"{key}.json")

    def load(self, key, default=None):
        """
        Read one blob back from its file.
        A missing file means first run; an unreadable one is logged.
        """
        try:
            with open(self._path(key), 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            return default
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s, using defaults: %s", self._path(key), e)
            return default

    def save(self, key, blob):
        """
        Overwrite the whole file for this key.
        JSON does not support partial updates, so the full structure is written.
        """
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(self._path(key), 'w', encoding='utf-8') as f:
                json.dump(blob, f, ensure_ascii=False, indent=2)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Could not save %s: %s", self._path(key), e)
            return False
        return True


class MongoStorage:
    """Stores each key as one {_id: key, value: blob} document"""

    def __init__(self, uri, database, collection='state', client=None):
        self.client = client or MongoClient(
            uri,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000
        )
        self.collection = self.client[database][collection]

    def load(self, key, default=None):
        try:
            doc = self.collection.find_one({'_id': key})
        except PyMongoError as e:
            logger.warning("MongoDB load of %s failed, using defaults: %s", key, e)
            return default
        if not doc:
            return default
        return doc.get('value', default)

    def save(self, key, blob):
        try:
            self.collection.replace_one(
                {'_id': key},
                {'_id': key, 'value': blob},
                upsert=True
            )
        except PyMongoError as e:
            logger.error("MongoDB save of %s failed: %s", key, e)
            return False
        return True


def create_storage(backend, data_dir=None, mongo_uri=None, database=None, collection='state'):
    """
    Build the storage adapter named by configuration.
    Parameters:
        backend(str): 'json', 'mongo' or 'memory'
    Falls back to MemoryStorage when the backend cannot be set up.
    """
    backend = (backend or 'json').lower()

    if backend == 'memory':
        return MemoryStorage()

    if backend == 'json':
        return JsonFileStorage(data_dir or '.drill_data')

    if backend == 'mongo':
        if not mongo_uri:
            logger.error("STORAGE_BACKEND=mongo but MONGO_URI is not set; progress will not be saved")
            return MemoryStorage()
        try:
            return MongoStorage(mongo_uri, database, collection)
        except (PyMongoError, ValueError, TypeError) as e:
            logger.error("Could not create MongoDB storage, progress will not be saved: %s", e)
            return MemoryStorage()

    raise ValueError(f"Unknown storage backend: {backend}")
