# Fleet Sync: database models
# Import all models here for SQLAlchemy discovery

from app.models.cache_entry import CacheEntry         # noqa
