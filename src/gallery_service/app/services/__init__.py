from .delivery import ImageDeliveryService
from .image_store import ImageStore
from .ingestion import IngestionService
from .session_store import SessionStore

__all__ = ["ImageDeliveryService", "ImageStore", "IngestionService", "SessionStore"]
