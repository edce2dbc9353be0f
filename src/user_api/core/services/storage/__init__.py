from .object_storage import ObjectStorageService

__all__ = ["ObjectStorageService"]
