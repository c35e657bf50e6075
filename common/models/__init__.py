from common.models.base import BaseModel

__all__ = ["BaseModel"]
