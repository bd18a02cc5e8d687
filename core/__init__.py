from .descriptions import DescriptionCatalog
from .limiters import RequestSizeLimiter, TimeoutLimiter

__all__ = ["DescriptionCatalog", "RequestSizeLimiter", "TimeoutLimiter"]
