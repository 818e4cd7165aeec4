"""Mail repository key index.

This package stores which mail keys belong to which mail repository. It does
not hold mail content; callers pair it with a separate blob store.
"""

from .keys_dao import MailRepositoryKeysDAO

__all__ = ["MailRepositoryKeysDAO"]
