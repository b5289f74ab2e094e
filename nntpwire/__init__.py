from .nntp import (
    BaseNNTPClient,
    NNTPClient,
    NNTPConnectionError,
    NNTPDataError,
    NNTPDecodeError,
    NNTPError,
    NNTPFormatError,
    NNTPPermanentError,
    NNTPProtocolError,
    NNTPReplyError,
    NNTPSyncError,
    NNTPTemporaryError,
)
from .types import Article, Group, Newsgroup, Overview, Support

__all__ = [
    "Article",
    "BaseNNTPClient",
    "Group",
    "NNTPClient",
    "NNTPConnectionError",
    "NNTPDataError",
    "NNTPDecodeError",
    "NNTPError",
    "NNTPFormatError",
    "NNTPPermanentError",
    "NNTPProtocolError",
    "NNTPReplyError",
    "NNTPSyncError",
    "NNTPTemporaryError",
    "Newsgroup",
    "Overview",
    "Support",
]
