"""Schemas module initialization."""

from appgram.schemas.comment import Comment, CommentCreate
from appgram.schemas.pagination import Paginated
from appgram.schemas.result import ApiError, ApiResult, Err, Ok, err, ok
from appgram.schemas.upload import UploadFile
from appgram.schemas.vote import VoteCheck, VoteCreate, VoteCreated
from appgram.schemas.wish import Wish, WishCreate, WishFilters, WishStatus

__all__ = [
    "ApiError",
    "ApiResult",
    "Ok",
    "Err",
    "ok",
    "err",
    "Paginated",
    "Wish",
    "WishCreate",
    "WishFilters",
    "WishStatus",
    "VoteCheck",
    "VoteCreate",
    "VoteCreated",
    "Comment",
    "CommentCreate",
    "UploadFile",
]
