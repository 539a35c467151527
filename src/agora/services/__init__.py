"""Business logic services for the Agora forum."""

from .comment_tree import CommentNode, CommentTreeAssembler
from .karma import KarmaRecalculator
from .locks import KeyedLock
from .voting import PurgeResult, VoteResult, VotingEngine

__all__ = [
    "CommentNode",
    "CommentTreeAssembler",
    "KarmaRecalculator",
    "KeyedLock",
    "PurgeResult",
    "VoteResult",
    "VotingEngine",
]
