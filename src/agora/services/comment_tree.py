"""Assemble a post's flat comment rows into a nested reply forest."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

from sqlalchemy.exc import SQLAlchemyError

from agora.core.errors import StorageFailureError
from agora.core.settings import settings
from agora.db.session import Database
from agora.models import Comment
from agora.repositories.comment_repo import CommentRepository

logger = logging.getLogger(__name__)

TreeStrategy = Literal["batched", "per_node"]


@dataclass
class CommentNode:
    """A comment together with its ordered direct replies."""

    comment: Comment
    replies: list[CommentNode] = field(default_factory=list)


def _chronological_key(comment: Comment) -> tuple:
    return (comment.created_at, comment.id)


class CommentTreeAssembler:
    """Build the comment forest of a post.

    Root comments are ordered newest first so fresh threads surface, while
    replies inside a thread stay chronological. The forest is rebuilt from
    storage on every call; nothing is cached between calls.
    """

    def __init__(self, database: Database, *, strategy: TreeStrategy | None = None) -> None:
        self.database = database
        self.strategy: TreeStrategy = strategy or settings.comment_tree_strategy

    def build_tree(self, post_id: int) -> list[CommentNode]:
        """Return the ordered forest of comments for ``post_id``.

        An unknown post simply has no comments, so it yields an empty list.
        """
        try:
            with self.database.session() as session:
                repo = CommentRepository(session)
                if self.strategy == "per_node":
                    forest = self._build_per_node(repo, post_id)
                else:
                    forest = self._build_batched(repo, post_id)
        except SQLAlchemyError as err:
            raise StorageFailureError("Storage is temporarily unavailable") from err

        logger.debug("Built %d root comment threads for post %s", len(forest), post_id)
        return forest

    def iter_tree(self, post_id: int) -> Iterator[tuple[int, Comment]]:
        """Yield ``(depth, comment)`` pairs depth-first in display order.

        Nothing is loaded until iteration starts, and each new iteration
        reads storage again.
        """
        stack = [(0, node) for node in reversed(self.build_tree(post_id))]
        while stack:
            depth, node = stack.pop()
            yield depth, node.comment
            stack.extend((depth + 1, reply) for reply in reversed(node.replies))

    @staticmethod
    def _build_batched(repo: CommentRepository, post_id: int) -> list[CommentNode]:
        comments = repo.list_for_post(post_id)
        nodes = {comment.id: CommentNode(comment) for comment in comments}
        children: dict[int | None, list[CommentNode]] = defaultdict(list)

        # list_for_post is oldest first, which is already reply order.
        for comment in comments:
            parent_id = comment.parent_id
            if parent_id is not None and parent_id not in nodes:
                logger.warning(
                    "Comment %s on post %s references missing parent %s",
                    comment.id,
                    post_id,
                    parent_id,
                )
                continue
            children[parent_id].append(nodes[comment.id])

        for comment_id, node in nodes.items():
            node.replies = children.get(comment_id, [])

        roots = children.get(None, [])
        return sorted(roots, key=lambda node: _chronological_key(node.comment), reverse=True)

    @staticmethod
    def _build_per_node(repo: CommentRepository, post_id: int) -> list[CommentNode]:
        forest = [CommentNode(comment) for comment in repo.list_roots(post_id)]
        pending = list(forest)
        # Explicit stack keeps arbitrarily deep threads off the call stack.
        while pending:
            node = pending.pop()
            node.replies = [CommentNode(reply) for reply in repo.list_replies(node.comment.id)]
            pending.extend(node.replies)
        return forest
