"""Tests for assembling threaded comment forests."""

import pytest

from agora.models import Comment
from agora.services.comment_tree import CommentTreeAssembler
from tests.conftest import minutes

STRATEGIES = ["batched", "per_node"]


def _ids(nodes) -> list[int]:
    return [node.comment.id for node in nodes]


@pytest.fixture(params=STRATEGIES)
def assembler(request, database) -> CommentTreeAssembler:
    return CommentTreeAssembler(database, strategy=request.param)


def test_roots_are_newest_first(assembler, make_post, make_comment) -> None:
    post = make_post()
    t1 = make_comment(post, created_at=minutes(1))
    t3 = make_comment(post, created_at=minutes(3))
    t2 = make_comment(post, created_at=minutes(2))

    assert _ids(assembler.build_tree(post.id)) == [t3.id, t2.id, t1.id]


def test_replies_are_oldest_first(assembler, make_post, make_comment) -> None:
    post = make_post()
    root = make_comment(post, created_at=minutes(1))
    later = make_comment(post, parent=root, created_at=minutes(5))
    earlier = make_comment(post, parent=root, created_at=minutes(4))

    forest = assembler.build_tree(post.id)

    assert _ids(forest) == [root.id]
    assert _ids(forest[0].replies) == [earlier.id, later.id]


def test_root_with_two_replies_in_creation_order(assembler, make_post, make_comment) -> None:
    post = make_post()
    c1 = make_comment(post, created_at=minutes(1))
    c2 = make_comment(post, parent=c1, created_at=minutes(2))
    c3 = make_comment(post, parent=c1, created_at=minutes(3))

    (node,) = assembler.build_tree(post.id)
    assert node.comment.id == c1.id
    assert _ids(node.replies) == [c2.id, c3.id]
    assert all(reply.replies == [] for reply in node.replies)


def test_nested_threads(assembler, make_post, make_comment) -> None:
    post = make_post()
    old_root = make_comment(post, created_at=minutes(1))
    new_root = make_comment(post, created_at=minutes(10))
    reply = make_comment(post, parent=old_root, created_at=minutes(2))
    nested_late = make_comment(post, parent=reply, created_at=minutes(12))
    nested_early = make_comment(post, parent=reply, created_at=minutes(3))
    deeper = make_comment(post, parent=nested_early, created_at=minutes(4))

    forest = assembler.build_tree(post.id)

    assert _ids(forest) == [new_root.id, old_root.id]
    assert forest[0].replies == []
    (reply_node,) = forest[1].replies
    assert reply_node.comment.id == reply.id
    assert _ids(reply_node.replies) == [nested_early.id, nested_late.id]
    assert _ids(reply_node.replies[0].replies) == [deeper.id]


def test_same_timestamp_falls_back_to_id(assembler, make_post, make_comment) -> None:
    post = make_post()
    first = make_comment(post, created_at=minutes(1))
    second = make_comment(post, created_at=minutes(1))
    reply_a = make_comment(post, parent=first, created_at=minutes(2))
    reply_b = make_comment(post, parent=first, created_at=minutes(2))

    forest = assembler.build_tree(post.id)

    assert _ids(forest) == [second.id, first.id]
    assert _ids(forest[1].replies) == [reply_a.id, reply_b.id]


def test_comments_of_other_posts_are_excluded(assembler, make_post, make_comment) -> None:
    post = make_post()
    other = make_post()
    mine = make_comment(post, created_at=minutes(1))
    make_comment(other, created_at=minutes(2))

    assert _ids(assembler.build_tree(post.id)) == [mine.id]


def test_unknown_post_yields_empty_forest(assembler) -> None:
    assert assembler.build_tree(987654) == []


def test_deep_thread_is_not_limited_by_recursion(
    assembler, database, make_post, make_user
) -> None:
    post = make_post()
    author = make_user()
    depth = 1500
    with database.session() as session:
        parent_id = None
        for level in range(depth):
            comment = Comment(
                post_id=post.id,
                parent_id=parent_id,
                author_id=author.id,
                content=f"level {level}",
                upvotes=0,
                downvotes=0,
            )
            comment.created_at = minutes(level)
            session.add(comment)
            session.flush()
            parent_id = comment.id
        session.commit()

    node = assembler.build_tree(post.id)[0]
    levels = 1
    while node.replies:
        (node,) = node.replies
        levels += 1
    assert levels == depth


def test_iter_tree_walks_depth_first(tree, make_post, make_comment) -> None:
    post = make_post()
    old_root = make_comment(post, created_at=minutes(1))
    new_root = make_comment(post, created_at=minutes(2))
    reply = make_comment(post, parent=old_root, created_at=minutes(3))
    nested = make_comment(post, parent=reply, created_at=minutes(4))
    second_reply = make_comment(post, parent=old_root, created_at=minutes(5))

    walk = tree.iter_tree(post.id)
    first_pass = [(depth, comment.id) for depth, comment in walk]

    assert first_pass == [
        (0, new_root.id),
        (0, old_root.id),
        (1, reply.id),
        (2, nested.id),
        (1, second_reply.id),
    ]
    # Restartable: a new walk reads storage again and sees new comments.
    newest = make_comment(post, created_at=minutes(6))
    second_pass = [comment.id for _, comment in tree.iter_tree(post.id)]
    assert second_pass[0] == newest.id
    assert second_pass[1:] == [comment_id for _, comment_id in first_pass]


def test_strategies_agree(database, make_post, make_comment) -> None:
    post = make_post()
    roots = [make_comment(post, created_at=minutes(i)) for i in range(3)]
    for i, root in enumerate(roots):
        child = make_comment(post, parent=root, created_at=minutes(10 + i))
        make_comment(post, parent=child, created_at=minutes(20 + i))
        make_comment(post, parent=root, created_at=minutes(5))

    def _shape(nodes):
        return [(node.comment.id, _shape(node.replies)) for node in nodes]

    batched = CommentTreeAssembler(database, strategy="batched").build_tree(post.id)
    per_node = CommentTreeAssembler(database, strategy="per_node").build_tree(post.id)
    assert _shape(batched) == _shape(per_node)
