from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence

from .content import Post


def lop(posts: Sequence, start: int, end: int):
    """Slice ``posts[start:end]``, returning everything when ``end`` is past the end.

    Templates use this to cap listings without checking the length first.
    """
    if len(posts) < end:
        return posts
    return posts[start:end]


class Posts(Sequence[Post]):
    """Ordered collection of posts for templates and the build."""

    def __init__(self, posts: Iterable[Post]):
        self._posts = list(posts)

    def __iter__(self) -> Iterator[Post]:
        return iter(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return Posts(self._posts[item])
        return self._posts[item]

    def __eq__(self, other) -> bool:
        if isinstance(other, Posts):
            return self._posts == other._posts
        if isinstance(other, list):
            return self._posts == other
        return NotImplemented

    def sorted(self) -> Posts:
        """Return the posts newest first.

        The sort is stable: posts with equal dates keep their current order.
        """
        return Posts(sorted(self._posts, key=lambda p: p.date, reverse=True))

    def latest(self, count: int = 5) -> Posts:
        return self.sorted()[:count]

    def lop(self, start: int, end: int) -> Posts:
        return lop(self, start, end)

    def archive(self, skip: int = 5) -> Posts:
        """Return the posts left after the ``skip`` most recent.

        A collection shorter than ``skip`` is returned whole so the archive is
        never empty while posts exist.
        """
        if len(self._posts) < skip:
            return Posts(self._posts)
        return Posts(self._posts[skip:])

    def with_tag(self, name: str) -> Posts:
        return Posts(p for p in self._posts if name in p.tag_names())

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"Posts({len(self._posts)} posts)"


class TagIndex(Mapping[str, Posts]):
    """Mapping of tag name to the posts carrying it, in collection order."""

    def __init__(self, posts: Iterable[Post]):
        mapping: dict[str, list[Post]] = {}
        for post in posts:
            for name in post.tag_names():
                mapping.setdefault(name, []).append(post)
        self._mapping = {k: Posts(v) for k, v in mapping.items()}

    def __getitem__(self, key: str) -> Posts:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagIndex({len(self._mapping)} tags)"
