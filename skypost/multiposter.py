from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

from .errors import PublishError
from .facets import FeedPost, ReplyRef, StrongRef
from .retry import OnRetryFn, RetryConfig, SleepFn, call_with_retries
from .run_log import RunLogger


@dataclass(frozen=True)
class PublishedRef:
    """Location of a published record."""

    uri: str
    cid: str

    def strong_ref(self) -> StrongRef:
        return StrongRef(uri=self.uri, cid=self.cid)


class PostPublisher(Protocol):
    def publish(self, post: FeedPost) -> PublishedRef: ...


@dataclass
class PublishResult:
    """
    Outcome of publishing a series of posts.

    Posts go out one at a time, so if post 4 of 10 fails, `published` holds the
    references for posts 1-3, `remaining` holds posts 4-10, and `error` the failure.
    """

    published: list[PublishedRef] = field(default_factory=list)
    remaining: list[FeedPost] = field(default_factory=list)
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def is_retryable_publish_exception(exc: BaseException) -> bool:
    """Network errors, HTTP 429 and HTTP 5xx are worth another attempt."""
    if isinstance(exc, PublishError):
        code = getattr(exc, "status_code", None)
        return isinstance(code, int) and (code == 429 or code >= 500)
    return isinstance(exc, (ConnectionError, TimeoutError))


class Multiposter:
    """
    Publishes several posts in order, either as independent posts or as a thread.

    In thread mode the first post is the root and every later post replies to the
    one before it.
    """

    def __init__(
        self,
        publisher: PostPublisher,
        *,
        threaded: bool = False,
        retry: RetryConfig | None = None,
        on_retry: OnRetryFn | None = None,
        sleep_fn: SleepFn | None = None,
        logger: RunLogger | None = None,
    ) -> None:
        self._publisher = publisher
        self._threaded = threaded
        self._retry = retry or RetryConfig()
        self._on_retry = on_retry
        self._sleep_fn = sleep_fn
        self._logger = logger

    def publish(self, posts: Sequence[FeedPost]) -> PublishResult:
        return self._publish(list(posts), [])

    def resume(self, previous: PublishResult) -> PublishResult:
        """Publish the posts a previous call left behind, continuing its thread."""
        return self._publish(list(previous.remaining), list(previous.published))

    def _publish(self, posts: list[FeedPost], published: list[PublishedRef]) -> PublishResult:
        root = published[0] if published else None
        parent = published[-1] if published else None
        result = PublishResult(published=published)

        for i, post in enumerate(posts):
            if self._threaded and root is not None and parent is not None:
                post = _with_reply(post, root=root, parent=parent)

            try:
                ref = self._publish_one(post)
            except Exception as exc:
                result.remaining = posts[i:]
                result.error = exc
                if self._logger is not None:
                    self._logger.exception(
                        "publish_failed",
                        exc=exc,
                        published=len(result.published),
                        remaining=len(result.remaining),
                    )
                return result

            if root is None:
                root = ref
            parent = ref
            result.published.append(ref)
            if self._logger is not None:
                self._logger.info("post_published", uri=ref.uri, cid=ref.cid)

        return result

    def _publish_one(self, post: FeedPost) -> PublishedRef:
        return call_with_retries(
            lambda: self._publisher.publish(post),
            cfg=self._retry,
            is_retryable=is_retryable_publish_exception,
            operation="publish_post",
            on_retry=self._on_retry,
            sleep_fn=self._sleep_fn,
        )


def _with_reply(post: FeedPost, *, root: PublishedRef, parent: PublishedRef) -> FeedPost:
    reply = ReplyRef(root=root.strong_ref(), parent=parent.strong_ref())
    return post.model_copy(update={"reply": reply})
