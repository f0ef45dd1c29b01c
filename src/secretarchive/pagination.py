from __future__ import annotations

from typing import Any, Callable, Generic, Iterator, TypeVar

T = TypeVar("T")


class PagedListing(Generic[T]):
    """Lazy, finite view over a boto3 paginated operation.

    Nothing is requested until iteration starts, and every new iteration
    restarts from the first page. Iteration ends once a page arrives without
    a continuation token.
    """

    def __init__(
        self,
        client: Any,
        operation: str,
        result_key: str,
        extract: Callable[[dict[str, Any]], T],
        **params: Any,
    ) -> None:
        self._client = client
        self._operation = operation
        self._result_key = result_key
        self._extract = extract
        self._params = params

    def __iter__(self) -> Iterator[T]:
        paginator = self._client.get_paginator(self._operation)
        for page in paginator.paginate(**self._params):
            for item in page.get(self._result_key, []):
                yield self._extract(item)

    def __repr__(self) -> str:
        return f"PagedListing({self._operation!r}, {self._params!r})"
