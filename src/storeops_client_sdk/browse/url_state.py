from __future__ import annotations

import logging
from typing import Callable, Protocol
from urllib.parse import parse_qs, parse_qsl, urlencode

logger = logging.getLogger(__name__)

PAGE_PARAM = "page"

AddressListener = Callable[[str], None]
PageListener = Callable[[int], None]
Unsubscribe = Callable[[], None]


class Navigator(Protocol):
    """Routing primitives the list views need from the host application."""

    def current_query_string(self) -> str: ...

    def replace_query_string(self, query_string: str, *, preserve_scroll_position: bool = False) -> None: ...

    def subscribe(self, listener: AddressListener) -> Unsubscribe: ...


class InMemoryNavigator:
    """Navigator for headless hosts and tests.

    ``replace_query_string`` is what the bridge calls; ``navigate`` stands in
    for back/forward or a user-edited address. Both notify subscribers only
    when the address actually changes.
    """

    def __init__(self, query_string: str = "") -> None:
        self._query_string = query_string.lstrip("?")
        self._listeners: list[AddressListener] = []
        self.history: list[tuple[str, bool]] = []

    def current_query_string(self) -> str:
        return self._query_string

    def replace_query_string(self, query_string: str, *, preserve_scroll_position: bool = False) -> None:
        self._change(query_string, preserve_scroll_position)

    def navigate(self, query_string: str) -> None:
        self._change(query_string, False)

    def subscribe(self, listener: AddressListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _change(self, query_string: str, preserve_scroll_position: bool) -> None:
        normalized = query_string.lstrip("?")
        if normalized == self._query_string:
            return
        self._query_string = normalized
        self.history.append((normalized, preserve_scroll_position))
        for listener in list(self._listeners):
            listener(normalized)


def parse_page(query_string: str, param: str = PAGE_PARAM) -> int:
    values = parse_qs(query_string.lstrip("?")).get(param)
    if not values:
        return 1
    try:
        page = int(values[0].strip())
    except ValueError:
        return 1
    return page if page >= 1 else 1


def with_page(query_string: str, page: int, param: str = PAGE_PARAM) -> str:
    pairs = [(key, value) for key, value in parse_qsl(query_string.lstrip("?"), keep_blank_values=True) if key != param]
    # page 1 is the absence of the parameter
    if page != 1:
        pairs.append((param, str(page)))
    return urlencode(pairs)


class UrlStateBridge:
    """The address bar as the only source of the current page number.

    ``write_page`` only rewrites the address; the new page reaches the caller
    through the listener registered with :meth:`subscribe`, never as a return
    value, so there is exactly one path by which the current page changes.
    """

    def __init__(self, navigator: Navigator, *, param: str = PAGE_PARAM) -> None:
        self.navigator = navigator
        self.param = param

    def read_page(self) -> int:
        return parse_page(self.navigator.current_query_string(), self.param)

    def write_page(self, page: int) -> bool:
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ValueError(f"page must be an integer >= 1, got {page!r}")
        current = self.navigator.current_query_string()
        updated = with_page(current, page, self.param)
        if updated == current.lstrip("?"):
            return False
        logger.debug("address page -> %d", page)
        self.navigator.replace_query_string(updated, preserve_scroll_position=True)
        return True

    def subscribe(self, listener: PageListener) -> Unsubscribe:
        param = self.param

        def on_address_changed(query_string: str) -> None:
            listener(parse_page(query_string, param))

        return self.navigator.subscribe(on_address_changed)
