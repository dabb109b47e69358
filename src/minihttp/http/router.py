"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, target) to a handler with an ordered list of rules. The first
matching rule wins; there is no "longest match" logic.

=============================================================================
RULE KINDS
=============================================================================

    EXACT    "/user-agent" matches only "/user-agent"
    PREFIX   "/echo/" matches "/echo/", "/echo/abc", "/echo/a/b?c"
             The remainder after the prefix is handed to the handler
             untouched (no URL decoding, no normalization).

=============================================================================
WHEN NOTHING MATCHES
=============================================================================

    GET      → RouteNotFound      (404)
    other    → UnsupportedMethod  (405)

So "POST /echo/x" and "PATCH /" are both 405, while "GET /nope" is 404.

=============================================================================
BODY-BEARING ROUTES
=============================================================================

A route registered with reads_body=True tells the server to read
Content-Length bytes off the connection before calling the handler. All
other routes never touch the request body.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Set

from .request import HTTPRequest
from .response import HTTPResponse
from .errors import RouteNotFound, UnsupportedMethod

Handler = Callable[[HTTPRequest, str], HTTPResponse]


class MatchKind(Enum):
    EXACT = "exact"
    PREFIX = "prefix"


@dataclass
class Route:
    """
    A registered route.

        Route(method="GET", pattern="/echo/", handler=echo,
              kind=MatchKind.PREFIX)
    """

    method: str
    pattern: str
    handler: Handler
    kind: MatchKind = MatchKind.EXACT
    reads_body: bool = False
    name: Optional[str] = None

    def matches(self, method: str, target: str) -> bool:
        if method != self.method:
            return False
        if self.kind is MatchKind.PREFIX:
            return target.startswith(self.pattern)
        return target == self.pattern

    def remainder(self, target: str) -> str:
        """The part of target after a PREFIX pattern ("" for EXACT routes)."""
        if self.kind is MatchKind.PREFIX:
            return target[len(self.pattern):]
        return ""


@dataclass
class RouteMatch:
    """
    Result of a successful match.

        Pattern: /files/   Target: /files/notes.txt
        Result:  RouteMatch(route=<Route>, remainder="notes.txt")
    """

    route: Route
    remainder: str

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        return self.route.handler(request, self.remainder)


class Router:
    """
    Ordered, first-match-wins router.

        router = Router()

        @router.get("/")
        def root(request, _):
            return ok("OK")

        @router.post("/files/", prefix=True, reads_body=True)
        def upload(request, name):
            ...

        match = router.match("POST", "/files/a.txt")
        match.remainder  # "a.txt"
    """

    # Methods for which an unmatched target is "not found" rather than
    # "method not allowed".
    LOOKUP_METHODS: Set[str] = {"GET"}

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    def add_route(
        self,
        method: str,
        pattern: str,
        handler: Handler,
        prefix: bool = False,
        reads_body: bool = False,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route. Routes are tried in registration order.

        Args:
            method: HTTP method, matched case-sensitively.
            pattern: Exact target, or target prefix when prefix=True.
            handler: Callable taking (request, remainder).
            prefix: Match by prefix instead of equality.
            reads_body: Read Content-Length body bytes before dispatch.
            name: Optional name for logs.
        """
        route = Route(
            method=method,
            pattern=pattern,
            handler=handler,
            kind=MatchKind.PREFIX if prefix else MatchKind.EXACT,
            reads_body=reads_body,
            name=name or getattr(handler, "__name__", None),
        )
        self._routes.append(route)
        return route

    def route(self, method: str, pattern: str, **kwargs):
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(method, pattern, handler, **kwargs)
            return handler
        return decorator

    def get(self, pattern: str, **kwargs):
        return self.route("GET", pattern, **kwargs)

    def post(self, pattern: str, **kwargs):
        return self.route("POST", pattern, **kwargs)

    def match(self, method: str, target: str) -> RouteMatch:
        """
        Find the first route matching method and target.

        Raises:
            RouteNotFound: No route matched and method is a lookup (GET).
            UnsupportedMethod: No route matched for any other method.
        """
        for route in self._routes:
            if route.matches(method, target):
                return RouteMatch(route=route, remainder=route.remainder(target))

        if method in self.LOOKUP_METHODS:
            raise RouteNotFound(f"No route for {method} {target}")
        raise UnsupportedMethod(f"Method not allowed: {method} {target}")
