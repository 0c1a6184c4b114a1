from __future__ import annotations

import re

from apinav.scanners.ecosystem import EcosystemSpec

_GO_ROUTE = r"\b(?P<receiver>%(receiver)s)\.(?P<verb>%(verb)s)\(\s*(?P<q>[\"'`])(?P<path>.*?)(?P=q)"

# gin: middleware precedes the handler, so take the last argument of the call.
# Accepts handler, pkg.Handler or h.Method.
_GIN_HANDLER = re.compile(
    r",\s*(?P<handler>[A-Za-z_][\w]*(?:\.[A-Za-z_][\w]*)*)\s*\)+\s*;?\s*(?://.*)?$"
)

# echo: GET(path, h, m ...MiddlewareFunc), so the handler is the first argument after the path
_ECHO_HANDLER = re.compile(r"^\s*,\s*(?P<handler>[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)\s*[,)]")

_GO_GROUP = re.compile(
    r"(?:(?P<name>\w+)\s*:?=\s*)?[\w.]+\.Group\(\s*(?P<q>[\"`])(?P<prefix>.*?)(?P=q)"
)

_GO_STRUCT = re.compile(r"^type\s+(?P<name>\w+)\s+struct\b")

GIN = EcosystemSpec(
    project_type="gin",
    language="go",
    verbs={
        "GET": "GET",
        "POST": "POST",
        "PUT": "PUT",
        "DELETE": "DELETE",
        "PATCH": "PATCH",
        "HEAD": "HEAD",
        "OPTIONS": "OPTIONS",
        "Any": None,
    },
    route_template=_GO_ROUTE,
    signals=(
        ("github.com/gin-gonic/gin",),
        ("gin.Engine", "gin.RouterGroup", "gin.Context", "gin.Default", "gin.New"),
    ),
    verb_needles=(".GET(", ".POST(", ".PUT(", ".DELETE(", ".PATCH(", ".HEAD(", ".OPTIONS(", ".Any("),
    default_receivers=frozenset({"router", "r", "engine", "group", "api", "v1", "v2"}),
    receiver_bindings=(
        re.compile(r"(?P<name>\w+)\s*:?=\s*gin\.(?:Default|New)\("),
        re.compile(r"(?P<name>\w+)\s+\*gin\.(?:Engine|RouterGroup)\b"),
    ),
    class_patterns=(_GO_STRUCT,),
    group_pattern=_GO_GROUP,
    inline_handler=_GIN_HANDLER,
    default_class_name="main",
)

ECHO = EcosystemSpec(
    project_type="echo",
    language="go",
    verbs={
        "GET": "GET",
        "POST": "POST",
        "PUT": "PUT",
        "DELETE": "DELETE",
        "PATCH": "PATCH",
        "HEAD": "HEAD",
        "OPTIONS": "OPTIONS",
        "TRACE": "TRACE",
        "CONNECT": None,
        "Any": None,
    },
    route_template=_GO_ROUTE,
    signals=(
        ("github.com/labstack/echo",),
        ("echo.New", "echo.Echo", "echo.Group", "echo.Context"),
    ),
    verb_needles=(
        ".GET(", ".POST(", ".PUT(", ".DELETE(", ".PATCH(",
        ".HEAD(", ".OPTIONS(", ".TRACE(", ".CONNECT(", ".Any(",
    ),
    default_receivers=frozenset({"e", "router", "g", "group", "api", "v1", "v2"}),
    receiver_bindings=(
        re.compile(r"(?P<name>\w+)\s*:?=\s*echo\.New\("),
        re.compile(r"(?P<name>\w+)\s+\*echo\.(?:Echo|Group)\b"),
    ),
    class_patterns=(_GO_STRUCT,),
    group_pattern=_GO_GROUP,
    inline_handler=_ECHO_HANDLER,
    default_class_name="main",
)
