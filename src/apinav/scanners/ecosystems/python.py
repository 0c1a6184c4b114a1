from __future__ import annotations

import re

from apinav.scanners.ecosystem import EcosystemSpec

FASTAPI = EcosystemSpec(
    project_type="fastapi",
    language="python",
    verbs={
        "get": "GET",
        "post": "POST",
        "put": "PUT",
        "delete": "DELETE",
        "patch": "PATCH",
        "head": "HEAD",
        "options": "OPTIONS",
        "trace": "TRACE",
    },
    route_template=(
        r"\b(?P<receiver>%(receiver)s)\.(?P<verb>%(verb)s)\s*\(\s*(?:path\s*=\s*)?"
        r"(?P<q>['\"])(?P<path>.*?)(?P=q)"
    ),
    signals=(
        ("from fastapi import", "import fastapi"),
        ("FastAPI", "APIRouter", "@app.", "@router."),
    ),
    default_receivers=frozenset({"app", "router"}),
    receiver_bindings=(
        re.compile(r"^(?P<name>\w+)\s*(?::\s*[\w.]+\s*)?=\s*(?:fastapi\.)?(?:FastAPI|APIRouter)\s*\("),
    ),
    base_path_patterns=(
        re.compile(r"\bAPIRouter\s*\(.*?\bprefix\s*=\s*(?P<q>['\"])(?P<prefix>.*?)(?P=q)"),
    ),
    tag_pattern=re.compile(r"\btags\s*=\s*\[(?P<tags>[^\]]*)\]"),
    signature_pattern=re.compile(r"^(?:async\s+)?def\s+(?P<name>\w+)\s*\("),
    return_annotation=re.compile(r"^\s*->\s*(?P<returns>[^:]+)"),
    class_from_tags=True,
    comment_prefixes=("#",),
)
