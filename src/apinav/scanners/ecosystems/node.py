from __future__ import annotations

import re

from apinav.scanners.ecosystem import EcosystemSpec

_QUOTED = r"(?P<q>['\"`])(?P<%s>.*?)(?P=q)"

TYPESCRIPT_SUFFIXES = {".ts": "typescript", ".tsx": "typescript", ".mts": "typescript", ".cts": "typescript"}

EXPRESS = EcosystemSpec(
    project_type="express",
    language="javascript",
    verbs={
        "get": "GET",
        "post": "POST",
        "put": "PUT",
        "delete": "DELETE",
        "patch": "PATCH",
        "head": "HEAD",
        "options": "OPTIONS",
        "all": None,
    },
    route_template=r"\b(?P<receiver>%(receiver)s)\.(?P<verb>%(verb)s)\s*\(\s*" + _QUOTED % "path",
    signals=(("express",), ("Router", "app.", "router.", "express(")),
    verb_needles=(".get(", ".post(", ".put(", ".delete(", ".patch(", ".head(", ".options(", ".all(", ".route("),
    default_receivers=frozenset({"app", "router"}),
    receiver_bindings=(
        re.compile(r"\b(?P<name>[A-Za-z_$][\w$]*)\s*(?::\s*[\w.<>]+\s*)?=\s*express\s*\(\s*\)"),
        re.compile(r"\b(?P<name>[A-Za-z_$][\w$]*)\s*(?::\s*[\w.<>]+\s*)?=\s*(?:express\s*\.\s*)?Router\s*\("),
    ),
    base_path_patterns=(re.compile(r"\.use\(\s*" + _QUOTED % "prefix" + r"\s*,"),),
    inline_handler=re.compile(
        r",\s*(?P<handler>[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)\s*\)+\s*;?\s*(?://.*)?$"
    ),
    default_class_name="default",
    chain_start=re.compile(r"\.route\(\s*" + _QUOTED % "path" + r"\s*\)"),
    chain_verb_template=r"\.(?P<verb>%(verb)s)\s*\(",
    language_by_suffix=TYPESCRIPT_SUFFIXES,
)

NEST = EcosystemSpec(
    project_type="nest",
    language="typescript",
    verbs={
        "Get": "GET",
        "Post": "POST",
        "Put": "PUT",
        "Delete": "DELETE",
        "Patch": "PATCH",
        "Head": "HEAD",
        "Options": "OPTIONS",
        "All": None,
    },
    route_template=r"@(?P<verb>%(verb)s)\s*\(\s*(?:" + _QUOTED % "path" + r")?",
    signals=(("@nestjs/common",), ("@Controller",)),
    verb_needles=("@Get(", "@Post(", "@Put(", "@Delete(", "@Patch(", "@Head(", "@Options(", "@All("),
    class_patterns=(re.compile(r"\bclass\s+(?P<name>\w+)"),),
    controller_markers=("@Controller",),
    base_path_patterns=(
        re.compile(r"@Controller\(\s*" + _QUOTED % "prefix"),
        re.compile(r"@Controller\(\s*\{[^}]*?\bpath\s*:\s*" + _QUOTED % "prefix"),
    ),
    signature_pattern=re.compile(
        r"^(?:(?:public|private|protected|static|async|override)\s+)*"
        r"(?!(?:if|for|while|switch|return|catch|function|constructor)\b)"
        r"(?P<name>[A-Za-z_$][\w$]*)\s*(?:<[^>]*>)?\s*\("
    ),
    return_annotation=re.compile(r"^\s*:\s*(?P<returns>[^{]+)"),
)
