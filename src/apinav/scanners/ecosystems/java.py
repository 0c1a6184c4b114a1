from __future__ import annotations

import re

from apinav.scanners.ecosystem import EcosystemSpec

SPRING_VERBS = {
    "GetMapping": "GET",
    "PostMapping": "POST",
    "PutMapping": "PUT",
    "DeleteMapping": "DELETE",
    "PatchMapping": "PATCH",
    # method-level @RequestMapping without RequestMethod.X
    "RequestMapping": "GET",
}

_JAVA_MODIFIERS = r"(?:(?:public|protected|private|static|final|synchronized|abstract|default)\s+)*"

SPRING_BOOT = EcosystemSpec(
    project_type="spring_boot",
    language="java",
    verbs=SPRING_VERBS,
    route_template=r"@(?P<verb>%(verb)s)\b",
    signals=(("@RestController", "@Controller", "@RequestMapping"),),
    verb_needles=tuple("@" + v for v in SPRING_VERBS),
    path_patterns=(
        re.compile(r"\b(?:value|path)\s*=\s*\{?\s*\"(?P<path>[^\"]*)\""),
        re.compile(r"^\s*\(\s*\{?\s*\"(?P<path>[^\"]*)\""),
    ),
    class_patterns=(re.compile(r"\bclass\s+(?P<name>\w+)"),),
    controller_markers=("@RestController", "@Controller"),
    base_path_patterns=(
        re.compile(r"@RequestMapping\s*\(.*?\b(?:value|path)\s*=\s*\{?\s*\"(?P<prefix>[^\"]*)\""),
        re.compile(r"@RequestMapping\s*\(\s*\{?\s*\"(?P<prefix>[^\"]*)\""),
    ),
    signature_pattern=re.compile(
        r"^" + _JAVA_MODIFIERS
        + r"(?!return\b|new\b|throw\b|else\b)"
        r"(?P<returns>[\w.$]+(?:<.*>)?(?:\[\])*)\s+(?P<name>\w+)\s*\("
    ),
    method_override=re.compile(r"RequestMethod\.(?P<method>[A-Z]+)"),
    require_handler=True,
)
