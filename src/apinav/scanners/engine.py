"""Single-pass line scanner shared by every ecosystem.

One LineScanner instance is bound to one EcosystemSpec. parse_file walks the
file once, top to bottom, carrying a small ScanState. For each line:

  1. state updates: controller markers, base-path declarations, class
     declarations, router/app variable bindings, group calls. A line that
     updates state never emits a route.
  2. route match: the ecosystem's verb regex, keyed to the bound receivers.
     path    = combine_paths(active base, path literal)
     handler = inline reference on the same line, else the first signature
               within `lookahead_lines` lines below
     class   = Type of a Type.method handler reference, else state
  3. flat group boundary: the first line after a group call that contains the
     block-close token ends the group (after that line's own route, if any).

Chained routes (`.route("/x").get(...)`) are handled between 1 and 2 for specs
that define `chain_start`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from apinav.domain.models import HTTP_METHODS, ApiEndpoint, HttpMethod, ScannerConfig
from apinav.domain.paths import combine_paths
from apinav.scanners.base import BaseScanner, TextReader
from apinav.scanners.ecosystem import EcosystemSpec

logger = logging.getLogger(__name__)

DEFAULT_LOOKAHEAD_LINES = 8
UNKNOWN_HANDLER = "unknown"

# handler passed straight into a chained verb: .get(listBooks)
_CHAIN_HANDLER = re.compile(r"^\s*(?P<handler>[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)\s*[,)]")
_SELF_REFERENCES = {"this", "self"}

_OPENERS = "([{<"
_CLOSERS = ")]}>"


@dataclass
class ScanState:
    class_name: str = ""
    in_class: bool = False
    controller_seen: bool = False
    base_path: str = ""
    receivers: set[str] = field(default_factory=set)
    group_active: bool = False
    group_prefix: str = ""
    tags: list[str] = field(default_factory=list)
    chain_path: Optional[str] = None

    def active_base(self) -> str:
        if self.group_active:
            return combine_paths(self.base_path, self.group_prefix)
        return self.base_path


@dataclass(frozen=True)
class Signature:
    name: str
    parameters: tuple[str, ...] = ()
    return_type: str = ""


class LineScanner(BaseScanner):
    def __init__(
        self,
        spec: EcosystemSpec,
        config: ScannerConfig,
        lookahead_lines: int = DEFAULT_LOOKAHEAD_LINES,
        max_workers: int = 8,
    ):
        super().__init__(config, max_workers=max_workers)
        self.spec = spec
        self.lookahead_lines = lookahead_lines

    @property
    def project_type(self):
        return self.spec.project_type

    def __repr__(self) -> str:
        return f"LineScanner({self.spec.project_type!r})"

    def scan(self, root: Path, read_text: Optional[TextReader] = None) -> list[ApiEndpoint]:
        files = self.list_candidate_files(root)
        endpoints = self.scan_files(files, read_text)
        logger.info(
            "%s: %d endpoints in %d candidate files under %s",
            self.spec.project_type,
            len(endpoints),
            len(files),
            root,
        )
        return endpoints

    def is_valid_file(self, content: str) -> bool:
        groups = self.spec.signals
        if self.spec.verb_needles:
            groups = groups + (self.spec.verb_needles,)
        return all(any(needle in content for needle in group) for group in groups)

    def parse_file(self, content: str, file_path: str) -> list[ApiEndpoint]:
        # the gate is part of the parse, so a rejected file can never yield routes
        if not self.is_valid_file(content):
            return []

        spec = self.spec
        lines = content.splitlines()
        language = spec.language_for(file_path)
        state = ScanState(receivers=set(spec.default_receivers))
        chain_regex = spec.chain_regex()
        out: list[ApiEndpoint] = []

        for index, raw in enumerate(lines):
            line = raw.strip()
            if not line or line.startswith(spec.comment_prefixes):
                continue

            self._update_tags(line, state)
            consumed, opened_group = self._update_state(line, state)

            if not consumed:
                handled = False
                if chain_regex is not None:
                    handled = self._scan_chain(line, index, state, chain_regex, file_path, language, out)
                if not handled:
                    endpoint = self._match_route(line, lines, index, state, file_path, language)
                    if endpoint is not None:
                        out.append(endpoint)

            if state.group_active and not opened_group and spec.block_close in line:
                state.group_active = False
                state.group_prefix = ""

        return out

    # ----------------------------
    # State updates
    # ----------------------------

    def _update_tags(self, line: str, state: ScanState) -> None:
        if self.spec.tag_pattern is None:
            return
        m = self.spec.tag_pattern.search(line)
        if m:
            state.tags = [
                t.strip().strip("'\"") for t in m.group("tags").split(",") if t.strip().strip("'\"")
            ]

    def _update_state(self, line: str, state: ScanState) -> tuple[bool, bool]:
        """Apply every state pattern that matches. Returns (consumed, opened_group)."""
        spec = self.spec
        consumed = False

        if spec.controller_markers and any(marker in line for marker in spec.controller_markers):
            if state.in_class:
                # header of a second class in the same file
                state.base_path = ""
            state.controller_seen = True
            state.in_class = False
            consumed = True

        # with controller markers, a prefix only counts in a class header
        if not (spec.controller_markers and state.in_class):
            for pattern in spec.base_path_patterns:
                m = pattern.search(line)
                if m:
                    state.base_path = m.group("prefix") or ""
                    consumed = True
                    break

        for pattern in spec.class_patterns:
            m = pattern.search(line)
            if m:
                state.class_name = m.group("name")
                state.in_class = True
                consumed = True
                break

        for pattern in spec.receiver_bindings:
            for m in pattern.finditer(line):
                state.receivers.add(m.group("name"))
                consumed = True

        opened_group = False
        if spec.group_pattern is not None:
            m = spec.group_pattern.search(line)
            if m:
                state.group_active = True
                state.group_prefix = m.group("prefix") or ""
                if m.group("name"):
                    state.receivers.add(m.group("name"))
                consumed = opened_group = True

        return consumed, opened_group

    # ----------------------------
    # Routes
    # ----------------------------

    def _match_route(
        self,
        line: str,
        lines: list[str],
        index: int,
        state: ScanState,
        file_path: str,
        language,
    ) -> Optional[ApiEndpoint]:
        spec = self.spec
        if spec.controller_markers and not (state.controller_seen and state.in_class):
            return None

        m = spec.route_regex(state.receivers).search(line)
        if m is None:
            return None

        path = m.groupdict().get("path")
        if path is None:
            tail = line[m.end("verb"):]
            for pattern in spec.path_patterns:
                pm = pattern.search(tail)
                if pm:
                    path = pm.group("path")
                    break

        handler, qualifier = self._inline_handler(line[m.end():])
        signature = Signature(name=handler) if handler else self._lookahead(lines, index)
        if signature is None:
            if spec.require_handler:
                return None
            signature = Signature(name=UNKNOWN_HANDLER)

        return ApiEndpoint(
            api_path=combine_paths(state.active_base(), path or ""),
            class_name=qualifier if qualifier else self._class_name(state),
            method_name=signature.name,
            file_path=file_path,
            line_number=index + 1,
            language=language,
            http_method=self._http_method(m.group("verb"), line),
            parameters=signature.parameters,
            return_type=signature.return_type,
        )

    def _scan_chain(
        self,
        line: str,
        index: int,
        state: ScanState,
        chain_regex: re.Pattern,
        file_path: str,
        language,
        out: list[ApiEndpoint],
    ) -> bool:
        """Handle `.route(path)` chains. Returns True when the line belonged to one."""
        start = self.spec.chain_start.search(line) if self.spec.chain_start else None
        if start is not None:
            state.chain_path = start.group("path")
            text = line[start.end():]
        elif state.chain_path is not None and line.startswith("."):
            text = line
        else:
            state.chain_path = None
            return False

        base = combine_paths(state.active_base(), state.chain_path)
        for vm in chain_regex.finditer(text):
            hm = _CHAIN_HANDLER.search(text[vm.end():])
            name, qualifier = _split_reference(hm.group("handler")) if hm else (UNKNOWN_HANDLER, None)
            out.append(
                ApiEndpoint(
                    api_path=base,
                    class_name=qualifier if qualifier else self._class_name(state),
                    method_name=name,
                    file_path=file_path,
                    line_number=index + 1,
                    language=language,
                    http_method=self._http_method(vm.group("verb"), line),
                )
            )
        return True

    def _http_method(self, verb: str, line: str) -> Optional[HttpMethod]:
        if self.spec.method_override is not None:
            m = self.spec.method_override.search(line)
            if m and m.group("method").upper() in HTTP_METHODS:
                return m.group("method").upper()
        return self.spec.verbs.get(verb)

    def _class_name(self, state: ScanState) -> str:
        if self.spec.class_from_tags:
            return ", ".join(state.tags)
        return state.class_name or self.spec.default_class_name

    def _inline_handler(self, tail: str) -> tuple[Optional[str], Optional[str]]:
        if self.spec.inline_handler is None:
            return None, None
        m = self.spec.inline_handler.search(tail)
        if m is None:
            return None, None
        return _split_reference(m.group("handler"))

    def _lookahead(self, lines: list[str], index: int) -> Optional[Signature]:
        """Look for a handler signature in at most `lookahead_lines` following lines."""
        pattern = self.spec.signature_pattern
        if pattern is None:
            return None

        end = min(len(lines), index + 1 + self.lookahead_lines)
        for j in range(index + 1, end):
            text = lines[j].strip()
            if not text or text.startswith(self.spec.comment_prefixes):
                continue
            m = pattern.search(text)
            if m is None:
                continue

            args, rest = _argument_list(text[m.end():])
            return_type = m.groupdict().get("returns") or ""
            if not return_type and rest is not None and self.spec.return_annotation is not None:
                rm = self.spec.return_annotation.search(rest)
                if rm:
                    return_type = rm.group("returns")
            params = tuple(_split_top_level(args)) if rest is not None else ()
            return Signature(name=m.group("name"), parameters=params, return_type=return_type.strip())
        return None


def _split_reference(ref: str) -> tuple[str, Optional[str]]:
    """`ctrl.list` -> ("list", "ctrl"); `list` -> ("list", None)."""
    parts = ref.split(".")
    if len(parts) == 1:
        return ref, None
    qualifier = parts[-2]
    return parts[-1], (None if qualifier in _SELF_REFERENCES else qualifier)


def _argument_list(text: str) -> tuple[str, Optional[str]]:
    """
    Split text that starts just after an opening paren into (inside, rest).
    rest is None when the paren is not closed on this line.
    """
    depth = 1
    for i, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return text[:i], text[i + 1 :]
    return text, None


def _split_top_level(args: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in args:
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS and depth > 0:
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    parts.append("".join(current).strip())
    return [p for p in parts if p]
