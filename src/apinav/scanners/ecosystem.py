from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import PurePath
from typing import Iterable, Mapping, Optional, Pattern

from apinav.domain.models import HttpMethod, Language, ProjectType


@dataclass(frozen=True)
class EcosystemSpec:
    """
    Everything the line engine needs to know about one framework's routing syntax.

    Regex templates (`route_template`, `chain_verb_template`) are %-formatted with
    `verb` (alternation of the `verbs` keys) and `receiver` (alternation of the
    currently bound router/app names). They must define a `verb` group and may
    define `path`. Plain patterns use these named groups:

      receiver_bindings   -> name
      class_patterns      -> name
      base_path_patterns  -> prefix
      group_pattern       -> prefix, optional name
      path_patterns       -> path
      tag_pattern         -> tags
      inline_handler      -> handler (searched after the route match)
      signature_pattern   -> name, optional returns; must end right after "("
      return_annotation   -> returns (searched after the signature's closing paren)
      method_override     -> method
      chain_start         -> path
    """

    project_type: ProjectType
    language: Language
    # verb token as written in source -> canonical method (None = any method)
    verbs: Mapping[str, Optional[HttpMethod]]
    route_template: str

    # fast gate: every group needs at least one needle present in the file
    signals: tuple[tuple[str, ...], ...] = ()
    verb_needles: tuple[str, ...] = ()

    path_patterns: tuple[Pattern[str], ...] = ()
    default_receivers: frozenset[str] = frozenset()
    receiver_bindings: tuple[Pattern[str], ...] = ()
    class_patterns: tuple[Pattern[str], ...] = ()
    # when set, routes only count inside a class introduced by one of these
    controller_markers: tuple[str, ...] = ()
    base_path_patterns: tuple[Pattern[str], ...] = ()

    group_pattern: Optional[Pattern[str]] = None
    block_close: str = "}"
    tag_pattern: Optional[Pattern[str]] = None

    inline_handler: Optional[Pattern[str]] = None
    signature_pattern: Optional[Pattern[str]] = None
    return_annotation: Optional[Pattern[str]] = None
    method_override: Optional[Pattern[str]] = None
    # drop the route when no handler name can be resolved
    require_handler: bool = False

    default_class_name: str = ""
    class_from_tags: bool = False

    chain_start: Optional[Pattern[str]] = None
    chain_verb_template: Optional[str] = None

    comment_prefixes: tuple[str, ...] = ("//", "/*", "*")
    language_by_suffix: Mapping[str, Language] = field(default_factory=dict)

    def language_for(self, file_path: str) -> Language:
        return self.language_by_suffix.get(PurePath(file_path).suffix.lower(), self.language)

    def route_regex(self, receivers: Iterable[str] = ()) -> Pattern[str]:
        return _compile_template(self.route_template, tuple(self.verbs), frozenset(receivers))

    def chain_regex(self) -> Optional[Pattern[str]]:
        if self.chain_verb_template is None:
            return None
        return _compile_template(self.chain_verb_template, tuple(self.verbs), frozenset())


@lru_cache(maxsize=512)
def _compile_template(template: str, verbs: tuple[str, ...], receivers: frozenset[str]) -> Pattern[str]:
    # longest first so alternation never stops at a prefix of a longer token
    verb_alt = "|".join(re.escape(v) for v in sorted(verbs, key=len, reverse=True))
    receiver_alt = "|".join(re.escape(r) for r in sorted(receivers, key=len, reverse=True))
    return re.compile(template % {"verb": verb_alt, "receiver": receiver_alt or "(?!)"})
