"""Scope resolution: call sites -> fully-qualified key occurrences.

Two strategies share the indexed data:
- ConventionResolver applies Rails controller conventions (relative keys,
  callback filters, call-graph propagation, ActiveRecord helpers).
- PlainResolver resolves absolute keys only.
"""
from pathlib import PurePosixPath
from typing import Dict, List, Optional

from i18n_scanner.config import ScanConfig, ScanMode
from i18n_scanner.utils.logger import get_logger
from .call_graph import ClassCallGraph
from .extractor import default_argument
from .indexer import FileIndex
from .models import (
    ATTRIBUTE_HELPER,
    NAMESPACED_FORM,
    ClassContext,
    IntegerLiteral,
    Literal,
    LiteralList,
    NonLiteral,
    Occurrence,
    OptionValue,
    RecordHelperCall,
    TranslationCallSite,
)

log = get_logger(__name__)

SEPARATOR = '.'


def absolute_key(key: str, options: Dict[str, OptionValue]) -> Optional[str]:
    """Join a literal `scope:` option in front of an absolute key.

    Returns:
        The fully-qualified key, or None when the scope is not static
    """
    scope = options.get('scope')
    if scope is None:
        parts = [key]
    elif isinstance(scope, Literal):
        parts = [scope.value, key]
    elif isinstance(scope, LiteralList):
        parts = [*scope.values, key]
    else:
        return None
    return SEPARATOR.join(part for part in parts if part).lstrip(SEPARATOR)


class ScopeResolver:
    """Shared rules for both scanning modes."""

    def __init__(self, config: ScanConfig, path: str):
        self.config = config
        self.path = path

    def resolve(self, index: FileIndex) -> List[Occurrence]:
        self.prepare(index)
        occurrences: List[Occurrence] = []
        for site in index.call_sites:
            if isinstance(site, TranslationCallSite):
                occurrences.extend(self.resolve_translation(site))
            else:
                occurrences.extend(self.resolve_record_helper(site))
        return occurrences

    def prepare(self, index: FileIndex):
        """Hook run before any call site is resolved."""

    def resolve_translation(self, site: TranslationCallSite) -> List[Occurrence]:
        key = site.key
        if not key:
            return self._drop(site, 'non-literal key')
        if site.interpolated and self.config.strict:
            return self._drop(site, 'interpolated key')
        if isinstance(site.options.get('scope'), NonLiteral):
            return self._drop(site, 'non-literal scope')

        if key.startswith(SEPARATOR):
            if site.form == NAMESPACED_FORM:
                # I18n.t has no notion of a current scope
                key = key.lstrip(SEPARATOR)
            elif not key.strip(SEPARATOR):
                return self._drop(site, 'empty relative key')
            else:
                return self.resolve_relative(site, key[1:])

        resolved = absolute_key(key, site.options)
        if not resolved:
            return self._drop(site, 'non-literal scope')
        return [self._occurrence(site, resolved)]

    def resolve_relative(self, site: TranslationCallSite, key: str) -> List[Occurrence]:
        return self._drop(site, 'relative key without scope')

    def resolve_record_helper(self, call: RecordHelperCall) -> List[Occurrence]:
        return []

    def _occurrence(self, site: TranslationCallSite, resolved: str) -> Occurrence:
        return Occurrence(
            resolved_key=resolved,
            raw_key=site.raw_key,
            path=self.path,
            line_num=site.line_num,
            line_text=site.line_text,
            line_pos=site.line_pos,
            default_arg=default_argument(site.options),
        )

    def _drop(self, site, reason: str) -> List[Occurrence]:
        log.debug("call_site.dropped", path=self.path, line=site.line_num, reason=reason)
        return []


class PlainResolver(ScopeResolver):
    """Absolute keys only; no scope roots, callbacks or record helpers."""


class ConventionResolver(ScopeResolver):
    """Rails controller and model conventions."""

    def __init__(self, config: ScanConfig, path: str):
        super().__init__(config, path)
        self.graphs: Dict[int, ClassCallGraph] = {}
        self.in_relative_root = _under_roots(path, config.relative_roots)

    def prepare(self, index: FileIndex):
        self.graphs = {}
        for context in index.contexts:
            if self.applies_to(context):
                graph = ClassCallGraph(context, self.path)
                graph.check_acyclic()
                self.graphs[id(context)] = graph

    def applies_to(self, context: ClassContext) -> bool:
        """Controller conventions apply to `*Controller` classes under a relative root."""
        suffix = self.config.controller_suffix
        return (self.in_relative_root and context.kind == 'class' and bool(context.constant_path)
                and context.constant_path[-1].endswith(suffix))

    def resolve_relative(self, site: TranslationCallSite, key: str) -> List[Occurrence]:
        graph = self.graphs.get(id(site.context))
        if graph is None:
            return self._drop(site, 'relative key outside a controller')

        if site.method is not None:
            actions = graph.scope_roots(site.method.name)
        elif site.callback is not None:
            actions = graph.callback_actions(site.callback)
        else:
            actions = []
        if not actions:
            return self._drop(site, 'no public action reaches relative key')

        prefix = list(site.context.segments)
        return [self._occurrence(site, SEPARATOR.join([*prefix, action, key])) for action in actions]

    def resolve_record_helper(self, call: RecordHelperCall) -> List[Occurrence]:
        if call.kind == ATTRIBUTE_HELPER:
            if not isinstance(call.argument, Literal) or not call.argument.value:
                log.debug("record_helper.dropped", path=self.path, line=call.line_num)
                return []
            key = f"activerecord.attributes.{call.model}.{call.argument.value}"
        else:
            key = f"activerecord.models.{call.model}.{_plural_form(call.argument)}"
        return [Occurrence(
            resolved_key=key,
            raw_key=key,
            path=self.path,
            line_num=call.line_num,
            line_text=call.line_text,
            line_pos=call.line_pos,
        )]


def _plural_form(count: Optional[OptionValue]) -> str:
    """Two-bucket pluralization: absent or literal 1 -> one, anything else -> other."""
    if count is None:
        return 'one'
    if isinstance(count, IntegerLiteral) and count.value == 1:
        return 'one'
    return 'other'


def _under_roots(path: str, roots) -> bool:
    """True if `path` lies inside one of `roots` (always true with no roots)."""
    if not roots:
        return True
    parts = _normalized_parts(path)[:-1]
    for root in roots:
        root_parts = _normalized_parts(root)
        if not root_parts:
            return True
        width = len(root_parts)
        for start in range(len(parts) - width + 1):
            if parts[start:start + width] == root_parts:
                return True
    return False


def _normalized_parts(path: str) -> tuple:
    parts = PurePosixPath(str(path).replace('\\', '/')).parts
    return tuple(part for part in parts if part not in ('.', '/'))


STRATEGIES = {
    ScanMode.CONVENTION: ConventionResolver,
    ScanMode.PLAIN: PlainResolver,
}


def resolver_for(config: ScanConfig, path: str) -> ScopeResolver:
    """Pick the resolution strategy for a scan, once."""
    return STRATEGIES[config.mode](config, path)
