"""Class/method indexer for Ruby syntax trees.

Walks the tree once, in document order, tracking the namespace stack:
- one ClassContext per class/module body (plus the file root)
- method definitions with the visibility in force where they are declared
- callback registrations (`before_action :foo, only: ...`)
- translation and record-helper call sites, with their enclosing method
- bare calls, which later become same-class call-graph edges
"""
from dataclasses import dataclass, field
from typing import List, Optional, Union

from tree_sitter import Node, Tree

from i18n_scanner.config import ScanConfig
from i18n_scanner.utils.inflector import strip_suffix, underscore
from .extractor import CallExtractor, constant_path, split_arguments
from .literals import node_line, node_text, string_value
from .models import (
    PUBLIC,
    VISIBILITIES,
    BareCall,
    CallbackRegistration,
    ClassContext,
    MethodDefinition,
    RecordHelperCall,
    SourceUnit,
    TranslationCallSite,
)

CallSite = Union[TranslationCallSite, RecordHelperCall]

# Subtrees whose identifiers are declarations, not calls
PARAMETER_TYPES = {'method_parameters', 'parameters', 'block_parameters', 'lambda_parameters',
                   'exception_variable'}
ASSIGNMENT_TYPES = {'assignment', 'operator_assignment'}
BLOCK_TYPES = ('block', 'do_block')


@dataclass
class FileIndex:
    """Everything the resolver needs to know about one file."""
    unit: SourceUnit
    root: ClassContext
    contexts: List[ClassContext] = field(default_factory=list)
    call_sites: List[CallSite] = field(default_factory=list)

    @property
    def translation_calls(self) -> List[TranslationCallSite]:
        return [site for site in self.call_sites if isinstance(site, TranslationCallSite)]


class ClassIndexer:
    """Build a FileIndex from a parsed tree."""

    def __init__(self, config: ScanConfig, unit: SourceUnit):
        self.config = config
        self.unit = unit
        self.extractor = CallExtractor(config, unit)

    def index(self, tree: Tree) -> FileIndex:
        root = ClassContext(segments=(), constant_path=(), kind='root')
        self._index = FileIndex(unit=self.unit, root=root, contexts=[root])
        self._index_body(tree.root_node.named_children, root)
        return self._index

    # -- Namespaces -----------------------------------------------------------

    def _index_namespace(self, node: Node, parent: ClassContext):
        """Open a class/module context and index its body."""
        names = constant_path(node.child_by_field_name('name'))
        segments = [underscore(name) for name in names]
        if node.type == 'class' and names:
            segments[-1] = underscore(strip_suffix(names[-1], self.config.controller_suffix))

        context = ClassContext(
            segments=parent.segments + tuple(segments),
            constant_path=parent.constant_path + tuple(names),
            kind=node.type,
            line_num=node_line(node),
        )
        self._index.contexts.append(context)
        self._index_body(_body_members(node), context)

    def _index_body(self, members: List[Node], context: ClassContext):
        """Fold over body members with a visibility cursor starting at public.

        `private :foo, :bar` directives are applied once the whole body is
        indexed, so they also cover methods defined earlier.
        """
        visibility = PUBLIC
        named_visibility = {}
        for member in members:
            if member.type == 'identifier' and node_text(member) in VISIBILITIES:
                visibility = node_text(member)
            elif member.type == 'method':
                self._index_method(member, context, visibility)
            elif member.type == 'call' and self._is_visibility_wrapper(member):
                # `private def foo`: applies to that one method only
                wrapped_visibility = node_text(member.child_by_field_name('method'))
                for argument in member.child_by_field_name('arguments').named_children:
                    if argument.type == 'method':
                        self._index_method(argument, context, wrapped_visibility)
                    else:
                        self._walk(argument, context, None, None, visibility)
            elif member.type == 'call' and self._visibility_targets(member):
                directive = node_text(member.child_by_field_name('method'))
                for name in self._visibility_targets(member):
                    named_visibility[name] = directive
            elif member.type == 'call' and self._is_callback_macro(member):
                self._index_callback(member, context)
            else:
                self._walk(member, context, None, None, visibility)

        for name, directive in named_visibility.items():
            method = context.methods.get(name)
            if method is not None:
                method.visibility = directive

    # -- Methods and callbacks ------------------------------------------------

    def _index_method(self, node: Node, context: ClassContext, visibility: str):
        name_node = node.child_by_field_name('name')
        if name_node is None:
            return
        method = MethodDefinition(
            name=node_text(name_node),
            context=context,
            visibility=visibility,
            line_num=node_line(node),
        )
        context.add_method(method)
        for member in _body_members(node):
            self._walk(member, context, method, None)

    def _index_callback(self, node: Node, context: ClassContext):
        """Record a `before_action`-style registration and scan its inline body."""
        registration = CallbackRegistration(
            macro=node_text(node.child_by_field_name('method')),
            context=context,
            line_num=node_line(node),
        )
        positional, options = split_arguments(node.child_by_field_name('arguments'))
        registration.only = options.get('only')
        registration.except_ = options.get('except')

        for argument in positional:
            value = string_value(argument)
            if argument.type == 'lambda':
                registration.inline = True
                self._walk(argument, context, None, registration)
            elif value is not None and not value.interpolated:
                registration.method_names.append(value.text)
            else:
                self._walk(argument, context, None, None)

        block = _block_of(node)
        if block is not None:
            registration.inline = True
            self._walk(block, context, None, registration)

        context.callbacks.append(registration)

    def _is_callback_macro(self, node: Node) -> bool:
        name_node = node.child_by_field_name('method')
        return (node.child_by_field_name('receiver') is None and name_node is not None
                and node_text(name_node) in self.config.callback_macros)

    def _is_visibility_wrapper(self, node: Node) -> bool:
        name_node = node.child_by_field_name('method')
        arguments = node.child_by_field_name('arguments')
        return (node.child_by_field_name('receiver') is None and name_node is not None
                and node_text(name_node) in VISIBILITIES and arguments is not None
                and any(child.type == 'method' for child in arguments.named_children))

    def _visibility_targets(self, node: Node) -> List[str]:
        """Method names listed by `private :foo, 'bar'`; empty for anything else."""
        name_node = node.child_by_field_name('method')
        arguments = node.child_by_field_name('arguments')
        if (node.child_by_field_name('receiver') is not None or name_node is None
                or node_text(name_node) not in VISIBILITIES or arguments is None):
            return []
        names = []
        for argument in arguments.named_children:
            value = string_value(argument)
            if value is None or value.interpolated:
                return []
            names.append(value.text)
        return names

    # -- Generic traversal ----------------------------------------------------

    def _walk(self, node: Node, context: ClassContext, method: Optional[MethodDefinition],
              callback: Optional[CallbackRegistration], visibility: str = PUBLIC):
        """Visit a subtree in document order, collecting call sites.

        `visibility` is the class-body cursor in force; it applies to any
        `def` reached through a wrapper such as `helper_method def x` or `if`.
        """
        node_type = node.type
        if node_type in ('class', 'module'):
            self._index_namespace(node, context)
            return
        if node_type == 'method':
            # e.g. a `def` inside an `included do ... end` block
            self._index_method(node, context, visibility)
            return
        if node_type == 'singleton_method':
            for member in _body_members(node):
                self._walk(member, context, None, None)
            return
        if node_type == 'singleton_class':
            # `class << self`: its defs are class methods, not actions
            for member in _body_members(node):
                targets = _body_members(member) if member.type == 'method' else [member]
                for target in targets:
                    self._walk(target, context, None, None)
            return
        if node_type in PARAMETER_TYPES or node_type == 'comment':
            return
        if node_type == 'call':
            self._visit_call(node, context, method, callback, visibility)
            return
        if node_type == 'identifier':
            self._record_bare_call(node, context, method, callback)
            return
        if node_type in ASSIGNMENT_TYPES:
            left = node.child_by_field_name('left')
            if left is not None and left.type not in ('identifier', 'left_assignment_list'):
                self._walk(left, context, method, callback, visibility)
            right = node.child_by_field_name('right')
            if right is not None:
                self._walk(right, context, method, callback, visibility)
            return

        for child in node.named_children:
            self._walk(child, context, method, callback, visibility)

    def _visit_call(self, node: Node, context: ClassContext, method: Optional[MethodDefinition],
                    callback: Optional[CallbackRegistration], visibility: str = PUBLIC):
        site = self.extractor.translation_call(node, context, method, callback)
        if site is not None:
            self._index.call_sites.append(site)
        helper = self.extractor.record_helper_call(node)
        if helper is not None:
            self._index.call_sites.append(helper)

        name_node = node.child_by_field_name('method')
        if node.child_by_field_name('receiver') is None and name_node is not None \
                and name_node.type == 'identifier':
            self._record_bare_call(name_node, context, method, callback)

        for child in node.named_children:
            if name_node is not None and child.id == name_node.id:
                continue
            self._walk(child, context, method, callback, visibility)

    def _record_bare_call(self, node: Node, context: ClassContext,
                          method: Optional[MethodDefinition],
                          callback: Optional[CallbackRegistration]):
        caller = method or callback
        if caller is None:
            return
        context.bare_calls.append(BareCall(caller=caller, name=node_text(node),
                                           line_num=node_line(node)))


def _body_members(node: Node) -> List[Node]:
    """Statements of a class/module/method body across grammar versions.

    Newer tree-sitter-ruby grammars wrap bodies in a `body` field holding a
    `body_statement`; older ones list the statements as direct children.
    """
    body = node.child_by_field_name('body')
    if body is not None:
        if body.type == 'body_statement':
            return list(body.named_children)
        return [body]
    skipped = set()
    for field_name in ('name', 'superclass', 'parameters', 'object', 'value'):
        child = node.child_by_field_name(field_name)
        if child is not None:
            skipped.add(child.id)
    return [child for child in node.named_children
            if child.id not in skipped and child.type != 'superclass']


def _block_of(node: Node) -> Optional[Node]:
    block = node.child_by_field_name('block')
    if block is not None:
        return block
    for child in node.named_children:
        if child.type in BLOCK_TYPES:
            return child
    return None
