"""Call-site extraction from Ruby syntax trees.

Recognizes translation calls (`t(...)`, `I18n.t(...)`) and ActiveRecord
record helpers (`Model.human_attribute_name`, `Model.model_name.human`).
The extractor only reads single call nodes; traversal order belongs to the
indexer.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from tree_sitter import Node

from i18n_scanner.config import ScanConfig
from i18n_scanner.utils.inflector import underscore
from .literals import StringValue, node_line, node_text, read_value, string_value
from .models import (
    ATTRIBUTE_HELPER,
    MODEL_HELPER,
    NAMESPACED_FORM,
    SHORT_FORM,
    CallbackRegistration,
    ClassContext,
    Literal,
    MethodDefinition,
    NonLiteral,
    OptionValue,
    RecordHelperCall,
    SourceUnit,
    TranslationCallSite,
)

CONSTANT_TYPES = ('constant', 'scope_resolution')

# Argument node types that never count as positional arguments
_NON_POSITIONAL = ('pair', 'hash_splat_argument', 'block_argument', 'comment')


@dataclass
class TranslationArguments:
    """The parts of a translation call that matter for resolution."""
    form: str
    key: Optional[StringValue]
    options: Dict[str, OptionValue]


def constant_path(node: Optional[Node]) -> List[str]:
    """Flatten `A::B::C` into ['A', 'B', 'C']."""
    if node is None:
        return []
    if node.type == 'constant':
        return [node_text(node)]
    if node.type == 'scope_resolution':
        scope = node.child_by_field_name('scope')
        name = node.child_by_field_name('name')
        return constant_path(scope) + constant_path(name)
    return [node_text(node)]


def split_arguments(arguments: Optional[Node]) -> Tuple[List[Node], Dict[str, OptionValue]]:
    """Split an argument_list into positional nodes and keyword options.

    Keyword options are read from `key: value` / `:key => value` pairs and
    from a trailing hash literal. `nil` values read as absent.
    """
    positional: List[Node] = []
    options: Dict[str, OptionValue] = {}
    if arguments is None:
        return positional, options

    children = arguments.named_children
    for index, child in enumerate(children):
        if child.type == 'pair':
            _read_pair(child, options)
        elif child.type == 'hash' and index == len(children) - 1 and positional:
            for pair in child.named_children:
                if pair.type == 'pair':
                    _read_pair(pair, options)
        elif child.type not in _NON_POSITIONAL:
            positional.append(child)
    return positional, options


def _read_pair(pair: Node, options: Dict[str, OptionValue]) -> None:
    key = string_value(pair.child_by_field_name('key'))
    if key is None or key.interpolated:
        return
    value_node = pair.child_by_field_name('value')
    if value_node is None:
        # `scope:` shorthand reads a local variable
        options[key.text] = NonLiteral(key.text)
        return
    value = read_value(value_node)
    if value is not None:
        options[key.text] = value


class CallExtractor:
    """Turns individual `call` nodes into call-site records."""

    def __init__(self, config: ScanConfig, unit: Optional[SourceUnit] = None):
        self.config = config
        self.unit = unit

    def translation_arguments(self, node: Node) -> Optional[TranslationArguments]:
        """Return key and options if `node` is a translation call, else None."""
        form = self._translation_form(node)
        if form is None:
            return None
        positional, options = split_arguments(node.child_by_field_name('arguments'))
        key = string_value(positional[0]) if positional else None
        return TranslationArguments(form=form, key=key, options=options)

    def translation_call(self, node: Node, context: ClassContext,
                         method: Optional[MethodDefinition],
                         callback: Optional[CallbackRegistration]) -> Optional[TranslationCallSite]:
        """Build a TranslationCallSite for a translation call node.

        Args:
            node: A tree-sitter `call` node
            context: Innermost class/module context (file root at top level)
            method: Enclosing method definition, if any
            callback: Enclosing callback registration (inline body), if any

        Returns:
            TranslationCallSite, or None if the node is not a translation call
        """
        parts = self.translation_arguments(node)
        if parts is None:
            return None
        line_num = node_line(node)
        key = parts.key.text if parts.key is not None else None
        return TranslationCallSite(
            form=parts.form,
            key=key,
            raw_key=key,
            options=parts.options,
            context=context,
            method=method,
            callback=callback,
            line_num=line_num,
            line_pos=node.start_point[1] + 1,
            line_text=self._line_text(line_num),
            interpolated=bool(parts.key and parts.key.interpolated),
        )

    def record_helper_call(self, node: Node) -> Optional[RecordHelperCall]:
        """Recognize `Model.human_attribute_name(attr)` and `Model.model_name.human(...)`."""
        name_node = node.child_by_field_name('method')
        receiver = node.child_by_field_name('receiver')
        if name_node is None or receiver is None:
            return None
        name = node_text(name_node)
        positional, options = split_arguments(node.child_by_field_name('arguments'))

        if name in self.config.attribute_helper_methods and receiver.type in CONSTANT_TYPES:
            argument = read_value(positional[0]) if positional else None
            return self._helper(ATTRIBUTE_HELPER, receiver, argument, node)

        if name == self.config.humanize_method and receiver.type == 'call':
            inner_name = receiver.child_by_field_name('method')
            model = receiver.child_by_field_name('receiver')
            if (inner_name is not None and node_text(inner_name) == self.config.model_name_method
                    and model is not None and model.type in CONSTANT_TYPES
                    and receiver.child_by_field_name('arguments') is None):
                return self._helper(MODEL_HELPER, model, options.get('count'), node)
        return None

    def _helper(self, kind: str, model_node: Node, argument: Optional[OptionValue],
                node: Node) -> RecordHelperCall:
        line_num = node_line(node)
        return RecordHelperCall(
            kind=kind,
            model=underscore(constant_path(model_node)[-1]),
            argument=argument,
            line_num=line_num,
            line_pos=node.start_point[1] + 1,
            line_text=self._line_text(line_num),
        )

    def _translation_form(self, node: Node) -> Optional[str]:
        name_node = node.child_by_field_name('method')
        if name_node is None:
            return None
        name = node_text(name_node)
        receiver = node.child_by_field_name('receiver')
        if receiver is None:
            return SHORT_FORM if name in self.config.translation_methods else None
        if receiver.type in CONSTANT_TYPES:
            qualified = f"{'::'.join(constant_path(receiver))}.{name}"
            if qualified in self.config.namespaced_translation_methods:
                return NAMESPACED_FORM
        return None

    def _line_text(self, line_num: int) -> str:
        return self.unit.line_text(line_num) if self.unit is not None else ""


def default_argument(options: Dict[str, OptionValue]) -> Optional[str]:
    """Literal `default:` option, if any."""
    value = options.get('default')
    return value.value if isinstance(value, Literal) else None
