"""Data model shared by the indexer, the extractor and the resolver."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

PUBLIC = "public"
PRIVATE = "private"
PROTECTED = "protected"
VISIBILITIES = (PUBLIC, PRIVATE, PROTECTED)


# --- Tagged option values ----------------------------------------------------

@dataclass(frozen=True)
class Literal:
    """A statically known string (string, symbol or bare word)."""
    value: str


@dataclass(frozen=True)
class LiteralList:
    """A literal array whose elements are all statically known strings."""
    values: Tuple[str, ...]


@dataclass(frozen=True)
class IntegerLiteral:
    value: int


@dataclass(frozen=True)
class NonLiteral:
    """Anything computed at runtime."""
    source: str = ""


OptionValue = Union[Literal, LiteralList, IntegerLiteral, NonLiteral]


# --- Source ------------------------------------------------------------------

@dataclass
class SourceUnit:
    """One file being scanned: its path and raw text."""
    path: str
    text: str
    lines: List[str] = field(init=False, repr=False)

    def __post_init__(self):
        # tree-sitter rows count "\n" only
        self.lines = self.text.split("\n")

    def line_text(self, line_num: int) -> str:
        """Stripped text of a 1-based line, or '' past the end of the file."""
        if 1 <= line_num <= len(self.lines):
            return self.lines[line_num - 1].strip()
        return ""


# --- Index -------------------------------------------------------------------

@dataclass(eq=False)
class MethodDefinition:
    """A `def` inside a class or module body."""
    name: str
    context: "ClassContext"
    visibility: str
    line_num: int

    @property
    def is_public(self) -> bool:
        return self.visibility == PUBLIC

    def __repr__(self) -> str:
        return f"MethodDefinition({self.context.display_name}#{self.name}, {self.visibility})"


@dataclass(eq=False)
class CallbackRegistration:
    """A class-level `before_action`-style macro call."""
    macro: str
    context: "ClassContext"
    line_num: int
    method_names: List[str] = field(default_factory=list)
    inline: bool = False
    only: Optional[OptionValue] = None
    except_: Optional[OptionValue] = None


@dataclass(frozen=True)
class BareCall:
    """A receiver-less call (or bare identifier) that may target a sibling method."""
    caller: Union[MethodDefinition, CallbackRegistration]
    name: str
    line_num: int


@dataclass(eq=False)
class ClassContext:
    """One namespace level: a class or module body (or the file root).

    `segments` are the key segments from the outermost namespace down to this
    one, already underscored and with the controller suffix stripped.
    """
    segments: Tuple[str, ...]
    constant_path: Tuple[str, ...]
    kind: str  # 'class', 'module' or 'root'
    line_num: int = 0
    methods: Dict[str, MethodDefinition] = field(default_factory=dict)
    callbacks: List[CallbackRegistration] = field(default_factory=list)
    bare_calls: List[BareCall] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return "::".join(self.constant_path) or "<main>"

    @property
    def public_methods(self) -> List[MethodDefinition]:
        return [method for method in self.methods.values() if method.is_public]

    def add_method(self, method: MethodDefinition) -> None:
        # Redefinition replaces the earlier method, as in Ruby
        self.methods.pop(method.name, None)
        self.methods[method.name] = method


# --- Call sites --------------------------------------------------------------

SHORT_FORM = "short"
NAMESPACED_FORM = "namespaced"


@dataclass
class TranslationCallSite:
    """A `t(...)` / `I18n.t(...)` call found in the tree."""
    form: str
    key: Optional[str]
    raw_key: Optional[str]
    options: Dict[str, OptionValue]
    context: ClassContext
    method: Optional[MethodDefinition]
    callback: Optional[CallbackRegistration]
    line_num: int
    line_pos: int
    line_text: str
    interpolated: bool = False

    @property
    def is_relative(self) -> bool:
        return self.key is not None and self.key.startswith(".")


ATTRIBUTE_HELPER = "attribute"
MODEL_HELPER = "model"


@dataclass
class RecordHelperCall:
    """`Model.human_attribute_name(...)` or `Model.model_name.human(...)`."""
    kind: str
    model: str
    argument: Optional[OptionValue]
    line_num: int
    line_pos: int
    line_text: str


# --- Output ------------------------------------------------------------------

@dataclass(frozen=True)
class Occurrence:
    """One resolved key usage."""
    resolved_key: str
    raw_key: str
    path: str
    line_num: int
    line_text: str
    line_pos: int = 1
    default_arg: Optional[str] = None
