"""Per-class call graph built with NetworkX.

Edge (A, B) means "the body of method A calls B without a receiver". Only
names that are methods of the same class become nodes. The graph drives
relative-key scope propagation, so it must be acyclic.
"""
from typing import Dict, List, Optional, Set

import networkx as nx

from .errors import CyclicCallError
from .literals import literal_strings
from .models import CallbackRegistration, ClassContext, MethodDefinition


class ClassCallGraph:
    """Directed call graph for the methods of one class."""

    def __init__(self, context: ClassContext, path: Optional[str] = None):
        """Build the graph from the context's methods, bare calls and callbacks.

        Args:
            context: Indexed class context
            path: File path, used in error messages
        """
        self.context = context
        self.path = path
        self.graph = nx.DiGraph()
        # method name -> registrations that trigger it
        self.callbacks_by_method: Dict[str, List[CallbackRegistration]] = {}

        for name in context.methods:
            self.graph.add_node(name)

        for call in context.bare_calls:
            if call.name not in context.methods:
                continue
            if isinstance(call.caller, MethodDefinition):
                self.graph.add_edge(call.caller.name, call.name)
            else:
                # A bare call inside an inline callback body
                self._link_callback(call.caller, call.name)

        for registration in context.callbacks:
            for name in registration.method_names:
                if name in context.methods:
                    self._link_callback(registration, name)

    def _link_callback(self, registration: CallbackRegistration, name: str):
        registrations = self.callbacks_by_method.setdefault(name, [])
        if registration not in registrations:
            registrations.append(registration)

    # -- Cycle guard ----------------------------------------------------------

    def check_acyclic(self):
        """Raise CyclicCallError if any method can reach itself.

        Depth-first over callees, in method definition order, carrying the
        current path.
        """
        finished: Set[str] = set()
        for name in list(self.graph.nodes):
            if name not in finished:
                self._visit_callees(name, [], finished)

    def _visit_callees(self, name: str, path: List[str], finished: Set[str]):
        if name in path:
            raise CyclicCallError(path[path.index(name):] + [name], self.path)
        if name in finished:
            return
        path.append(name)
        for callee in self.graph.successors(name):
            self._visit_callees(callee, path, finished)
        path.pop()
        finished.add(name)

    # -- Scope roots ----------------------------------------------------------

    def scope_roots(self, method_name: str) -> List[str]:
        """Action names whose scope a relative key in `method_name` resolves under.

        The method itself if public, every public method that reaches it
        through the graph, and the filtered actions of any callback
        registration triggering a method on the way. Discovery order, no
        duplicates.
        """
        roots: List[str] = []
        self._collect_roots(method_name, [], set(), roots)
        return roots

    def _collect_roots(self, name: str, path: List[str], explored: Set[str], roots: List[str]):
        if name in path:
            cycle = path[path.index(name):] + [name]
            # path runs callee -> caller; report in call order
            raise CyclicCallError(list(reversed(cycle)), self.path)
        if name in explored:
            return
        path.append(name)

        method = self.context.methods.get(name)
        if method is not None and method.is_public:
            _add_unique(roots, name)
        for registration in self.callbacks_by_method.get(name, []):
            for action in self.callback_actions(registration):
                _add_unique(roots, action)
        if name in self.graph:
            for caller in self.graph.predecessors(name):
                self._collect_roots(caller, path, explored, roots)

        path.pop()
        explored.add(name)

    def callback_actions(self, registration: CallbackRegistration) -> List[str]:
        """Public actions a registration's only:/except: filter lets through.

        A non-literal filter value makes the registration contribute nothing.
        """
        if registration.only is not None:
            only = literal_strings(registration.only)
            return list(dict.fromkeys(only)) if only is not None else []

        excluded: List[str] = []
        if registration.except_ is not None:
            excluded = literal_strings(registration.except_)
            if excluded is None:
                return []
        return [method.name for method in self.context.public_methods if method.name not in excluded]


def _add_unique(items: List[str], value: str):
    if value not in items:
        items.append(value)
