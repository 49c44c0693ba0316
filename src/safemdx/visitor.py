"""AST visitor, transformer and traversal helpers for document trees.

Provides a base visitor class with kind-based dispatch, an immutable
transform function for rewriting frozen trees, and breadth-first search.

Example, collecting all component names:

    class ComponentCollector(BaseVisitor[None]):
        def __init__(self) -> None:
            self.names: list[str] = []

        def visit_mdx_jsx_flow_element(self, node: JsxElement) -> None:
            self.names.append(node.name or "")

    collector = ComponentCollector()
    collector.visit(root)

Example, dropping every raw-markup node:

    new_root = transform(root, lambda n: None if isinstance(n, Html) else n)

Thread Safety:
    Visitors are NOT shared across threads by default (they may accumulate
    mutable state). Create a new visitor per thread. The transform and search
    functions are pure, safe to call from any thread.

"""

from __future__ import annotations

import dataclasses
import re
from collections import deque
from collections.abc import Callable, Iterator

from safemdx.nodes import Node, Parent, Root

type TransformResult = Node | tuple[Node, ...] | None

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def visit_method_name(kind: str) -> str:
    """``"mdxJsxFlowElement"`` -> ``"visit_mdx_jsx_flow_element"``."""
    return "visit_" + _CAMEL_BOUNDARY.sub("_", kind).lower()


class BaseVisitor[T]:
    """Base AST visitor with kind-based dispatch.

    Subclass and define ``visit_<kind>`` methods (snake_case of the mdast
    type, e.g. ``visit_list_item``) for node kinds you care about. Unhandled
    kinds fall through to ``visit_default``. Children are walked
    automatically after the ``visit_*`` call.

    Type parameter ``T`` is the return type of visit methods (use ``None``
    for side-effect-only visitors).

    """

    def visit(self, node: Node) -> T:
        """Dispatch to the appropriate ``visit_*`` method.

        Walks children automatically after the visit method returns.

        """
        method = getattr(self, visit_method_name(node.kind), None)
        result = method(node) if method is not None else self.visit_default(node)
        if isinstance(node, Parent):
            for child in node.children:
                self.visit(child)
        return result

    def visit_default(self, node: Node) -> T:
        """Called for node kinds without a specific ``visit_*`` method.

        Override this for catch-all behavior. Default returns None
        (suitable for ``BaseVisitor[None]``).

        """
        return None  # type: ignore[return-value]


def transform(root: Root, fn: Callable[[Node], TransformResult]) -> Root:
    """Apply a function to every node in the tree, returning a new tree.

    The function ``fn`` is called bottom-up: children are transformed first,
    then the parent is transformed with its new children.

    Return ``None`` from ``fn`` to remove a node, or a tuple of nodes to
    splice them into the parent in its place. The root cannot be removed or
    replaced by several nodes; doing so raises TypeError.

    Nodes whose children did not change are returned as the same object, so
    identity comparisons can detect untouched subtrees.

    Args:
        root: The document to transform.
        fn: Function that receives a node and returns a (possibly new) node,
            a tuple of replacement nodes, or None.

    Returns:
        A new Root with the transformation applied.

    """
    result = _transform_node(root, fn)
    if not isinstance(result, Root):
        msg = "transform fn must return a Root for the root (cannot remove root)"
        raise TypeError(msg)
    return result


def _transform_node(node: Node, fn: Callable[[Node], TransformResult]) -> TransformResult:
    return fn(_transform_children(node, fn))


def _transform_children(node: Node, fn: Callable[[Node], TransformResult]) -> Node:
    if not isinstance(node, Parent):
        return node
    new_children: list[Node] = []
    for child in node.children:
        result = _transform_node(child, fn)
        if result is None:
            continue
        if isinstance(result, tuple):
            new_children.extend(result)
        else:
            new_children.append(result)
    if len(new_children) == len(node.children) and all(
        a is b for a, b in zip(new_children, node.children, strict=True)
    ):
        return node
    return dataclasses.replace(node, children=tuple(new_children))


def iter_breadth_first(root: Node) -> Iterator[Node]:
    """Yield every node of the tree, level by level."""
    queue: deque[Node] = deque([root])
    while queue:
        node = queue.popleft()
        yield node
        if isinstance(node, Parent):
            queue.extend(node.children)


def find_first[N: Node](root: Node, node_type: type[N], predicate: Callable[[N], bool]) -> N | None:
    """Breadth-first search for the first node of a type matching a predicate."""
    for node in iter_breadth_first(root):
        if isinstance(node, node_type) and predicate(node):
            return node
    return None
