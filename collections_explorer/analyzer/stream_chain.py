"""Reconstruction of fluent call chains rooted at a stream-producing call.

Given an outer call expression such as::

    map.values().stream().filter(x -> x > 0).collect(Collectors.toList())

every call reachable from it is enumerated in source order, the first call
that produces a ``java.util.stream`` type becomes the anchor, and the bare
call names, reversed, form the chain read from the stream end outwards.

When several calls qualify, the first one enumerated wins. With working type
resolution that is usually the outermost intermediate operation rather than
``stream()`` itself. Chains nested in the arguments of another chain produce
their own records, overlapping the enclosing one.
"""
from typing import List, Optional

import structlog
from tree_sitter import Node

from collections_explorer.analyzer.ast_utils import (
    enclosing_class_name,
    find_all,
    node_text,
    package_name,
    position,
)
from collections_explorer.analyzer.records import StreamChainRecord
from collections_explorer.analyzer.resolver import STREAM_NAMESPACE, TypeResolver


logger = structlog.get_logger()

UNKNOWN_TYPE = 'UNK'

# Used only when a call's return type can't be resolved
STREAM_PRODUCERS = frozenset({'stream', 'parallelStream'})


def call_name(call: Node) -> str:
    return node_text(call.child_by_field_name('name'))


def enumerate_calls(expression: Node) -> List[Node]:
    """Every method invocation reachable from expression, itself included, in pre-order."""
    return find_all(expression, 'method_invocation')


def is_stream_type(description: str) -> bool:
    return description == STREAM_NAMESPACE or description.startswith(STREAM_NAMESPACE + '.')


def is_anchor(call: Node, resolver: TypeResolver) -> bool:
    """Whether a call produces a stream.

    A resolved return type decides on its own. Only an unresolved call falls
    back to the name check.
    """
    resolution = resolver.resolve_return_type(call)
    if resolution.ok:
        return is_stream_type(resolution.description)

    logger.debug("return_type_unresolved", call=node_text(call), reason=resolution.reason)
    return call_name(call) in STREAM_PRODUCERS


def find_anchor(calls: List[Node], resolver: TypeResolver) -> Optional[Node]:
    """First anchor in enumeration order, or None."""
    for call in calls:
        if is_anchor(call, resolver):
            return call
    return None


def extract_chain(calls: List[Node]) -> List[str]:
    """Bare call names, reversed so they read from the stream call outwards.

    Every enumerated call is included, even calls unrelated to the stream
    (e.g. ``Collectors.toList`` inside ``collect``).
    """
    return [call_name(call) for call in reversed(calls)]


def resolve_source_type(anchor: Node, resolver: TypeResolver) -> str:
    """Static type of the anchor's receiver, or UNKNOWN_TYPE."""
    receiver = anchor.child_by_field_name('object')
    if receiver is None:
        return UNKNOWN_TYPE

    resolution = resolver.resolve_expression_type(receiver)
    if resolution.ok:
        return resolution.description

    logger.debug("source_type_unresolved", receiver=node_text(receiver), reason=resolution.reason)
    return UNKNOWN_TYPE


def reconstruct(expression: Node, source: bytes, resolver: TypeResolver) -> Optional[StreamChainRecord]:
    """Build the stream chain record for an outer call expression.

    Args:
        expression: A method_invocation node
        source: Source bytes of the file, for column computation
        resolver: Type resolver for the file

    Returns:
        StreamChainRecord, or None if no call in the expression produces a stream
    """
    calls = enumerate_calls(expression)
    anchor = find_anchor(calls, resolver)
    if anchor is None:
        return None

    line, col = position(expression, source)
    return StreamChainRecord(
        class_name=enclosing_class_name(expression),
        package_name=package_name(expression),
        full_text_of_expression=node_text(expression),
        stream_operations=extract_chain(calls),
        source_type=resolve_source_type(anchor, resolver),
        line=line,
        col=col,
    )
