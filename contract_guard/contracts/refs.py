"""
Local JSON reference helpers.

Only document-local references ('#/components/schemas/Pet') are supported.
Remote references are reported as load errors.
"""

from typing import Any, Mapping, Tuple

from .validate import ContractLoadError

REF_KEY = '$ref'


def pointer_parts(ref: str) -> Tuple[str, ...]:
    """'#/components/schemas/a~1b' -> ('components', 'schemas', 'a/b')"""
    if not isinstance(ref, str) or not ref.startswith('#'):
        raise ContractLoadError(
            f"Only local references are supported, got {ref!r}",
            field=REF_KEY,
            received_value=ref,
        )
    body = ref[1:]
    if body in ('', '/'):
        return ()
    return tuple(
        part.replace('~1', '/').replace('~0', '~')
        for part in body.lstrip('/').split('/')
    )


def resolve_pointer(document: Any, ref: str) -> Any:
    """Return the node a local reference points at."""
    node = document
    for part in pointer_parts(ref):
        if isinstance(node, Mapping) and part in node:
            node = node[part]
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            raise ContractLoadError(
                f"Reference {ref!r} cannot be resolved",
                field=REF_KEY,
                received_value=ref,
            )
    return node


def follow_ref(document: Any, node: Any) -> Tuple[Any, Tuple[str, ...]]:
    """
    Follow a chain of '$ref' objects to the first concrete node.

    Returns:
        (resolved node, pointer of the resolved node or () if node was inline)
    """
    seen = set()
    pointer: Tuple[str, ...] = ()
    while isinstance(node, Mapping) and REF_KEY in node:
        ref = node[REF_KEY]
        if ref in seen:
            raise ContractLoadError(
                f"Circular reference {ref!r}",
                field=REF_KEY,
                received_value=ref,
            )
        seen.add(ref)
        pointer = pointer_parts(ref)
        node = resolve_pointer(document, ref)
    return node, pointer


def inline_refs(node: Any, document: Any, _stack: Tuple[str, ...] = ()) -> Any:
    """
    Return a copy of node with every local '$ref' replaced by its target.

    Raises:
        ContractLoadError: On a reference cycle, which cannot be inlined
    """
    if isinstance(node, Mapping):
        if REF_KEY in node:
            ref = node[REF_KEY]
            if ref in _stack:
                raise ContractLoadError(
                    f"Circular reference {ref!r} cannot be rendered inline",
                    field=REF_KEY,
                    received_value=ref,
                )
            return inline_refs(resolve_pointer(document, ref), document, _stack + (ref,))
        return {key: inline_refs(value, document, _stack) for key, value in node.items()}
    if isinstance(node, list):
        return [inline_refs(item, document, _stack) for item in node]
    return node
