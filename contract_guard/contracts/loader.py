"""
Contract loader - builds an immutable Contract from an OpenAPI document.

Handles:
- YAML and JSON documents (JSON is parsed as YAML)
- Key positions (line/column) so errors can point into the document
- Local '$ref's for path items, parameters, request bodies, responses
  and schemas
- Path-level and operation-level parameters
- OpenAPI 3.0 ('type: integer') and 3.1 ('type: [integer, "null"]') type forms

Path items keep document order; that order is the resolver's tie-break.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from contract_guard.constants import HTTP_METHODS, UNKNOWN_POSITION

from .refs import follow_ref
from .registry import Contract, Operation, ParameterSpec, PathItem, SchemaDefinition
from .validate import ContractLoadError

logger = logging.getLogger('contract_guard.contracts.loader')

Pointer = Tuple[str, ...]
Marks = Dict[Pointer, Tuple[int, int]]

# Parameter keys that describe the parameter rather than its value (Swagger 2 inline types)
_PARAM_META_KEYS = {'name', 'in', 'required', 'description', 'deprecated', 'allowEmptyValue'}


class ParameterDocument(BaseModel):
    """Parameter object as written in the document."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra='allow',
    )

    name: str
    location: Literal['path', 'query', 'header', 'cookie', 'body', 'formData'] = Field(alias='in')
    required: bool = False
    schema_: Optional[Dict[str, Any]] = Field(default=None, alias='schema')


@dataclass
class _LoadContext:
    document: Mapping[str, Any]
    marks: Marks = field(default_factory=dict)


def load_contract(path: Union[str, Path], name: Optional[str] = None) -> Contract:
    """
    Load a contract from a YAML or JSON file.

    Args:
        path: Path to the document
        name: Registry name, defaults to info.title or the file stem

    Raises:
        ContractLoadError: If the file cannot be read or is not a contract
    """
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ContractLoadError(
            f"Cannot read contract document {path}: {e}",
            field='path',
            received_value=str(path),
        ) from e
    return parse_contract(text, name=name, source=str(path), default_name=path.stem)


def parse_contract(
    text: str,
    name: Optional[str] = None,
    source: Optional[str] = None,
    default_name: str = "contract",
) -> Contract:
    """Parse document text into a Contract, recording key positions."""
    document, marks = _compose(text)
    if not isinstance(document, Mapping):
        raise ContractLoadError("Contract document must be a mapping", received_value=type(document).__name__)

    info = _mapping(document.get('info'), ('info',))
    contract_name = name or info.get('title') or default_name
    return contract_from_document(document, marks=marks, name=contract_name, source=source)


def contract_from_document(
    document: Mapping[str, Any],
    marks: Optional[Marks] = None,
    name: str = "contract",
    source: Optional[str] = None,
) -> Contract:
    """
    Build a Contract from an already-decoded document.

    Args:
        document: Decoded OpenAPI document
        marks: Key positions by pointer; omit for documents built in code
        name: Registry name
        source: Where the document came from (for diagnostics)
    """
    paths = document.get('paths')
    if paths is None:
        paths = {}
    if not isinstance(paths, Mapping):
        raise ContractLoadError("'paths' must be a mapping", field='paths', received_value=paths)

    info = _mapping(document.get('info'), ('info',))
    ctx = _LoadContext(document=document, marks=marks or {})
    items = []
    for template, raw_item in paths.items():
        template = str(template)
        items.append(_build_path_item(template, raw_item, ('paths', template), ctx))

    contract = Contract(
        name=name,
        version=str(info.get('version', '')),
        paths=tuple(items),
        source=source,
    )
    logger.info(
        f"Loaded contract '{contract.name}' with {len(items)} path(s)",
        extra={"event": "contract_loaded", "contract": contract.name, "source": source},
    )
    return contract


def _compose(text: str) -> Tuple[Any, Marks]:
    """Parse once, keeping both the decoded document and key positions."""
    try:
        loader = yaml.SafeLoader(text)
    except yaml.YAMLError as e:
        raise ContractLoadError(f"Contract document is not valid YAML/JSON: {e}") from e
    try:
        node = loader.get_single_node()
        document = loader.construct_document(node) if node is not None else None
    except yaml.YAMLError as e:
        raise ContractLoadError(f"Contract document is not valid YAML/JSON: {e}") from e
    finally:
        loader.dispose()

    marks: Marks = {}
    if node is not None:
        _collect_marks(node, (), marks)
    return document, marks


def _collect_marks(node: yaml.Node, pointer: Pointer, marks: Marks) -> None:
    if isinstance(node, yaml.MappingNode):
        for key_node, value_node in node.value:
            child = pointer + (str(key_node.value),)
            marks[child] = (key_node.start_mark.line + 1, key_node.start_mark.column + 1)
            _collect_marks(value_node, child, marks)
    elif isinstance(node, yaml.SequenceNode):
        for index, item in enumerate(node.value):
            child = pointer + (str(index),)
            marks[child] = (item.start_mark.line + 1, item.start_mark.column + 1)
            _collect_marks(item, child, marks)


def _build_path_item(template: str, raw: Any, pointer: Pointer, ctx: _LoadContext) -> PathItem:
    raw, ref_pointer = follow_ref(ctx.document, raw)
    pointer = ref_pointer or pointer
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ContractLoadError(f"Path item '{template}' must be a mapping", field=template, received_value=raw)

    operations = {}
    for key, value in raw.items():
        method = str(key).upper()
        if method not in HTTP_METHODS or str(key) != str(key).lower():
            continue
        op_pointer = pointer + (str(key),)
        operations[method] = _build_operation(method, _mapping(value, op_pointer), op_pointer, ctx)

    line, col = ctx.marks.get(pointer, (UNKNOWN_POSITION, UNKNOWN_POSITION))
    return PathItem(
        template=template,
        operations=operations,
        parameters=_build_parameters(raw.get('parameters'), pointer + ('parameters',), ctx),
        line=line,
        col=col,
    )


def _build_operation(method: str, raw: Mapping[str, Any], pointer: Pointer, ctx: _LoadContext) -> Operation:
    request_body: Dict[str, SchemaDefinition] = {}
    body_required = False
    if raw.get('requestBody') is not None:
        body, body_pointer = follow_ref(ctx.document, raw['requestBody'])
        body_pointer = body_pointer or pointer + ('requestBody',)
        body = _mapping(body, body_pointer)
        body_required = bool(body.get('required', False))
        request_body = _build_content(body.get('content'), body_pointer + ('content',), ctx)

    responses: Dict[str, Dict[str, SchemaDefinition]] = {}
    for key, raw_response in _mapping(raw.get('responses'), pointer + ('responses',)).items():
        key = str(key)
        code = 'default' if key.lower() == 'default' else key.upper()
        response, response_pointer = follow_ref(ctx.document, raw_response)
        response_pointer = response_pointer or pointer + ('responses', key)
        response = _mapping(response, response_pointer)
        responses[code] = _build_content(response.get('content'), response_pointer + ('content',), ctx)

    return Operation(
        method=method,
        parameters=_build_parameters(raw.get('parameters'), pointer + ('parameters',), ctx),
        operation_id=raw.get('operationId'),
        request_body=request_body,
        request_body_required=body_required,
        responses=responses,
    )


def _build_content(raw: Any, pointer: Pointer, ctx: _LoadContext) -> Dict[str, SchemaDefinition]:
    content = {}
    for media_type, media in _mapping(raw, pointer).items():
        if not isinstance(media, Mapping) or media.get('schema') is None:
            continue
        content[str(media_type).lower()] = build_schema_definition(
            media['schema'], pointer + (str(media_type), 'schema'), ctx
        )
    return content


def _build_parameters(raw: Any, pointer: Pointer, ctx: _LoadContext) -> Tuple[ParameterSpec, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ContractLoadError("'parameters' must be a list", field='/'.join(pointer), received_value=raw)

    specs: List[ParameterSpec] = []
    for index, raw_param in enumerate(raw):
        param, ref_pointer = follow_ref(ctx.document, raw_param)
        param_pointer = ref_pointer or pointer + (str(index),)
        try:
            doc = ParameterDocument.model_validate(param)
        except PydanticValidationError as e:
            raise ContractLoadError(
                f"Invalid parameter at '{'/'.join(param_pointer)}': {e.errors()[0]['msg']}",
                field='/'.join(param_pointer),
                received_value=param,
            ) from e

        if doc.schema_ is not None:
            schema = build_schema_definition(doc.schema_, param_pointer + ('schema',), ctx)
        elif 'type' in param:
            # Swagger 2: the parameter carries its own type
            inline = {k: v for k, v in param.items() if k not in _PARAM_META_KEYS}
            schema = build_schema_definition(inline, param_pointer, ctx)
        else:
            schema = None

        specs.append(ParameterSpec(
            name=doc.name,
            location=doc.location,
            schema=schema,
            required=doc.required,
        ))
    return tuple(specs)


def build_schema_definition(raw: Any, pointer: Pointer, ctx: _LoadContext) -> SchemaDefinition:
    """
    Wrap a schema object, resolving a top-level '$ref' for its declared types.

    The raw schema is kept as written; references are only inlined when the
    schema is rendered for validation.
    """
    resolved, ref_pointer = follow_ref(ctx.document, raw)
    base = ref_pointer or pointer
    types: Tuple[str, ...] = ()
    if isinstance(resolved, Mapping):
        types = _declared_types(resolved.get('type'))
    line, col = ctx.marks.get(base + ('type',), (UNKNOWN_POSITION, UNKNOWN_POSITION))
    return SchemaDefinition(
        schema=raw if isinstance(raw, Mapping) else {},
        types=types,
        type_line=line,
        type_col=col,
        document=ctx.document,
    )


def _declared_types(raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,)
    if isinstance(raw, list):
        return tuple(str(t) for t in raw)
    raise ContractLoadError("Schema 'type' must be a string or list", field='type', received_value=raw)


def _mapping(raw: Any, pointer: Pointer) -> Mapping[str, Any]:
    """A mapping-valued object, with a missing (null) value read as empty."""
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        location = '/'.join(pointer)
        raise ContractLoadError(f"'{location}' must be a mapping", field=location, received_value=raw)
    return raw
