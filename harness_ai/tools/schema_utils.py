from __future__ import annotations

import inspect
import typing as t


_SCALAR_TYPES = {
    int: "integer",
    float: "number",
    bool: "boolean",
    str: "string",
}


def json_schema_for_annotation(ann: t.Any) -> dict:
    """Map a Python annotation onto the JSON schema fragment sent to the model."""
    origin = t.get_origin(ann) or ann
    args = t.get_args(ann)

    if origin is t.Union:
        members = [a for a in args if a is not type(None)]
        if len(members) == 1:
            return json_schema_for_annotation(members[0])
        return {"anyOf": [json_schema_for_annotation(a) for a in members]}
    if origin is t.Literal:
        return {"enum": list(args)}
    if origin in _SCALAR_TYPES:
        return {"type": _SCALAR_TYPES[origin]}
    if origin in (list, tuple, set, t.List):
        items = json_schema_for_annotation(args[0]) if args else {}
        return {"type": "array", "items": items}
    if origin in (dict, t.Dict):
        return {"type": "object"}
    return {"type": "string"}


def schema_from_callable(func: t.Callable) -> dict:
    """Build a tool input schema from a callable's keyword parameters.

    Parameters without defaults are required; ``*args``/``**kwargs`` are
    ignored. Unannotated parameters are treated as strings.
    """
    sig = inspect.signature(func)
    hints = t.get_type_hints(func) if not isinstance(func, type) else {}
    properties: dict[str, dict] = {}
    required: list[str] = []

    for name, param in sig.parameters.items():
        if param.kind not in (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY):
            continue
        ann = hints.get(name, str)
        properties[name] = json_schema_for_annotation(ann)
        if param.default is inspect.Parameter.empty:
            required.append(name)

    return {
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
    }
