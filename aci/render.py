"""
ACI Type Renderer
=================
Renders type expressions in the canonical text form used by the
interface description.

Separators are part of the format: tuples, records and applied types
join with "," while constructor arguments join with ", ".
"""
from .parser import (
    AliasT, AppT, Con, ConstrT, FieldT, Id, RecordT, TupleT, TVar, VariantT,
)


def render_types(types) -> list[str]:
    return [render_type(t) for t in types]


def render_type(t) -> str:
    """Render a type expression. Every node of the closed type grammar renders."""
    if isinstance(t, (TVar, Id, Con)):
        return t.name
    if isinstance(t, TupleT):
        return "(" + ",".join(render_types(t.args)) + ")"
    if isinstance(t, RecordT):
        return "{" + ",".join(render_types(t.fields)) + "}"
    if isinstance(t, AppT):
        return render_type(t.id) + "(" + ",".join(render_types(t.fields)) + ")"
    if isinstance(t, FieldT):
        return render_type(t.id) + " : " + render_type(t.type)
    if isinstance(t, VariantT):
        return " | ".join(render_types(t.cons))
    if isinstance(t, ConstrT):
        return render_type(t.con) + "(" + ", ".join(render_types(t.args)) + ")"
    if isinstance(t, AliasT):
        return render_type(t.type)
    raise TypeError(f"not a type expression: {t!r}")


def render_typedef(t) -> str:
    """Render the body of a type definition, looking through an alias wrapper."""
    if isinstance(t, AliasT):
        return render_type(t.type)
    return render_type(t)
