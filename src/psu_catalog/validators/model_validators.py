from sqlalchemy import inspect as sa_inspect


def find_unknown_fields(model, fields: dict) -> list[str]:
    """
    Return the keys of `fields` that are not mapped columns of `model`.
    - model: the SQLAlchemy model class (not instance)
    - fields: field -> value map a caller wants to write
    """
    mapper = sa_inspect(model)
    # column attributes only; relationships cannot be written through UPDATE
    allowed = {attr.key for attr in mapper.column_attrs}
    return sorted(k for k in fields if k not in allowed)


def primary_key_fields(model) -> set[str]:
    return {col.key for col in sa_inspect(model).primary_key}
