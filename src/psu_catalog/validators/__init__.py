from .model_validators import find_unknown_fields, primary_key_fields

__all__ = ["find_unknown_fields", "primary_key_fields"]
