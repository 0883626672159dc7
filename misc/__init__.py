from misc.json_extract import extract_first_json

__all__ = [
    "extract_first_json",
]
