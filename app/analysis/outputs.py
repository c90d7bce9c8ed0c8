import json


def extract_output(outputs: object, key: str) -> object | None:
    """Return the value stored under ``key`` in a workflow's outputs.

    Outputs may arrive as a mapping or as a JSON-encoded string. A string value
    is decoded as JSON; when decoding fails the raw string is returned verbatim.
    Returns None when there is nothing under ``key``.
    """
    if isinstance(outputs, str):
        try:
            outputs = json.loads(outputs)
        except json.JSONDecodeError:
            return None
    if not isinstance(outputs, dict):
        return None
    value = outputs.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value
