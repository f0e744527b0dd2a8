# pyright: standard

import msgspec

ROOT_PATH = "$"
_PATH_MARKER = " - at `"


def from_json[T](type_spec: type[T], data: bytes | str) -> T:
    """Decode JSON data (bytes or str) into the specified type."""
    return msgspec.json.decode(data, type=type_spec)


def split_error_path(error: msgspec.ValidationError | msgspec.DecodeError) -> tuple[str, str]:
    """
    Splits a msgspec error into its reason and the JSON path it points at.

    msgspec reports validation failures as "Expected `int`, got `str` - at `$.items[0]`".
    Errors without a location (malformed JSON, wrong root type) are attributed to the root.
    """
    text = str(error)
    reason, marker, path = text.rpartition(_PATH_MARKER)
    if not marker:
        return text, ROOT_PATH
    return reason, path.rstrip("`")
