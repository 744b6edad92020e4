from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Union


def asbool(value):
    # type: (Union[str, bool, None]) -> bool
    """Convert the given String to a boolean object.

    Accepted values are `True` and `1`.
    """
    if value is None:
        return False

    if isinstance(value, bool):
        return value

    return str(value).lower() in ("true", "1")


def parse_tags_str(tags_str: Optional[str]) -> Dict[str, str]:
    """
    Parses a string containing key-value pairs and returns a dictionary.
    Key-value pairs are delimited by ':', and pairs are separated by whitespace, comma, OR BOTH.

    :param tags_str: A string of the above form to parse tags from.
    :return: A dict containing the tags that were parsed.
    """
    res: Dict[str, str] = {}
    if not tags_str:
        return res
    # falling back to comma as separator
    sep = "," if "," in tags_str else " "

    for tag in tags_str.split(sep):
        tag = tag.strip()
        if not tag:
            # skip empty tags
            continue
        elif ":" in tag:
            # if tag contains a colon, split on the first colon
            key, val = tag.split(":", 1)
        else:
            # if tag does not contain a colon, use the whole string as the key
            key, val = tag, ""
        key, val = key.strip(), val.strip()
        if key:
            res[key] = val
    return res


def parse_list_str(value: Optional[str]) -> List[str]:
    """Split a comma separated string into its non empty, stripped fragments."""
    if not isinstance(value, str):
        return []

    fragments = [s.strip() for s in value.split(",")]
    return [f for f in fragments if f != ""]


def to_text(value):
    # type: (Any) -> Optional[str]
    """Render ``value`` as text, or ``None`` when it cannot be rendered."""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="backslashreplace")
    try:
        return str(value)
    except Exception:
        return None
