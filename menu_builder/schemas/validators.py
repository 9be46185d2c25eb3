from typing import Optional

URL_PREFIXES = ("http://", "https://", "/uploads/")


def validate_image_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if value == "":
        return None
    if not value.startswith(URL_PREFIXES):
        raise ValueError("must be an http(s) URL")
    return value
