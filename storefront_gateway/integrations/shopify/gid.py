"""Shopify global IDs (gid://shopify/<Type>/<id>)."""

GID_PREFIX = "gid://"


def to_gid(identifier: str, resource: str) -> str:
    """Prefix a bare ID with the gid scheme; IDs already in gid form pass through."""
    identifier = str(identifier).strip()
    if identifier.startswith(GID_PREFIX):
        return identifier
    return f"gid://shopify/{resource}/{identifier}"
