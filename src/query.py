"""
Targeting query construction for the DFU trigger endpoint.
"""

from typing import Dict, List
from urllib.parse import urlencode

from config import DeploymentConfig

QueryParams = Dict[str, List[str]]


def add_comma_separated_params(params: QueryParams, name: str, value: str) -> None:
    """
    Add a targeting value to ``params``.

    An empty value adds nothing. A value containing a comma adds one entry
    per trimmed, non-empty token, in order. Any other value replaces the
    entries for ``name`` with the raw value.
    """
    if not value:
        return

    if "," in value:
        for token in value.split(","):
            token = token.strip()
            if token:
                params.setdefault(name, []).append(token)
    else:
        params[name] = [value]


def build_targeting_params(config: DeploymentConfig) -> QueryParams:
    """Apply the comma-separated encoding to each targeting field of ``config``."""
    params: QueryParams = {}
    for name, value in config.targeting():
        add_comma_separated_params(params, name, value)
    return params


def encode_query(params: QueryParams) -> str:
    """Render ``params`` as a query string, keys sorted, repeated keys kept."""
    return urlencode(sorted(params.items()), doseq=True)
