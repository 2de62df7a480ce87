"""GitHub token lookup for the REST client.

The token is resolved once, when the context is created. GH_TOKEN wins over
GITHUB_TOKEN, and only when neither is set is `gh auth token` asked for the
configured host.
"""

import os

from cslaunch.subprocess_utils import run_subprocess_with_context

TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")


def resolve_github_token(hostname: str) -> str:
    """Return the first token from TOKEN_ENV_VARS, else the gh CLI's token.

    Raises:
        RuntimeError: If gh is missing or not logged in to hostname
        ValueError: If gh returns an empty token
    """
    for name in TOKEN_ENV_VARS:
        token = os.environ.get(name, "").strip()
        if token:
            return token
    return fetch_github_token(hostname)


def fetch_github_token(hostname: str) -> str:
    """Ask `gh auth token` for the token stored for hostname."""
    result = run_subprocess_with_context(
        cmd=["gh", "auth", "token", "--hostname", hostname],
        operation_context=f"fetch GitHub token for {hostname}",
    )
    token = result.stdout.strip()
    if not token:
        raise ValueError(f"gh returned an empty token for {hostname}")
    return token
