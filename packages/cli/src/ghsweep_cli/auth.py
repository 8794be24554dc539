"""GitHub token resolution with gh CLI fallback and interactive setup.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable (the .env file is loaded into the
     environment by the CLI entry point before this runs)
  2. `gh auth token` (GitHub CLI session, works after `gh auth login`)
  3. Ask the operator and store the answer in the .env file
"""

from __future__ import annotations

import logging
import os
import subprocess

from dotenv import load_dotenv, set_key

from ghsweep_core.shell import Shell

logger = logging.getLogger(__name__)

TOKEN_VAR = "GITHUB_TOKEN"
TOKENS_URL = "https://github.com/settings/tokens"


def resolve_github_token() -> str | None:
    """Return a GitHub token or None if no valid source is available.

    Never raises; callers decide whether to fall back to provisioning.
    """
    token = os.environ.get(TOKEN_VAR)
    if token:
        return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            gh_token = result.stdout.strip()
            if gh_token:
                logger.debug("Resolved GitHub token via gh CLI session.")
                return gh_token
    except (FileNotFoundError, subprocess.TimeoutExpired):
        # gh is not installed or timed out.
        pass

    return None


def provision_github_token(shell: Shell, env_file: str) -> str | None:
    """Ask the operator for a token and append it to ``env_file``.

    Returns the token, or None if the operator entered nothing.
    """
    with shell.frame("Could not find GitHub Token"):
        shell.notice(f"We could not find your token in the environment or the {env_file} file.")
        shell.notice(f"Please go to {TOKENS_URL} and generate a token with repo and delete_repo scopes.")
        shell.notice(
            f"It will be stored in {env_file}. If you'd rather not paste it here, "
            f"add {TOKEN_VAR}=<token> to {env_file} yourself.",
            "dim",
        )
        token = shell.ask("What is your token?", hide_input=True).strip()
        if not token:
            return None

        set_key(env_file, TOKEN_VAR, token)
        load_dotenv(env_file, override=True)
        logger.debug("Stored GitHub token in %s", env_file)
        return token
