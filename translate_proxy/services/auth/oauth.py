"""
OAuth module: obtains the long-lived OAuth token from the operator and checks
it by exchanging it for an access token.
"""

import logging

from ...config import PROMPT_MAX_ATTEMPTS
from ...errors import PromptInputError, TokenRefreshError
from ..prompt import Prompter
from .token_manager import TokenManager

logger = logging.getLogger(__name__)


def _ask_oauth_token(prompter: Prompter, oauth_token_url: str) -> str:
    prompter.show(f"Please go to {oauth_token_url}")
    prompter.show("in order to obtain OAuth token.")
    return prompter.ask("Please enter OAuth token: ")


async def ensure_oauth_token(
    token_manager: TokenManager,
    prompter: Prompter,
    oauth_token_url: str,
    max_attempts: int = PROMPT_MAX_ATTEMPTS,
) -> str:
    """
    Make sure a working OAuth token is configured.

    Prompts for a token when none is stored, then requests an access token
    with it. A 401 from the exchange means the OAuth token was rejected: it is
    cleared and the operator is asked again.

    Args:
        token_manager: Token manager holding the credentials
        prompter: Interactive input capability
        oauth_token_url: Page where the operator can obtain a token
        max_attempts: Number of rejected tokens tolerated before giving up

    Returns:
        A valid access token

    Raises:
        TokenRefreshError: If the exchange fails for a reason other than 401
        PromptInputError: If no token can be read or all attempts are rejected
    """
    credentials = token_manager.credentials

    for _ in range(max_attempts):
        if not credentials.oauth_token:
            credentials.oauth_token = _ask_oauth_token(prompter, oauth_token_url)
            credentials.clear_access_token()

        try:
            # The config file is written once after bootstrap
            return await token_manager.get_access_token(persist_on_refresh=False)
        except TokenRefreshError as e:
            if not e.is_status(401):
                raise
            logger.warning("OAuth token rejected, asking for a new one")
            prompter.show("The OAuth token was rejected.")
            credentials.oauth_token = ""
            credentials.clear_access_token()

    raise PromptInputError(f"no valid OAuth token after {max_attempts} attempts")
