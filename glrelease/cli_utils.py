"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
import traceback
import click
from functools import wraps
from typing import Any, Dict

from .config import configure_logging, load_config, Source
from .exit_codes import (
    INTERRUPTED,
    get_exit_code_for_exception, CommandError, ConfigurationError
)
from .infra.gitlab_client import GitLabClient
from .render import render_error

logger = logging.getLogger(__name__)


def read_request(stream) -> Dict[str, Any]:
    """
    Read the request object a CI orchestrator writes to stdin.

    Raises:
        ConfigurationError: if stdin is empty, not JSON, or not an object
    """
    raw = stream.read()
    if not raw.strip():
        raise ConfigurationError("no request on stdin")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"invalid request JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ConfigurationError("request must be a JSON object")
    return payload


def create_client(source: Source, config: Dict[str, Any]) -> GitLabClient:
    """Build the GitLab client for a request's source."""
    timeout = config.get('gitlab', {}).get('timeout_seconds', 30)
    return GitLabClient(source, timeout=timeout)


def resource_command(func):
    """
    Decorator that provides the resource protocol around a command:
    - Configuration and logging set up before anything else
    - The JSON request read from stdin and handed to the command
    - Exactly one JSON document on stdout on success
    - On failure: diagnostic on stderr, nothing on stdout, non-zero exit

    The wrapped function receives (payload, config, **click_params) and
    returns a JSON-serializable result.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        debug = kwargs.pop('debug', False)

        try:
            config = load_config()
            configure_logging(config, debug=debug)
            payload = read_request(sys.stdin)

            result = func(payload, config, *args, **kwargs)

            # Serialize before writing so a failure leaves stdout empty
            output = json.dumps(result, ensure_ascii=False)

        except KeyboardInterrupt:
            render_error("interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            render_error(str(e))
            sys.exit(e.exit_code)
        except Exception as e:
            logger.debug(traceback.format_exc())
            render_error(f"command failed: {e}", type(e).__name__)
            sys.exit(get_exit_code_for_exception(e))

        click.echo(output)

    return wrapper


debug_option = click.option('--debug', is_flag=True, help='Enable debug logging on stderr')
