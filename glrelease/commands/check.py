"""
Handles the 'check' command: list versions newer than the checkpoint.

Request (stdin):
    {"source": {...}, "version": {"tag": "v1.2.0"} | null}

Response (stdout):
    [{"tag": "v1.2.0", "commit_sha": "..."}, ...]   oldest first
"""

import click

from ..cli_utils import create_client, debug_option, resource_command
from ..domain.request import CheckRequest
from ..services.check_service import CheckService


@click.command(name='check')
@debug_option
@resource_command
def check_handler(payload, config):
    """Report new versions since the given one as a JSON list on stdout."""
    request = CheckRequest.from_dict(payload, config)
    per_page = int(config.get('gitlab', {}).get('per_page', 100))

    with create_client(request.source, config) as client:
        versions = CheckService(client, per_page=per_page).run(request)

    return [version.to_dict() for version in versions]
