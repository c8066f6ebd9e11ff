"""
Handles the 'out' command: create or update a release from build output.

Request (stdin):
    {"source": {...},
     "params": {"tag": "path/to/tag", "tag_prefix": "v", "commitish": "...",
                "name": "...", "body": "...", "globs": ["dist/*"]}}

Response (stdout):
    {"version": {"tag": "v1.2.0"}, "metadata": [...]}
"""

from pathlib import Path

import click

from ..cli_utils import create_client, debug_option, resource_command
from ..domain.request import OutRequest
from ..render import render_links_table
from ..services.sync_service import SyncService


@click.command(name='out')
@click.argument('src', type=click.Path(exists=True, file_okay=False, path_type=Path))
@debug_option
@resource_command
def out_handler(payload, config, src):
    """Publish a release from the files under SRC.

    \b
    Param paths (tag, commitish, name, body, globs) are relative to SRC.
    Existing asset links are replaced by the files matched by params.globs.
    """
    request = OutRequest.from_dict(payload, config)

    with create_client(request.source, config) as client:
        response = SyncService.from_config(client, config).run(src, request)

    render_links_table(response.links, title=f"Release {response.version.tag}")
    return response.to_dict()
