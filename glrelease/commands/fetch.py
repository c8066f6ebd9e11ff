"""
Handles the 'in' command: download one release into a directory.

Request (stdin):
    {"source": {...}, "version": {"tag": "v1.2.0"},
     "params": {"globs": [...], "include_sources": ["zip"]}}

Response (stdout):
    {"version": {...}, "metadata": [...]}
"""

from pathlib import Path

import click

from ..cli_utils import create_client, debug_option, resource_command
from ..domain.request import InRequest
from ..render import render_fetched_files
from ..services.fetch_service import FetchService


@click.command(name='in')
@click.argument('dest', type=click.Path(file_okay=False, path_type=Path))
@debug_option
@resource_command
def in_handler(payload, config, dest):
    """Fetch the requested release into DEST.

    \b
    Writes tag, version, commit_sha and body files, then every asset link
    matching params.globs and the requested source archives.
    """
    request = InRequest.from_dict(payload, config)

    with create_client(request.source, config) as client:
        response = FetchService(client).run(dest, request)

    render_fetched_files(response.files, response.metadata)
    return response.to_dict()
