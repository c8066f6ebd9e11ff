#!/usr/bin/env python3

import click

from glrelease.commands.check import check_handler
from glrelease.commands.fetch import in_handler
from glrelease.commands.publish import out_handler


@click.group()
@click.version_option()
def cli():
    """glrelease - GitLab releases as a CI pipeline resource.

    Each command reads a JSON request on stdin and writes one JSON document
    on stdout. Diagnostics go to stderr.
    """
    pass


cli.add_command(check_handler, name='check')
cli.add_command(in_handler, name='in')
cli.add_command(out_handler, name='out')


def main():
    cli()


# Single-purpose executables, installed as /opt/resource/{check,in,out}
def check_main():
    check_handler(prog_name='glrelease-check')


def in_main():
    in_handler(prog_name='glrelease-in')


def out_main():
    out_handler(prog_name='glrelease-out')


if __name__ == "__main__":
    main()
