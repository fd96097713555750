"""
Main CLI entry point for ws-loader.

This module provides the command-line interface for the tool, allowing users
to perform a single request and inspect the normalized response.
"""

import json
import sys
from typing import Dict, List, Optional

import click
from rich.console import Console
from rich.markup import escape

from ws_loader.clients.base import (
    OPT_FOLLOW_LOCATION,
    OPT_SSL_VERIFY_HOST,
    OPT_SSL_VERIFY_PEER,
    OPT_TIMEOUT,
)
from ws_loader.core.loader import Loader
from ws_loader.core.options import HTTP_METHODS, RequestOptions
from ws_loader.utils.logging import get_logger, setup_logging

console = Console()


def _parse_pairs(values: List[str], separator: str, label: str) -> Dict[str, str]:
    pairs = {}
    for item in values:
        name, sep, value = item.partition(separator)
        if not sep or not name.strip():
            console.print(f"[bold red]Error:[/] Invalid {label} format: {item}")
            sys.exit(1)
        pairs[name.strip()] = value.strip()
    return pairs


@click.group()
@click.version_option(package_name='ws-loader')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--log-file', help='Log file path')
def cli(debug: bool, log_file: Optional[str]):
    """ws-loader: a minimal single-request HTTP client."""
    setup_logging(level=10 if debug else 20, log_file=log_file, verbose=debug)


@cli.command()
@click.argument('url')
@click.option('--method', '-m', default='GET', type=click.Choice(sorted(HTTP_METHODS)), help='HTTP method to use')
@click.option('--header', '-H', multiple=True, help='HTTP header "Name: Value" (can be used multiple times)')
@click.option('--cookie', '-b', multiple=True, help='Cookie "name=value" (can be used multiple times)')
@click.option('--data', '-d', help='Pre-encoded POST body')
@click.option('--query', '-q', help='Pre-encoded query string merged into the URL')
@click.option('--timeout', '-t', default=60, type=int, help='Request timeout in seconds')
@click.option('--no-follow', is_flag=True, help='Do not follow redirects')
@click.option('--insecure', is_flag=True, help='Skip TLS certificate and hostname verification')
@click.option('--pause', default=0, type=int, help='Pause after the request, in microseconds')
@click.option('--json', 'as_json', is_flag=True, help='Print the body decoded as JSON')
@click.option('--output', '-o', help='Output file for the response body')
@click.option('--verbose', '-v', is_flag=True, help='Print response headers')
def request(
    url: str,
    method: str,
    header: List[str],
    cookie: List[str],
    data: Optional[str],
    query: Optional[str],
    timeout: int,
    no_follow: bool,
    insecure: bool,
    pause: int,
    as_json: bool,
    output: Optional[str],
    verbose: bool,
):
    """Send a single request to URL and print the response."""
    transport = {OPT_TIMEOUT: timeout, OPT_FOLLOW_LOCATION: not no_follow}
    if insecure:
        transport[OPT_SSL_VERIFY_PEER] = False
        transport[OPT_SSL_VERIFY_HOST] = False

    options = RequestOptions(
        headers=_parse_pairs(header, ':', 'header'),
        cookies=_parse_pairs(cookie, '=', 'cookie'),
        transport=transport,
        post_params=data or {},
        get_params=query or {},
    )

    try:
        response = Loader(url, method, options, pause=pause).load()
    except ValueError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    if response is None:
        console.print(f"[bold red]Error:[/] No response from {url}")
        sys.exit(1)

    console.print(f"[bold green]Status:[/] {response.get_response_status_code()}")

    if verbose:
        console.print("\n[bold green]Response headers:[/]")
        for name, value in response.get_response_headers().items():
            if isinstance(value, dict):
                for cookie_name, cookie_value in value.items():
                    console.print(f"  [blue]{escape(name)}:[/] {escape(cookie_name)}={escape(cookie_value)}", highlight=False)
            else:
                console.print(f"  [blue]{escape(name)}:[/] {escape(value)}", highlight=False)

    console.print("\n[bold green]Response body:[/]")
    if as_json:
        console.print_json(json.dumps(response.to_array()))
    else:
        console.print(response.to_string(), markup=False, highlight=False)

    if output:
        try:
            with open(output, 'w', encoding='utf-8') as f:
                f.write(response.to_string())
            console.print(f"[bold green]Response saved to:[/] {output}")
        except OSError as e:
            console.print(f"[bold red]Error saving response to file:[/] {e}")
            sys.exit(1)


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except Exception as e:
        console.print(f"[bold red]Unexpected error:[/] {e}")
        get_logger().exception("Unhandled exception in main")
        sys.exit(1)


if __name__ == '__main__':
    main()
