"""Main CLI entry point for the access-key client."""

import sys
from pathlib import Path
from typing import Optional
import click
from rich.console import Console

from . import __version__
from .core.config import Config
from .core.client import ApiClient
from .core.logging import setup_logging
from .core.exceptions import (
    ProxyKeyClientError,
    ConfigurationError,
    FingerprintMismatch,
    HttpError,
)
from .formatters import format_output
from .commands.keys import keys_group

# Console for error output
console = Console(stderr=True)


class Context:
    """Click context object for sharing state between commands."""
    
    def __init__(self):
        """Initialize context."""
        self.config: Optional[Config] = None
        self.output_format: str = 'auto'
        self.debug: bool = False
    
    def make_client(self) -> ApiClient:
        """Create an API client from the loaded configuration.
        
        Raises:
            ConfigurationError: If configuration is missing or unusable
        """
        if not self.config:
            raise ConfigurationError("Configuration not initialized")
        return ApiClient.from_config(self.config)
    
    def output(self, data, **kwargs):
        """Output data in configured format.
        
        Args:
            data: Data to output
            **kwargs: Additional formatter options
        """
        click.echo(format_output(data, self.output_format, **kwargs))
    
    def exit(self, code: int):
        sys.exit(code)
    
    def handle_error(self, error: Exception):
        """Handle and display errors.
        
        Args:
            error: Exception to handle
        """
        if self.debug:
            console.print_exception()
        else:
            if isinstance(error, FingerprintMismatch):
                console.print(f"[red]Server certificate does not match the pinned fingerprint for {error.host}[/red]")
                console.print(f"  [dim]expected:[/dim] {error.expected}")
                console.print(f"  [dim]actual:[/dim] {error.actual or 'no certificate'}")
            elif isinstance(error, ConfigurationError):
                console.print(f"[red]Configuration error: {error.message}[/red]")
            elif isinstance(error, HttpError):
                console.print(f"[red]Error: {error.message}[/red]")
                if error.response_text:
                    console.print(f"  [dim]response:[/dim] {error.response_text}")
            elif isinstance(error, ProxyKeyClientError):
                console.print(f"[red]Error: {error.message}[/red]")
            else:
                console.print(f"[red]Unexpected error: {str(error)}[/red]")
        
        # Set appropriate exit code
        if isinstance(error, FingerprintMismatch):
            self.exit(4)
        elif isinstance(error, ConfigurationError):
            self.exit(2)
        else:
            self.exit(1)


@click.group()
@click.option(
    '--api-url',
    envvar='API_URL',
    help='Management API URL, including the secret path'
)
@click.option(
    '--cert-sha256',
    envvar='CERT_SHA256',
    help='Pinned SHA-256 fingerprint of the server certificate'
)
@click.option(
    '--format',
    'output_format',
    type=click.Choice(['json', 'table', 'yaml', 'auto']),
    default='auto',
    help='Output format'
)
@click.option(
    '--profile',
    default='default',
    help='Configuration profile to use'
)
@click.option(
    '--config',
    'config_file',
    type=click.Path(exists=False, path_type=Path),
    help='Configuration file path'
)
@click.option(
    '--timeout',
    type=float,
    envvar='REQUEST_TIMEOUT',
    help='Request timeout in seconds'
)
@click.option(
    '--debug/--no-debug',
    envvar='DEBUG',
    default=False,
    help='Enable debug output'
)
@click.version_option(version=__version__, prog_name='proxy-key-client')
@click.pass_context
def cli(ctx, api_url, cert_sha256, output_format, profile, config_file, timeout, debug):
    """Proxy Key Client - Manage access keys on a proxy server.
    
    Environment variables:
        API_URL: Management API URL (contains the API secret)
        CERT_SHA256: Pinned server certificate fingerprint
        LOG_LEVEL: Logging level (TRACE, DEBUG, INFO, WARNING, ERROR)
    
    Examples:
        proxy-keys keys list
        proxy-keys keys create --name alice
        proxy-keys keys limit 3 50000000000
    """
    context = Context()
    context.output_format = output_format
    context.debug = debug
    
    try:
        if config_file:
            context.config = Config.from_file(config_file, profile)
        else:
            context.config = Config.from_env()
    except ConfigurationError as e:
        context.handle_error(e)
    
    setup_logging(context.config.log_level, debug=debug)
    
    # Override with command-line options
    if api_url:
        context.config.api_url = api_url
    if cert_sha256:
        context.config.cert_sha256 = cert_sha256
    if timeout:
        context.config.request_timeout = timeout
        context.config.connect_timeout = min(timeout, context.config.connect_timeout)
    
    for warning in context.config.validate():
        console.print(f"[yellow]Warning: {warning}[/yellow]")
    
    ctx.obj = context


cli.add_command(keys_group)


def main():
    """Main entry point for the CLI."""
    try:
        cli(obj=None)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == '__main__':
    main()
