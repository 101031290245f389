"""Access key management commands."""

import asyncio
import click
from rich.console import Console


console = Console(stderr=True)


def _run(ctx, operation):
    """Run ``operation(api)`` on a fresh client and close it afterwards."""
    async def runner():
        async with ctx.make_client() as api:
            return await operation(api)
    return asyncio.run(runner())


@click.group('keys')
def keys_group():
    """Manage access keys."""
    pass


@keys_group.command('list')
@click.option('--show-uri', is_flag=True, help='Include access URIs in table output')
@click.pass_obj
def list_keys(ctx, show_uri):
    """List access keys with their transfer usage."""
    try:
        keys = _run(ctx, lambda api: api.list_keys())
        ctx.output([key.to_dict() for key in keys], title="Access Keys", show_uri=show_uri)
    except Exception as e:
        ctx.handle_error(e)


@keys_group.command('create')
@click.option('--name', help='Name for the new key')
@click.pass_obj
def create_key(ctx, name):
    """Create a new access key."""
    try:
        key = _run(ctx, lambda api: api.create_key(name))
        if name is not None and key.name != name:
            console.print(f"[yellow]Key {key.id} was created but could not be named '{name}'[/yellow]")
        ctx.output(key.to_dict(), title="New Access Key", show_uri=True)
    except Exception as e:
        ctx.handle_error(e)


@keys_group.command('rename')
@click.argument('key_id')
@click.argument('name')
@click.pass_obj
def rename_key(ctx, key_id, name):
    """Rename an access key."""
    try:
        if _run(ctx, lambda api: api.rename_key(key_id, name)):
            console.print(f"[green]Key {key_id} renamed to '{name}'[/green]")
        else:
            console.print(f"[red]Server did not acknowledge renaming key {key_id}[/red]")
            ctx.exit(1)
    except Exception as e:
        ctx.handle_error(e)


@keys_group.command('limit')
@click.argument('key_id')
@click.argument('limit_bytes', type=click.IntRange(min=0))
@click.pass_obj
def set_limit(ctx, key_id, limit_bytes):
    """Set the data limit of an access key, in bytes."""
    try:
        if _run(ctx, lambda api: api.add_data_limit(key_id, limit_bytes)):
            console.print(f"[green]Data limit of key {key_id} set to {limit_bytes} bytes[/green]")
        else:
            console.print(f"[red]Server did not acknowledge the data limit for key {key_id}[/red]")
            ctx.exit(1)
    except Exception as e:
        ctx.handle_error(e)
