"""
``rosetta-server`` launcher.
"""
import logging

import click
import uvicorn

from .chains import blockchain_config
from .config import Settings
from .main import create_app
from .utils.errors import UnsupportedNetwork
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


@click.command()
@click.option('--blockchain', envvar='ROSETTA_BLOCKCHAIN', help='Blockchain to serve, e.g. bitcoin')
@click.option('--network', envvar='ROSETTA_NETWORK', help='Network of the blockchain, e.g. regtest')
@click.option('--addr', envvar='ROSETTA_BIND_ADDR', help='Address to bind, host:port')
@click.option('--node-addr', envvar='ROSETTA_NODE_ADDR', help='Node RPC address')
@click.option('--path', 'data_dir', envvar='ROSETTA_DATA_DIR', type=click.Path(file_okay=False),
              help='Data directory for the response cache')
@click.option('--connector', envvar='ROSETTA_CONNECTOR',
              help='Connector as module:Class or a rosetta.connectors entry point name')
@click.option('--log-level', envvar='ROSETTA_LOG_LEVEL', default='INFO', show_default=True)
@click.option('--log-dir', envvar='ROSETTA_LOG_DIR', help='Directory for rotating log files')
def main(blockchain, network, addr, node_addr, data_dir, connector, log_level, log_dir):
    """Serve the Rosetta API for one network."""
    settings = Settings.from_env(
        blockchain=blockchain,
        network=network,
        bind_addr=addr,
        node_addr=node_addr,
        data_dir=data_dir,
        connector=connector,
        log_level=log_level,
        log_dir=log_dir,
    )
    try:
        config = blockchain_config(settings.blockchain, settings.network)
    except UnsupportedNetwork as e:
        raise click.BadParameter(e.message, param_hint='--network')
    if settings.node_addr is None:
        settings.node_addr = f"http://127.0.0.1:{config.node_port}"

    setup_logging('rosetta_server', settings.log_level, settings.log_dir)
    logger.info(f"Serving {config.blockchain}/{config.network} on {settings.bind_addr}, node {settings.node_addr}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == '__main__':
    main()
