"""
Graph Builder

Folds parsed blocks into the Devgraph aggregate. Pure structural assembly:
referential problems (duplicates, dangling names) are left for the
validator to report.
"""
from __future__ import annotations

import logging
from typing import Iterable

from .models import ApiBlock, BlockType, Devgraph, DevgraphBlock, EnvBlock, ServiceNode

logger = logging.getLogger(__name__)


def build_graph(blocks: Iterable[DevgraphBlock]) -> Devgraph:
    """
    Build a Devgraph from blocks in encounter order.

    Pass 1 registers services; the first block declaring a name wins.
    Pass 2 indexes API blocks by service (last one wins) and attaches API
    and env blocks to their service when it exists.
    """
    blocks = list(blocks)
    graph = Devgraph()

    for block in blocks:
        if block.type != BlockType.SERVICE:
            continue
        name = block.data.name
        if name in graph.services:
            logger.debug(f"Ignoring later declaration of service '{name}' at {block.location}")
            continue
        graph.services[name] = ServiceNode.from_block(block.data)

    for block in blocks:
        if block.type == BlockType.API:
            api: ApiBlock = block.data
            graph.apis[api.service] = api
            if api.service in graph.services:
                graph.services[api.service].apis.append(api)
        elif block.type == BlockType.ENV:
            env: EnvBlock = block.data
            if env.service in graph.services:
                graph.services[env.service].env.append(env)

    logger.info(f"Built graph with {len(graph.services)} services and {len(graph.apis)} API entries")
    return graph
