# tests/integration/conftest.py — v1
"""Shared fixtures for integration tests using testcontainers.

Container lifecycle:
- session scope: the Neo4j container starts once per pytest session
- function scope: the database is emptied before each test

Uses DockerContainer directly with bridge network IP + internal port, so
the tests also run from a devcontainer with docker-outside-of-docker,
where localhost:mapped_port is unreachable.
"""

from __future__ import annotations

import logging
import time

import pytest

logger = logging.getLogger(__name__)


# ── Pytest markers ──────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "neo4j: marks tests requiring Neo4j container")


# =====================================================================
#  DEVCONTAINER NETWORKING HELPERS
# =====================================================================

def _get_container_bridge_ip(container, max_attempts: int = 10) -> str:
    """Get container bridge network IP with retries."""
    for attempt in range(max_attempts):
        wrapped = container.get_wrapped_container()
        wrapped.reload()
        networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
        for net_name, net_info in networks.items():
            ip = net_info.get("IPAddress", "")
            if ip:
                logger.info(
                    "Container %s IP: %s (network: %s, attempt %d)",
                    wrapped.short_id, ip, net_name, attempt + 1,
                )
                return ip
        logger.debug("Container IP empty, attempt %d/%d", attempt + 1, max_attempts)
        time.sleep(0.5)

    raise RuntimeError(
        f"Could not obtain container bridge IP after {max_attempts} attempts"
    )


def _docker_available() -> bool:
    """Check if Docker daemon is reachable."""
    try:
        import docker
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


# =====================================================================
#  NEO4J CONTAINER: session scope, bridge IP
# =====================================================================

NEO4J_IMAGE = "neo4j:5.26"
NEO4J_BOLT_PORT = 7687
NEO4J_PASSWORD = "testpassword"


@pytest.fixture(scope="session")
def neo4j_container():
    if not _docker_available():
        pytest.skip("Docker not available")
    pytest.importorskip("neo4j")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = (
        DockerContainer(NEO4J_IMAGE)
        .with_exposed_ports(NEO4J_BOLT_PORT)
        .with_env("NEO4J_AUTH", f"neo4j/{NEO4J_PASSWORD}")
    )
    container.start()
    wait_for_logs(container, predicate=r"Started\.", timeout=120)
    time.sleep(2)

    ip = _get_container_bridge_ip(container)
    logger.info("Neo4j ready at %s:%d", ip, NEO4J_BOLT_PORT)
    yield f"bolt://{ip}:{NEO4J_BOLT_PORT}"
    container.stop()


@pytest.fixture
def neo4j_store(neo4j_container):
    from tabgraph.store.neo4j_store import Neo4jStore

    store = Neo4jStore(uri=neo4j_container, user="neo4j", password=NEO4J_PASSWORD)
    store._driver.execute_query("MATCH (n) DETACH DELETE n")
    yield store
    store.close()
