"""Pytest configuration and shared fixtures."""

import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add src to Python path
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

# Set test environment variables
os.environ.setdefault("TESTING", "true")

from crd_mcp_server.core import ResourceIndex  # noqa: E402
from crd_mcp_server.loaders import DataLoader  # noqa: E402
from crd_mcp_server.tools import ResourceQueries  # noqa: E402


CRDS_YAML = """\
apiVersion: apiextensions.k8s.io/v1
kind: CustomResourceDefinition
metadata:
  name: redisclusters.cache.example.com
spec:
  group: cache.example.com
  names:
    kind: RedisCluster
    plural: redisclusters
    singular: rediscluster
    shortNames:
      - rc
  scope: Namespaced
  versions:
    - name: v1alpha1
      served: true
      storage: true
      schema:
        openAPIV3Schema:
          description: A managed Redis cluster
          type: object
---
apiVersion: apiextensions.k8s.io/v1
kind: CustomResourceDefinition
metadata:
  name: kafkatopics.messaging.example.com
  annotations:
    description: Kafka topic with partitions and retention
spec:
  group: messaging.example.com
  names:
    kind: KafkaTopic
    plural: kafkatopics
  scope: Namespaced
  versions:
    - name: v1
---
apiVersion: v1
kind: ConfigMap
metadata:
  name: not-a-crd
data:
  key: value
"""

WEBAPP_CRD_YAML = """\
apiVersion: apiextensions.k8s.io/v1
kind: CustomResourceDefinition
metadata:
  name: webapps.example.com
spec:
  group: example.com
  names:
    kind: WebApp
    plural: webapps
    shortNames: [wa]
  scope: Cluster
  versions:
    - name: v1
    - name: v2
"""

REDIS_SIMPLE_YAML = """\
apiVersion: cache.example.com/v1alpha1
kind: RedisCluster
metadata:
  name: simple-redis
spec:
  replicas: 1
"""

REDIS_PRODUCTION_YAML = """\
# Production Redis cluster with persistence
apiVersion: cache.example.com/v1alpha1
kind: RedisCluster
metadata:
  name: prod-redis
  labels:
    environment: production
spec:
  replicas: 3
  serviceAccountName: redis
  resources:
    limits:
      memory: 2Gi
  securityContext:
    runAsNonRoot: true
  volumeMounts:
    - name: data
      mountPath: /data
  env:
    - name: REDIS_PASSWORD
      value: from-secret
"""

REDIS_GUIDE_MD = """\
---
title: Redis Setup
category: database
priority: 10
tags:
  - redis
  - production
applicableCRDs:
  - RedisCluster
---

# Redis Cluster Guide

Configure RedisCluster resources for production.

## Best Practices

- Always enable persistence for production clusters
- Set memory limits on every replica
"""

SERVICE_GUIDE_MD = """\
# Service Guidelines

How to expose a WebApp through a gateway.

```yaml
apiVersion: example.com/v1
kind: WebApp
```
"""

BROKEN_PRIORITY_MD = """\
---
title: Messaging Notes
category: messaging
priority: high
---
Kafka topics need a retention policy.
"""


def write_data_dir(root: Path) -> Path:
    """Write a small but complete data directory under root."""
    (root / "crds").mkdir(parents=True)
    (root / "samples" / "redis").mkdir(parents=True)
    (root / "instructions" / "general").mkdir(parents=True)

    (root / "crds" / "platform.yaml").write_text(CRDS_YAML)
    (root / "crds" / "webapp.yml").write_text(WEBAPP_CRD_YAML)
    (root / "crds" / "broken.yaml").write_text("spec: [unclosed\n")
    (root / "crds" / "notes.txt").write_text("ignored")

    (root / "samples" / "redis" / "redis-simple.yaml").write_text(REDIS_SIMPLE_YAML)
    (root / "samples" / "redis" / "redis-production.yaml").write_text(REDIS_PRODUCTION_YAML)

    (root / "instructions" / "redis-setup.md").write_text(REDIS_GUIDE_MD)
    (root / "instructions" / "general" / "service-guide.md").write_text(SERVICE_GUIDE_MD)
    (root / "instructions" / "messaging.txt").write_text(BROKEN_PRIORITY_MD)
    return root


@pytest.fixture
def data_dir():
    """Create a temporary data directory with CRDs, samples and instructions."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield write_data_dir(Path(tmpdir))


@pytest.fixture
def loaded_index(data_dir):
    """ResourceIndex built from the temporary data directory."""
    loaded = DataLoader(data_dir).load()
    return ResourceIndex.build(loaded.definitions, loaded.examples, loaded.guidance)


@pytest.fixture
def queries(loaded_index):
    """Query façade over the loaded index."""
    return ResourceQueries(loaded_index)
