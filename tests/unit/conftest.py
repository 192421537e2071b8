import shutil
from pathlib import Path

import pytest

from cilium_demo.config import LabConfig
from cilium_demo.steps.router import IP_TEMPLATE
from fakes import FakeRunner

REPO_DEPLOY = Path(__file__).resolve().parents[2] / "deploy"

HELM_TEMPLATE = """
apiVersion: apps/v1
kind: DaemonSet
metadata:
  name: cilium
spec:
  template:
    spec:
      initContainers:
        - name: config
          image: "quay.io/cilium/cilium:v1.18.4@sha256:abc123"
      containers:
        - name: cilium-agent
          image: "quay.io/cilium/cilium:v1.18.4@sha256:abc123"
---
apiVersion: apps/v1
kind: Deployment
metadata:
  name: cilium-operator
spec:
  template:
    spec:
      containers:
        - name: cilium-operator
          image: quay.io/cilium/operator-generic:v1.18.4
"""


@pytest.fixture
def assets(tmp_path: Path) -> Path:
    target = tmp_path / "deploy"
    shutil.copytree(REPO_DEPLOY, target)
    return target


@pytest.fixture
def lab_config(assets: Path, tmp_path: Path) -> LabConfig:
    return LabConfig(assets_dir=assets, state_dir=tmp_path / "state")


@pytest.fixture
def runner() -> FakeRunner:
    """A runner answering like a healthy host with a freshly created cluster."""

    fake = FakeRunner()
    fake.on("helm", "template", stdout=HELM_TEMPLATE)
    fake.on("kind", "get", "nodes", stdout="kind-control-plane\nkind-worker\nkind-worker2\n")
    fake.on("docker", "inspect", "-f", IP_TEMPLATE, "kind-worker", stdout="172.18.0.3\n")
    fake.on("docker", "inspect", "-f", IP_TEMPLATE, "kind-worker2", stdout="172.18.0.4\n")
    fake.on("docker", "inspect", "-f", IP_TEMPLATE, "frr", stdout="172.18.0.5\n")
    fake.on("kubectl", "create", "secret", stdout="kind: Secret\n")
    fake.on("kubectl", "get", "gateway", "cisco-boutique-gateway", stdout="172.18.255.200")
    return fake
