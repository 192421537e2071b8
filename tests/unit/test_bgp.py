import yaml

from cilium_demo.bgp import build_cluster_config, render_cluster_config
from cilium_demo.config import RouterSettings


def test_cluster_config_peers_with_router():
    manifest = build_cluster_config(RouterSettings(), "172.18.0.5")

    assert manifest["kind"] == "CiliumBGPClusterConfig"
    instance = manifest["spec"]["bgpInstances"][0]
    assert instance["localASN"] == 64513
    assert instance["name"] == "64513"
    peer = instance["peers"][0]
    assert peer == {
        "name": "frr",
        "peerASN": 64512,
        "peerAddress": "172.18.0.5",
        "peerConfigRef": {"name": "frr"},
    }


def test_cluster_config_excludes_control_plane():
    manifest = build_cluster_config(RouterSettings(), "172.18.0.5")

    expression = manifest["spec"]["nodeSelector"]["matchExpressions"][0]
    assert expression["key"] == "node-role.kubernetes.io/control-plane"
    assert expression["operator"] == "DoesNotExist"


def test_rendered_cluster_config_is_valid_yaml():
    text = render_cluster_config(RouterSettings(), "172.18.0.5")

    assert yaml.safe_load(text) == build_cluster_config(RouterSettings(), "172.18.0.5")
