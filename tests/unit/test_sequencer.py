from pathlib import Path

import pytest

from cilium_demo.cleanup import Teardown
from cilium_demo.errors import MissingFileError, ReadinessTimeout
from cilium_demo.events import StepFailed, StepStarted, StepSucceeded
from cilium_demo.sequencer import SetupSequencer
from cilium_demo.steps import SETUP_STEPS


def test_setup_runs_every_step_in_order(lab_config, runner):
    sequencer = SetupSequencer(lab_config, runner)

    events = sequencer.run()

    succeeded = [e.name for e in events if isinstance(e, StepSucceeded)]
    assert succeeded == [step.name for step in SETUP_STEPS]

    # dependency order of the externally visible operations
    order = [
        runner.index("docker", "info"),
        runner.index("kind", "create", "cluster"),
        runner.index("docker", "pull"),
        runner.index("helm", "upgrade", "--install"),
        runner.index("cilium", "status", "--wait"),
        runner.index("kubectl", "apply", "-f", str(lab_config.asset("boutique-manifests.yaml"))),
        runner.index("docker", "run", "-d"),
        runner.index("kubectl", "apply", "-f", "-"),
        runner.index("kubectl", "wait", "--for=condition=Programmed"),
    ]
    assert order == sorted(order)


def test_setup_on_fresh_host_does_not_delete_anything(lab_config, runner):
    SetupSequencer(lab_config, runner).run()

    assert runner.called("kind", "delete") == []
    assert len(runner.called("kind", "create", "cluster")) == 1


def test_setup_removes_stale_cluster_and_router_first(lab_config, runner):
    runner.on("kind", "get", "clusters", stdout="kind\n")
    runner.on("docker", "ps", "-a", stdout="frr\nother\n")

    SetupSequencer(lab_config, runner).run()

    delete = runner.index("kind", "delete", "cluster", "--name", "kind")
    create = runner.index("kind", "create", "cluster")
    assert runner.index("docker", "rm", "-f", "frr") < delete < create
    assert len(runner.called("kind", "create", "cluster")) == 1


def test_rerun_creates_exactly_one_cluster_and_router(lab_config, runner):
    SetupSequencer(lab_config, runner).run()
    # second invocation sees the resources created by the first one
    runner.on("kind", "get", "clusters", stdout="kind\n")
    runner.on("docker", "ps", "-a", stdout="frr\n")
    SetupSequencer(lab_config, runner).run()

    assert len(runner.called("kind", "create", "cluster")) == 2
    assert len(runner.called("kind", "delete", "cluster")) == 1
    runs = runner.called("docker", "run", "-d")
    assert len(runs) == 2
    # every router start is preceded by a forced removal of the same name
    for run in runs:
        assert "frr" in run
    assert len(runner.called("docker", "rm", "-f", "frr")) >= 2


def test_cilium_timeout_stops_pipeline(lab_config, runner):
    runner.on("cilium", "status", stdout="cilium-agent: 0/2 ready", stderr="Error: unable to reach hubble-relay")
    runner.on("cilium", "status", "--wait", returncode=1)
    sequencer = SetupSequencer(lab_config, runner)
    failures = []

    def record(event):
        if isinstance(event, StepFailed):
            failures.append(event)

    sequencer.pipeline.subscribe(record)

    with pytest.raises(ReadinessTimeout) as excinfo:
        sequencer.run()

    assert "0/2 ready\nError: unable to reach hubble-relay" in excinfo.value.diagnostics
    assert [f.name for f in failures] == ["install-cilium"]
    # nothing dependent ran
    assert runner.called("docker", "run") == []
    assert runner.called("kubectl", "wait") == []


def test_application_timeout_is_fatal(lab_config, runner):
    runner.on("kubectl", "wait", "--for=condition=Available", returncode=1)
    runner.on("kubectl", "get", "pods", "-n", "ciscoboutique", stdout="frontend  0/1  Pending")

    with pytest.raises(ReadinessTimeout) as excinfo:
        SetupSequencer(lab_config, runner).run()

    assert "Pending" in excinfo.value.diagnostics
    assert runner.called("docker", "run") == []


def test_missing_topology_fails_before_create(lab_config, runner):
    lab_config.asset("kind.yaml").unlink()

    with pytest.raises(MissingFileError):
        SetupSequencer(lab_config, runner).run()

    assert runner.called("kind", "create") == []


def test_preload_failures_do_not_abort_setup(lab_config, runner):
    runner.on("docker", "pull", returncode=1)

    sequencer = SetupSequencer(lab_config, runner)
    sequencer.run()

    report = sequencer.context.preload_report
    assert report is not None
    assert report.pulled == []
    assert len(report.failed) == 2
    assert report.skipped is True
    assert runner.called("kind", "load") == []
    assert len(runner.called("helm", "upgrade", "--install")) == 1


def test_router_config_matches_discovered_workers(lab_config, runner):
    sequencer = SetupSequencer(lab_config, runner)
    sequencer.run()

    conf = (lab_config.router_config_dir / "frr.conf").read_text()
    neighbours = {
        line.split()[1] for line in conf.splitlines() if line.strip().endswith("remote-as 64513")
    }
    assert neighbours == {"172.18.0.3", "172.18.0.4"}
    assert "router id 172.18.0.5" in conf
    assert sequencer.context.router_ip == "172.18.0.5"

    copied = [cmd[2] for cmd in runner.called("docker", "cp")]
    assert [Path(p).name for p in copied] == ["frr.conf", "daemons", "vtysh.conf"]


def test_bgp_cluster_config_points_at_router(lab_config, runner):
    SetupSequencer(lab_config, runner).run()

    manifests = [text for cmd, text in runner.inputs if cmd == ["kubectl", "apply", "-f", "-"]]
    cluster_config = next(m for m in manifests if "CiliumBGPClusterConfig" in m)
    assert "peerAddress: 172.18.0.5" in cluster_config


def test_skipped_step_is_not_run(lab_config, runner):
    sequencer = SetupSequencer(lab_config, runner)
    sequencer.skip("preload-images")

    sequencer.run()

    assert runner.called("helm", "template") == []
    assert runner.called("docker", "pull") == []


def test_unparseable_chart_output_skips_preload(lab_config, runner):
    runner.on("helm", "template", stdout="a: b: c\n  - [unclosed\n")

    sequencer = SetupSequencer(lab_config, runner)
    sequencer.run()

    assert sequencer.context.preload_report.skipped is True
    assert runner.called("docker", "pull") == []
    assert len(runner.called("helm", "upgrade", "--install")) == 1


def test_gateway_not_programmed_stops_before_verification(lab_config, runner):
    runner.on("kubectl", "wait", "--for=condition=Programmed", returncode=1)
    runner.on("kubectl", "describe", "gateway", stdout="Reason: AddressNotAssigned")
    sequencer = SetupSequencer(lab_config, runner)
    seen = []
    sequencer.pipeline.subscribe(seen.append)

    with pytest.raises(ReadinessTimeout) as excinfo:
        sequencer.run()

    assert "cisco-boutique-gateway" in str(excinfo.value)
    assert "AddressNotAssigned" in excinfo.value.diagnostics
    assert seen[-1] == StepFailed("deploy-gateway", str(excinfo.value))
    started = [e.name for e in seen if isinstance(e, StepStarted)]
    assert "verify-deployment" not in started
    assert "summary" not in started


def test_cleanup_then_setup_rebuilds_one_environment(lab_config, runner):
    SetupSequencer(lab_config, runner).run()

    # the host now carries what setup built
    runner.on("pgrep", returncode=1)
    runner.on("kind", "get", "clusters", stdout="kind\n")
    runner.on("docker", "ps", "-a", stdout="frr\nkind-control-plane\n")
    report = Teardown(lab_config, runner).run()
    assert report.router_removed and report.cluster_deleted

    # and nothing once teardown is done
    runner.on("kind", "get", "clusters", stdout="")
    runner.on("docker", "ps", "-a", stdout="")
    teardown_calls = len(runner.calls)
    events = SetupSequencer(lab_config, runner).run()

    rebuild = runner.calls[teardown_calls:]
    assert [e.name for e in events if isinstance(e, StepSucceeded)] == [step.name for step in SETUP_STEPS]
    assert [cmd for cmd in rebuild if cmd[:2] == ["kind", "create"]] == [runner.called("kind", "create")[0]]
    assert [cmd for cmd in rebuild if cmd[:2] == ["kind", "delete"]] == []
    assert len(runner.called("kind", "delete", "cluster")) == 1
    assert len([cmd for cmd in rebuild if cmd[:3] == ["docker", "run", "-d"]]) == 1
